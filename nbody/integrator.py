import numpy as np


def symplectic_euler(positions: np.ndarray, velocities: np.ndarray,
                     accelerations: np.ndarray, dt: float,
                     active=None):
    """
    Symplectic (semi-implicit) Euler integrator.

    v_{t+1} = v_t + a_t * dt          (kick)
    x_{t+1} = x_t + v_{t+1} * dt      (drift with NEW velocity)

    `dt` comes from the caller (fixed step or measured frame time).
    Inactive slots are returned unchanged.
    """
    if dt < 0:
        raise ValueError(f"dt must be non-negative, got {dt}")
    positions = np.asarray(positions, dtype=float)
    velocities = np.asarray(velocities, dtype=float)
    if active is None:
        active = np.ones(positions.shape[0], dtype=bool)
    mask = np.asarray(active, dtype=bool)[:, None]

    new_vel = np.where(mask, velocities + accelerations * dt, velocities)
    new_pos = np.where(mask, positions + new_vel * dt, positions)
    return new_pos, new_vel
