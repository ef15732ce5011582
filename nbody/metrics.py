import numpy as np


def compute_energy(states, masses):
    """Kinetic energy per frame. states: (T, N, 4), masses: (T, N) with 0 for inactive slots."""
    vel = states[:, :, 2:]
    return (0.5 * masses[:, :, None] * vel ** 2).sum(axis=(1, 2))


def compute_momentum(states, masses):
    vel = states[:, :, 2:]
    p = (masses[:, :, None] * vel).sum(axis=1)
    return np.linalg.norm(p, axis=1)


def relative_drift(series):
    """|x_t - x_0| / |x_0| for a scalar or vector series, (T,) result."""
    series = np.asarray(series, dtype=float)
    if series.ndim == 1:
        series = series[:, None]
    ref = np.linalg.norm(series[0])
    diff = np.linalg.norm(series - series[0], axis=1)
    if ref == 0:
        return diff
    return diff / ref
