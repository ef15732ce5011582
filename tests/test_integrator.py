import numpy as np
import pytest

from nbody.integrator import symplectic_euler


def test_velocity_is_updated_before_position():
    pos, vel = symplectic_euler(np.array([[0.0, 0.0]]), np.array([[0.0, 0.0]]),
                                np.array([[1.0, 0.0]]), dt=1.0)
    np.testing.assert_allclose(vel, [[1.0, 0.0]])
    np.testing.assert_allclose(pos, [[1.0, 0.0]])


def test_zero_acceleration_is_straight_line():
    pos = np.array([[1.0, 2.0]])
    vel = np.array([[0.5, -0.25]])
    for _ in range(40):
        pos, vel = symplectic_euler(pos, vel, np.zeros((1, 2)), dt=0.25)
    np.testing.assert_allclose(vel, [[0.5, -0.25]])
    np.testing.assert_allclose(pos, [[1.0 + 0.5 * 10, 2.0 - 0.25 * 10]])


def test_inactive_slots_do_not_move():
    pos = np.array([[0.0, 0.0], [5.0, 5.0]])
    vel = np.array([[1.0, 0.0], [1.0, 1.0]])
    acc = np.array([[0.0, 1.0], [3.0, 3.0]])
    new_pos, new_vel = symplectic_euler(pos, vel, acc, 0.1, active=np.array([True, False]))
    np.testing.assert_array_equal(new_pos[1], [5.0, 5.0])
    np.testing.assert_array_equal(new_vel[1], [1.0, 1.0])
    np.testing.assert_allclose(new_pos[0], [0.1, 0.01])


def test_zero_dt_is_a_no_op():
    pos = np.array([[3.0, 4.0]])
    vel = np.array([[1.0, 1.0]])
    new_pos, new_vel = symplectic_euler(pos, vel, np.array([[9.0, 9.0]]), 0.0)
    np.testing.assert_array_equal(new_pos, pos)
    np.testing.assert_array_equal(new_vel, vel)


def test_negative_dt_is_rejected():
    with pytest.raises(ValueError):
        symplectic_euler(np.zeros((1, 2)), np.zeros((1, 2)), np.zeros((1, 2)), -0.1)
