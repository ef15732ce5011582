import numpy as np
import pytest

from nbody.forces import compute_accelerations, pair_potential, potential_energy


def _random_cloud(n=12, seed=3):
    rng = np.random.RandomState(seed)
    positions = rng.uniform(0, 100, size=(n, 2))
    velocities = rng.uniform(-2, 2, size=(n, 2))
    masses = rng.uniform(1, 10, size=n)
    return positions, velocities, masses


def test_one_force_pass_conserves_momentum():
    positions, velocities, masses = _random_cloud()
    active = np.ones(len(masses), dtype=bool)
    acc = compute_accelerations(positions, masses, active, G=1.0, min_dist2=1e-6)

    p_before = (masses[:, None] * velocities).sum(axis=0)
    p_after = (masses[:, None] * (velocities + acc * 0.5)).sum(axis=0)
    np.testing.assert_allclose(p_after, p_before, atol=1e-9)


def test_two_body_accelerations_are_equal_and_opposite():
    positions = np.array([[0.0, 0.0], [2.0, 0.0]])
    masses = np.array([2.0, 3.0])
    acc = compute_accelerations(positions, masses, np.array([True, True]), G=1.0)

    # F = 1 * 2 * 3 / 4 = 1.5
    np.testing.assert_allclose(acc[0], [0.75, 0.0])
    np.testing.assert_allclose(acc[1], [-0.5, 0.0])


def test_inactive_slots_are_ignored():
    positions = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 3.0]])
    masses = np.array([1.0, 50.0, 2.0])
    active = np.array([True, False, True])
    acc = compute_accelerations(positions, masses, active, G=1.0)

    np.testing.assert_array_equal(acc[1], [0.0, 0.0])
    # Only the pair (0, 2) interacts: F = 2 / 9
    np.testing.assert_allclose(acc[0], [0.0, 2.0 / 9.0])
    np.testing.assert_allclose(acc[2], [0.0, -1.0 / 9.0])


def test_coincident_pair_is_skipped():
    positions = np.array([[5.0, 5.0], [5.0, 5.0]])
    masses = np.array([1.0, 1.0])
    acc = compute_accelerations(positions, masses, np.array([True, True]), G=1.0)

    assert np.all(np.isfinite(acc))
    np.testing.assert_array_equal(acc, np.zeros((2, 2)))


def test_pairs_below_min_distance_are_dropped():
    positions = np.array([[0.0, 0.0], [0.01, 0.0]])
    masses = np.array([1.0, 1.0])
    acc = compute_accelerations(positions, masses, np.array([True, True]),
                                G=1.0, min_dist2=1e-3)
    np.testing.assert_array_equal(acc, np.zeros((2, 2)))


def test_empty_input():
    acc = compute_accelerations(np.zeros((0, 2)), np.zeros(0), np.zeros(0, dtype=bool))
    assert acc.shape == (0, 2)


def test_non_positive_mass_is_a_programming_error():
    positions = np.array([[0.0, 0.0], [1.0, 0.0]])
    with pytest.raises(AssertionError):
        compute_accelerations(positions, np.array([1.0, -1.0]), np.array([True, True]))


def test_potential_energy_matches_pair_sum():
    positions = np.array([[0.0, 0.0], [3.0, 0.0], [0.0, 4.0]])
    masses = np.array([1.0, 2.0, 3.0])
    expected = -(1 * 2 / 3.0 + 1 * 3 / 4.0 + 2 * 3 / 5.0)
    assert potential_energy(positions, masses, np.ones(3, dtype=bool), G=1.0) == pytest.approx(expected)


def test_pair_potential_at_zero_distance_is_unbounded():
    assert pair_potential(1.0, 1.0, 0.0) == float('inf')
    assert pair_potential(2.0, 3.0, 2.0, G=0.5) == pytest.approx(1.5)
