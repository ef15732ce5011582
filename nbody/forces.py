"""
Pairwise gravitational force engine.

Every unordered pair (i < j) of active particles is evaluated once and the
resulting acceleration is applied to both bodies with opposite signs.
Pairs closer than `sqrt(min_dist2)` are dropped, not softened.
"""

from typing import Tuple

import numpy as np

import nbody as P


def _active_pairs(active: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    idx = np.flatnonzero(active)
    iu, ju = np.triu_indices(len(idx), k=1)
    return idx[iu], idx[ju]


def _pair_geometry(positions: np.ndarray, active: np.ndarray, min_dist2: float):
    """Index arrays, separation vectors and squared distances of the interacting pairs."""
    i, j = _active_pairs(active)
    delta = positions[j] - positions[i]
    d2 = np.einsum('ij,ij->i', delta, delta)
    keep = d2 >= min_dist2
    return i[keep], j[keep], delta[keep], d2[keep]


def compute_accelerations(positions: np.ndarray, masses: np.ndarray,
                          active: np.ndarray, G: float = P.G,
                          min_dist2: float = P.MIN_DIST2) -> np.ndarray:
    """
    positions: (N, 2), masses: (N,), active: (N,) bool
    returns: (N, 2) accelerations, zero for inactive slots
    """
    positions = np.asarray(positions, dtype=float)
    masses = np.asarray(masses, dtype=float)
    active = np.asarray(active, dtype=bool)
    acc = np.zeros_like(positions, dtype=float)
    if positions.shape[0] == 0:
        return acc
    assert np.all(masses[active] > 0), "non-positive mass reached the force engine"

    i, j, delta, d2 = _pair_geometry(positions, active, min_dist2)
    if len(i) == 0:
        return acc

    dist = np.sqrt(d2)
    direction = delta / dist[:, None]
    force = G * masses[i] * masses[j] / d2
    fvec = force[:, None] * direction

    # Newton's third law: same pair, opposite signs
    np.add.at(acc, i, fvec / masses[i][:, None])
    np.add.at(acc, j, -fvec / masses[j][:, None])
    return acc


def pair_potential(m_i: float, m_j: float, distance: float, G: float = P.G) -> float:
    """Magnitude of the mutual gravitational potential energy."""
    if distance <= 0:
        return float('inf')
    return G * m_i * m_j / distance


def potential_energy(positions: np.ndarray, masses: np.ndarray,
                     active: np.ndarray, G: float = P.G,
                     min_dist2: float = P.MIN_DIST2) -> float:
    """Total potential energy over the same pair set the force engine sees."""
    positions = np.asarray(positions, dtype=float)
    masses = np.asarray(masses, dtype=float)
    active = np.asarray(active, dtype=bool)
    if positions.shape[0] == 0:
        return 0.0
    i, j, _, d2 = _pair_geometry(positions, active, min_dist2)
    return float(-(G * masses[i] * masses[j] / np.sqrt(d2)).sum())
