"""
Collision response between overlapping particles.

A resolver applies exactly one policy per configuration:
  merge   : inelastic, lower index absorbs higher index
  elastic : impulse along the contact normal, restitution e
  stick   : mutual stuck relation + one impulse, released on KE > |PE|
  none    : overlaps are ignored
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Set, Tuple

import numpy as np

import nbody as P
from nbody.forces import pair_potential
from nbody.particles import Particle, ParticleStore

logger = logging.getLogger("nbody.collisions")


class CollisionPolicy(str, Enum):
    MERGE = 'merge'
    ELASTIC = 'elastic'
    STICK = 'stick'
    NONE = 'none'


@dataclass
class CollisionEvent:
    kind: str
    i: int
    j: int


def overlapping(a: Particle, b: Particle) -> bool:
    return np.hypot(b.x - a.x, b.y - a.y) < a.radius + b.radius


def merge_particles(a: Particle, b: Particle):
    """Fold `b` into `a` conserving mass and momentum. Caller deactivates `b`."""
    total_mass = a.mass + b.mass
    a.x = (a.mass * a.x + b.mass * b.x) / total_mass
    a.y = (a.mass * a.y + b.mass * b.y) / total_mass
    a.vx = (a.mass * a.vx + b.mass * b.vx) / total_mass
    a.vy = (a.mass * a.vy + b.mass * b.vy) / total_mass
    # Area-conserving surrogate radius
    a.radius = float(np.sqrt(a.radius**2 + b.radius**2))
    a.mass = total_mass
    a.anchor = a.anchor or b.anchor


def elastic_impulse(a: Particle, b: Particle, restitution: float = P.RESTITUTION) -> bool:
    """
    Two-body impulse along the normal a→b.
    Convention: dv = vb - va, resolve only when dvn < 0 (closing).
    Returns True if an impulse was applied.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    dist = np.hypot(dx, dy)
    if dist < 1e-12:
        return False
    nx, ny = dx / dist, dy / dist

    dvn = (b.vx - a.vx) * nx + (b.vy - a.vy) * ny
    if dvn >= 0:
        return False

    impulse = -(1.0 + restitution) * dvn / ((1.0 / a.mass) + (1.0 / b.mass))
    a.vx -= impulse * nx / a.mass
    a.vy -= impulse * ny / a.mass
    b.vx += impulse * nx / b.mass
    b.vy += impulse * ny / b.mass
    return True


def binding_exceeded(a: Particle, b: Particle, G: float = P.G) -> bool:
    """True once the pair's kinetic energy exceeds their potential-energy magnitude."""
    distance = np.hypot(b.x - a.x, b.y - a.y)
    return a.kinetic_energy + b.kinetic_energy > pair_potential(a.mass, b.mass, distance, G)


class CollisionResolver:
    def __init__(self, policy=CollisionPolicy.MERGE, G: float = P.G,
                 restitution: float = P.RESTITUTION):
        if restitution < 0:
            raise ValueError(f"restitution must be non-negative, got {restitution}")
        self.policy = CollisionPolicy(policy)
        self.G = G
        self.restitution = restitution

    def resolve(self, store: ParticleStore) -> List[CollisionEvent]:
        if self.policy is CollisionPolicy.NONE:
            return []
        if self.policy is CollisionPolicy.STICK:
            return self._resolve_stick(store)

        events: List[CollisionEvent] = []
        n = len(store)
        for i in range(n):
            for j in range(i + 1, n):
                pi, pj = store[i], store[j]
                # Earlier merges in this pass can deactivate either slot
                if not (pi.active and pj.active) or not overlapping(pi, pj):
                    continue
                if self.policy is CollisionPolicy.MERGE:
                    merge_particles(pi, pj)
                    store.deactivate(j)
                    events.append(CollisionEvent('merge', i, j))
                    logger.debug(f"merge {j} -> {i}: mass={pi.mass:.4g}")
                elif elastic_impulse(pi, pj, self.restitution):
                    events.append(CollisionEvent('bounce', i, j))
                    logger.debug(f"bounce {i} <-> {j}")
        return events

    def _stuck_pairs(self, store: ParticleStore) -> Set[Tuple[int, int]]:
        pairs = set()
        for i in store.active_indices():
            j = store.partner(i)
            if j is not None and i < j:
                pairs.add((i, j))
        return pairs

    def _resolve_stick(self, store: ParticleStore) -> List[CollisionEvent]:
        events: List[CollisionEvent] = []
        already_stuck = self._stuck_pairs(store)

        active = store.active_indices()
        for a, i in enumerate(active):
            for j in active[a + 1:]:
                if store.partner(i) is not None or store.partner(j) is not None:
                    continue
                pi, pj = store[i], store[j]
                if not overlapping(pi, pj):
                    continue
                store.stick(i, j)
                elastic_impulse(pi, pj, self.restitution)
                events.append(CollisionEvent('stick', i, j))
                logger.debug(f"stick {i} <-> {j}")

        for i, j in sorted(already_stuck):
            if binding_exceeded(store[i], store[j], self.G):
                store.unstick(i)
                events.append(CollisionEvent('unstick', i, j))
                logger.debug(f"unstick {i} <-> {j}")
        return events
