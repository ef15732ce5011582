"""
2D gravitational N-body simulation context.

- Fixed-capacity particle store, brute-force pairwise gravity
- Semi-implicit Euler with a caller-supplied dt
- One collision policy per simulation (merge / elastic / stick / none)
- Pause flag and particle selection live here, not in globals
"""

import logging
import dataclasses
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

import nbody as P
from nbody.collisions import CollisionEvent, CollisionPolicy, CollisionResolver
from nbody.colors import ColorMode, velocity_color
from nbody.forces import compute_accelerations, potential_energy
from nbody.integrator import symplectic_euler
from nbody.particles import InitConfig, ParticleStore, Pattern

logger = logging.getLogger("nbody.engine")


@dataclass
class SimulationConfig:
    n_particles: int = P.N_PARTICLES
    pattern: Pattern = Pattern(P.PATTERN)
    G: float = P.G
    min_dist2: float = P.MIN_DIST2
    collision_policy: CollisionPolicy = CollisionPolicy(P.COLLISION_POLICY)
    restitution: float = P.RESTITUTION
    color_mode: ColorMode = ColorMode(P.COLOR_MODE)
    init: InitConfig = field(default_factory=InitConfig)
    seed: Optional[int] = None

    def __post_init__(self):
        self.pattern = Pattern(self.pattern)
        self.collision_policy = CollisionPolicy(self.collision_policy)
        self.color_mode = ColorMode(self.color_mode)
        # Ring orbital speeds must match the gravity the engine applies.
        # Copy so a shared InitConfig keeps its own G.
        self.init = dataclasses.replace(self.init, G=self.G)


class Simulation:
    """
    Owns the particle store and everything the collaborators read between steps.

    Step: forces → velocity → position → collisions → colors
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 store: Optional[ParticleStore] = None):
        self.config = config or SimulationConfig()
        if store is None:
            store = ParticleStore.initialize(self.config.n_particles, self.config.pattern,
                                             self.config.init, seed=self.config.seed)
        self.store = store
        self.resolver = CollisionResolver(self.config.collision_policy, G=self.config.G,
                                          restitution=self.config.restitution)
        self.paused = False
        self.selected: Optional[int] = None
        self.following = False
        self.time = 0.0
        self.n_steps = 0
        self.collision_log: List[Dict] = []
        self._update_colors()
        logger.info(f"Simulation created: N={len(self.store)}, "
                    f"policy={self.config.collision_policy.value}, G={self.config.G}")

    # Stepping

    def step(self, dt: float) -> ParticleStore:
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        store = self.store
        active = store.active_mask()
        acc = compute_accelerations(store.positions(), store.masses(), active,
                                    G=self.config.G, min_dist2=self.config.min_dist2)
        pos, vel = symplectic_euler(store.positions(), store.velocities(), acc, dt, active)
        store.write_back(pos, vel)

        events = self.resolver.resolve(store)
        self._log_events(events)
        self._update_colors()

        self.time += dt
        self.n_steps += 1
        return store

    def tick(self, dt: float) -> bool:
        """Advance one step unless paused. Returns whether a step ran."""
        if self.paused:
            return False
        self.step(dt)
        return True

    def toggle_pause(self):
        self.paused = not self.paused

    def _log_events(self, events: List[CollisionEvent]):
        for ev in events:
            self.collision_log.append({
                'time': self.time, 'step': self.n_steps,
                'kind': ev.kind, 'i': ev.i, 'j': ev.j,
            })

    def _update_colors(self):
        for p in self.store:
            if p.active and not p.anchor:
                p.color = velocity_color(p.vx, p.vy, self.config.color_mode)

    # Selection

    def select_at(self, x: float, y: float) -> Optional[int]:
        """Click behaviour: stop following if following, else pick and follow."""
        self.selected = None
        if self.following:
            self.following = False
            return None
        self.selected = self.store.pick(x, y)
        self.following = self.selected is not None
        return self.selected

    def clear_selection(self):
        self.selected = None
        self.following = False

    def selected_particle(self):
        if self.selected is None or not self.store[self.selected].active:
            return None
        return self.store[self.selected]

    # State access

    def get_state(self) -> np.ndarray:
        """(N, 4) → [x, y, vx, vy]"""
        return self.store.get_state()

    def n_active(self) -> int:
        return int(self.store.active_mask().sum())

    # Conserved quantities

    def total_mass(self) -> float:
        return float(sum(p.mass for p in self.store if p.active))

    def total_momentum(self) -> np.ndarray:
        px = sum(p.mass * p.vx for p in self.store if p.active)
        py = sum(p.mass * p.vy for p in self.store if p.active)
        return np.array([px, py], dtype=float)

    def kinetic_energy(self) -> float:
        return float(sum(p.kinetic_energy for p in self.store if p.active))

    def potential_energy(self) -> float:
        return potential_energy(self.store.positions(), self.store.masses(),
                                self.store.active_mask(), G=self.config.G,
                                min_dist2=self.config.min_dist2)

    def center_of_mass(self) -> np.ndarray:
        total_mass = self.total_mass()
        if total_mass == 0:
            return np.zeros(2)
        cx = sum(p.mass * p.x for p in self.store if p.active) / total_mass
        cy = sum(p.mass * p.y for p in self.store if p.active) / total_mass
        return np.array([cx, cy])

    def invariants(self) -> Dict[str, np.ndarray]:
        return {
            'mass': self.total_mass(),
            'momentum': self.total_momentum(),
            'energy': self.kinetic_energy() + self.potential_energy(),
            'center_of_mass': self.center_of_mass(),
        }


def generate_trajectory(config: SimulationConfig, n_steps: int = 200,
                        dt: float = P.DT) -> Dict:
    """Returns dict with states, masses, active, energy, momentum, mass, collisions."""
    sim = Simulation(config)
    store = sim.store

    states = [store.get_state()]
    masses = [store.masses() * store.active_mask()]
    active = [store.active_mask()]
    energy = [sim.kinetic_energy() + sim.potential_energy()]
    momentum = [sim.total_momentum()]

    for _ in range(n_steps):
        sim.step(dt)
        states.append(store.get_state())
        masses.append(store.masses() * store.active_mask())
        active.append(store.active_mask())
        energy.append(sim.kinetic_energy() + sim.potential_energy())
        momentum.append(sim.total_momentum())

    return {
        'states': np.array(states),
        'masses': np.array(masses),
        'active': np.array(active),
        'config': config,
        'collisions': sim.collision_log,
        'energy': np.array(energy),
        'momentum': np.array(momentum),
        'total_mass': np.array(masses).sum(axis=1),
    }
