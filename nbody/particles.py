"""
Particle store — fixed-capacity collection of particle records.

- Slots are created once and never removed; `deactivate` is terminal
- Optional anchor body (high mass, index 0) for scatter and ring layouts
- Stuck relation is an index into the same store, checked against `active`
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np

import nbody as P

logger = logging.getLogger("nbody.particles")


class InitializationError(ValueError):
    """Raised when a store is built from an invalid configuration."""


class Pattern(str, Enum):
    SCATTER = 'scatter'
    RING = 'ring'


@dataclass
class Particle:
    """Physics state plus the derived display color."""
    x: float
    y: float
    vx: float
    vy: float
    mass: float
    radius: float
    color: Tuple[int, int, int] = (255, 255, 255)
    active: bool = True
    stuck_with: Optional[int] = None
    name: str = ''
    anchor: bool = False

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y])

    @position.setter
    def position(self, p: np.ndarray):
        self.x, self.y = float(p[0]), float(p[1])

    @property
    def velocity(self) -> np.ndarray:
        return np.array([self.vx, self.vy])

    @velocity.setter
    def velocity(self, v: np.ndarray):
        self.vx, self.vy = float(v[0]), float(v[1])

    @property
    def speed(self) -> float:
        return float(np.hypot(self.vx, self.vy))

    @property
    def momentum(self) -> np.ndarray:
        return self.mass * self.velocity

    @property
    def kinetic_energy(self) -> float:
        return 0.5 * self.mass * (self.vx**2 + self.vy**2)

    @property
    def state(self) -> np.ndarray:
        return np.array([self.x, self.y, self.vx, self.vy])


@dataclass
class InitConfig:
    width: float = P.WORLD_WIDTH
    height: float = P.WORLD_HEIGHT
    mass_range: Tuple[float, float] = P.MASS_RANGE
    radius_scale: float = P.RADIUS_SCALE
    # None → particles start at rest
    velocity_range: Optional[Tuple[float, float]] = P.VELOCITY_RANGE
    anchor: bool = False
    anchor_mass: float = P.ANCHOR_MASS
    anchor_radius: float = P.ANCHOR_RADIUS
    ring_radius_range: Tuple[float, float] = P.RING_RADIUS_RANGE
    G: float = P.G


def radius_from_mass(mass: float, scale: float = P.RADIUS_SCALE) -> float:
    """Non-linear mass → size mapping."""
    return scale * float(np.sqrt(mass))


def _check_range(name: str, bounds: Tuple[float, float], positive: bool = False):
    lo, hi = bounds
    if lo > hi:
        raise InitializationError(f"{name} is empty: {bounds}")
    if positive and lo <= 0:
        raise InitializationError(f"{name} must be strictly positive: {bounds}")


class ParticleStore:
    """Fixed-length particle array. Indices are stable for the store's lifetime."""

    def __init__(self, particles: List[Particle]):
        self._particles = particles

    # Construction

    @classmethod
    def from_particles(cls, particles: List[Particle]) -> 'ParticleStore':
        for i, p in enumerate(particles):
            if p.active and not p.mass > 0:
                raise InitializationError(f"particle {i} has non-positive mass {p.mass}")
            if p.active and not p.radius > 0:
                raise InitializationError(f"particle {i} has non-positive radius {p.radius}")
            if not p.name:
                p.name = f"Particle {i + 1}"
        store = cls(particles)
        for i, p in enumerate(particles):
            j = p.stuck_with
            if j is None:
                continue
            if not (0 <= j < len(particles)) or j == i or particles[j].stuck_with != i:
                raise InitializationError(f"particle {i} has a non-mutual stuck relation to {j}")
            if not (p.active and particles[j].active):
                raise InitializationError(f"stuck relation {i} <-> {j} involves an inactive particle")
        return store

    @classmethod
    def initialize(cls, capacity: int, pattern=Pattern.SCATTER,
                   params: Optional[InitConfig] = None,
                   seed: Optional[int] = None) -> 'ParticleStore':
        params = params or InitConfig()
        pattern = Pattern(pattern)
        if capacity < 0:
            raise InitializationError(f"capacity must be non-negative, got {capacity}")
        _check_range('mass_range', params.mass_range, positive=True)
        if params.radius_scale <= 0:
            raise InitializationError(f"radius_scale must be positive, got {params.radius_scale}")
        if params.velocity_range is not None:
            _check_range('velocity_range', params.velocity_range)

        use_anchor = params.anchor or pattern is Pattern.RING
        if use_anchor:
            if capacity < 1:
                raise InitializationError("an anchor body needs capacity >= 1")
            if params.anchor_mass <= 0 or params.anchor_radius <= 0:
                raise InitializationError("anchor mass and radius must be positive")
        if pattern is Pattern.RING:
            _check_range('ring_radius_range', params.ring_radius_range, positive=True)

        rng = np.random.RandomState(seed)
        particles: List[Particle] = []
        if use_anchor:
            particles.append(cls._create_anchor(params))

        for i in range(len(particles), capacity):
            if pattern is Pattern.RING:
                p = cls._create_orbiting(rng, params, particles[0])
            else:
                p = cls._create_scattered(rng, params)
            p.name = f"Particle {i + 1}"
            particles.append(p)

        logger.info(f"ParticleStore initialized: {capacity} slots, pattern={pattern.value}, "
                    f"anchor={use_anchor}")
        return cls.from_particles(particles)

    @staticmethod
    def _create_anchor(params: InitConfig) -> Particle:
        return Particle(x=params.width / 2, y=params.height / 2, vx=0.0, vy=0.0,
                        mass=params.anchor_mass, radius=params.anchor_radius,
                        color=(255, 255, 0), name='Particle 1', anchor=True)

    @staticmethod
    def _random_mass(rng: np.random.RandomState, params: InitConfig) -> float:
        return float(rng.uniform(*params.mass_range))

    @classmethod
    def _create_scattered(cls, rng: np.random.RandomState, params: InitConfig) -> Particle:
        x = rng.uniform(0, params.width)
        y = rng.uniform(0, params.height)
        if params.velocity_range is None:
            vx = vy = 0.0
        else:
            vx = rng.uniform(*params.velocity_range)
            vy = rng.uniform(*params.velocity_range)
        mass = cls._random_mass(rng, params)
        return Particle(x=float(x), y=float(y), vx=float(vx), vy=float(vy),
                        mass=mass, radius=radius_from_mass(mass, params.radius_scale))

    @classmethod
    def _create_orbiting(cls, rng: np.random.RandomState, params: InitConfig,
                         anchor: Particle) -> Particle:
        r = rng.uniform(*params.ring_radius_range)
        angle = rng.uniform(0, 2 * np.pi)
        # Circular orbit speed around the anchor, tangential to the radius vector
        speed = np.sqrt(params.G * anchor.mass / r)
        mass = cls._random_mass(rng, params)
        return Particle(x=float(anchor.x + r * np.cos(angle)),
                        y=float(anchor.y + r * np.sin(angle)),
                        vx=float(anchor.vx - speed * np.sin(angle)),
                        vy=float(anchor.vy + speed * np.cos(angle)),
                        mass=mass, radius=radius_from_mass(mass, params.radius_scale))

    # Container protocol

    @property
    def capacity(self) -> int:
        return len(self._particles)

    def __len__(self) -> int:
        return len(self._particles)

    def __getitem__(self, index: int) -> Particle:
        return self._particles[index]

    def __iter__(self) -> Iterator[Particle]:
        return iter(self._particles)

    def active_indices(self) -> List[int]:
        return [i for i, p in enumerate(self._particles) if p.active]

    # Removal

    def deactivate(self, index: int):
        p = self._particles[index]
        self.unstick(index)
        p.active = False

    # Stuck relation

    def partner(self, index: int) -> Optional[int]:
        """Current stuck partner, or None if absent or no longer active."""
        p = self._particles[index]
        j = p.stuck_with
        if j is None or not p.active:
            return None
        other = self._particles[j]
        if not other.active or other.stuck_with != index:
            return None
        return j

    def stick(self, i: int, j: int):
        if i == j:
            raise ValueError("a particle cannot stick to itself")
        if self.partner(i) is not None or self.partner(j) is not None:
            raise ValueError(f"particle {i} or {j} is already stuck")
        self._particles[i].stuck_with = j
        self._particles[j].stuck_with = i

    def unstick(self, index: int):
        p = self._particles[index]
        j = p.stuck_with
        p.stuck_with = None
        if j is not None and self._particles[j].stuck_with == index:
            self._particles[j].stuck_with = None

    # Selection

    def pick(self, x: float, y: float) -> Optional[int]:
        """First active particle (lowest index) whose disc contains (x, y)."""
        for i, p in enumerate(self._particles):
            if p.active and np.hypot(x - p.x, y - p.y) <= p.radius:
                return i
        return None

    # Array views

    def positions(self) -> np.ndarray:
        return np.array([[p.x, p.y] for p in self._particles], dtype=float).reshape(-1, 2)

    def velocities(self) -> np.ndarray:
        return np.array([[p.vx, p.vy] for p in self._particles], dtype=float).reshape(-1, 2)

    def masses(self) -> np.ndarray:
        return np.array([p.mass for p in self._particles], dtype=float)

    def radii(self) -> np.ndarray:
        return np.array([p.radius for p in self._particles], dtype=float)

    def active_mask(self) -> np.ndarray:
        return np.array([p.active for p in self._particles], dtype=bool)

    def get_state(self) -> np.ndarray:
        """(N, 4) → [x, y, vx, vy]"""
        return np.array([p.state for p in self._particles], dtype=float).reshape(-1, 4)

    def write_back(self, positions: np.ndarray, velocities: np.ndarray):
        assert positions.shape == velocities.shape == (len(self._particles), 2)
        for i, p in enumerate(self._particles):
            if p.active:
                p.x, p.y = float(positions[i, 0]), float(positions[i, 1])
                p.vx, p.vy = float(velocities[i, 0]), float(velocities[i, 1])
