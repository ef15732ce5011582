"""
Interactive demo — a ring of bodies orbiting a heavy anchor.
Run: python demo.py [scatter|ring] [merge|elastic|stick|none]
P pause, I info, click to follow a body, Q to exit.
"""
import logging
import sys

from nbody.engine import Simulation, SimulationConfig
from nbody.particles import InitConfig
from nbody.renderer import Renderer
import nbody as P

logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

pattern = sys.argv[1] if len(sys.argv) > 1 else 'ring'
policy = sys.argv[2] if len(sys.argv) > 2 else P.COLLISION_POLICY

config = SimulationConfig(
    n_particles=400,
    pattern=pattern,
    collision_policy=policy,
    init=InitConfig(velocity_range=None, anchor=(pattern == 'ring')),
    seed=P.SEED,
)
sim = Simulation(config)

print(f"Particles: {len(sim.store)}  policy: {config.collision_policy.value}")
print(f"Total mass: {sim.total_mass():.2f}")

Renderer().play(sim, fps=P.FPS)
