"""
Conservation diagnostic — how well does each collision policy keep the invariants?

For each policy, run a few seeded trajectories and track:
  1. Total mass (exact under every policy)
  2. Total |p| drift (only force + collision rounding should move it)
  3. Total energy drift (KE + PE; merges and restitution < 1 dissipate)
  4. Active particle count (only merges lower it)
"""

import logging
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

import nbody as P
from nbody.engine import generate_trajectory, SimulationConfig
from nbody.metrics import compute_energy, relative_drift
from nbody.particles import InitConfig

logging.basicConfig(level=logging.WARNING)

POLICIES = ['none', 'merge', 'elastic', 'stick']

COLORS = {
    'none':    '#2c3e50',  # dark gray
    'merge':   '#e74c3c',  # red
    'elastic': '#3498db',  # blue
    'stick':   '#9b59b6',  # purple
}


def evaluate():
    n_steps = 400
    n_particles = 120
    dt = P.DT
    n_seeds = 3
    os.makedirs('results/plots', exist_ok=True)

    curves = {k: {'mass': [], 'momentum': [], 'energy': [], 'kinetic': [], 'active': []}
              for k in POLICIES}

    for policy in POLICIES:
        for seed in range(P.SEED, P.SEED + n_seeds):
            config = SimulationConfig(
                n_particles=n_particles, pattern='ring', collision_policy=policy,
                init=InitConfig(ring_radius_range=(80.0, 300.0)), seed=seed,
            )
            traj = generate_trajectory(config, n_steps=n_steps, dt=dt)
            curves[policy]['mass'].append(relative_drift(traj['total_mass']))
            curves[policy]['momentum'].append(relative_drift(traj['momentum']))
            curves[policy]['energy'].append(relative_drift(traj['energy']))
            curves[policy]['kinetic'].append(compute_energy(traj['states'], traj['masses']))
            curves[policy]['active'].append(traj['active'].sum(axis=1))
            print(f"{policy:<8} seed={seed} collisions={len(traj['collisions'])}")

    avg = {k: {m: np.mean(v, axis=0) for m, v in curves[k].items()} for k in POLICIES}

    # ══════════════════════════════════════════════════════════════
    # Print summary table
    # ══════════════════════════════════════════════════════════════
    print("\n" + "=" * 70)
    print("CONSERVATION BY COLLISION POLICY")
    print("=" * 70)
    print(f"\n{'Policy':<10} {'mass drift':>12} {'|p| drift':>12} {'E drift':>12} {'N_final':>8}")
    print("-" * 58)
    for k in POLICIES:
        a = avg[k]
        print(f"{k:<10} {a['mass'][-1]:>12.2e} {a['momentum'][-1]:>12.2e} "
              f"{a['energy'][-1]:>12.2e} {a['active'][-1]:>8.0f}")

    # ══════════════════════════════════════════════════════════════
    # Plots
    # ══════════════════════════════════════════════════════════════
    fig, axes = plt.subplots(2, 2, figsize=(14, 9))
    panels = [
        ('momentum', 'Relative |p| drift', axes[0, 0]),
        ('energy', 'Relative energy drift', axes[0, 1]),
        ('kinetic', 'Kinetic energy', axes[1, 0]),
        ('active', 'Active particles', axes[1, 1]),
    ]
    steps = np.arange(n_steps + 1)
    for metric, title, ax in panels:
        for k in POLICIES:
            ax.plot(steps, avg[k][metric], color=COLORS[k], label=k, linewidth=1.5)
        ax.set_title(title)
        ax.set_xlabel('step')
        ax.grid(alpha=0.3)
    axes[0, 0].legend()

    plt.suptitle(f'Ring of {n_particles} bodies, dt={dt:.4f}, {n_seeds} seeds', fontsize=14)
    plt.tight_layout(rect=[0, 0, 1, 0.96])
    plt.savefig('results/plots/conservation.png', dpi=150)
    plt.close()
    print("\nSaved results/plots/conservation.png")


if __name__ == '__main__':
    evaluate()
