import numpy as np

from nbody.engine import Simulation, SimulationConfig
from nbody.particles import Particle, ParticleStore
from nbody.renderer import Camera, Renderer


def test_camera_target_is_screen_centre():
    cam = Camera(target_x=10.0, target_y=-5.0, zoom=2.0)
    assert cam.world_to_screen(10.0, -5.0, (200, 100)) == (100.0, 50.0)
    assert cam.screen_to_world(100.0, 50.0, (200, 100)) == (10.0, -5.0)
    assert cam.world_to_screen(11.0, -5.0, (200, 100)) == (102.0, 50.0)


def test_camera_zoom_is_clamped():
    cam = Camera(zoom=1.0, min_zoom=0.5, max_zoom=4.0)
    cam.zoom_by(100.0)
    assert cam.zoom == 4.0
    cam.zoom_by(0.0)
    assert cam.zoom == 0.5


def test_camera_follows_selection():
    store = ParticleStore.from_particles([
        Particle(x=30.0, y=40.0, vx=0.0, vy=0.0, mass=1.0, radius=2.0)])
    sim = Simulation(SimulationConfig(n_particles=1), store=store)
    sim.select_at(30.0, 40.0)
    cam = Camera()
    cam.follow(sim)
    assert (cam.target_x, cam.target_y) == (30.0, 40.0)


def test_offscreen_render_draws_active_particles():
    store = ParticleStore.from_particles([
        Particle(x=0.0, y=0.0, vx=0.0, vy=0.0, mass=1.0, radius=5.0),
        Particle(x=20.0, y=0.0, vx=0.0, vy=0.0, mass=1.0, radius=5.0)])
    store.deactivate(1)
    sim = Simulation(SimulationConfig(n_particles=2, color_mode='hsv'), store=store)
    renderer = Renderer(resolution=(64, 48), camera=Camera(target_x=0.0, target_y=0.0, zoom=1.0))

    frame = renderer.render(sim)
    assert frame.shape == (48, 64, 3)
    np.testing.assert_array_equal(frame[24, 32], [255, 0, 0])
    np.testing.assert_array_equal(frame[24, 52], [0, 0, 0])
