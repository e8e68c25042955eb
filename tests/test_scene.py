import random

import numpy as np
import pytest

from clothsim.camera import Camera
from clothsim.cloth import Cloth
from clothsim.particle import Particle
from clothsim.scene import HeldObject, Scene


def _small_scene(seed=1):
    scene = Scene(rng=random.Random(seed))
    scene.spheres.append(Particle(r=0.1, x=(0.0, -5.0, 0.0)))
    scene.cloths.append(Cloth(
        3, 3,
        (-0.25, 0.5, 0.0), (0.25, 0.5, 0.0),
        (-0.25, 0.5, -0.5), (0.25, 0.5, -0.5),
        0.1, 0.0, 1e-3, 0.01))
    return scene


def test_new_scene_starts_at_time_zero():
    scene = Scene()
    assert scene.time() == 0.0
    assert scene.held_object is HeldObject.NONE


def test_step_without_sphere_raises():
    with pytest.raises(IndexError):
        Scene().step(Camera())


def test_step_advances_time_by_h():
    scene = _small_scene()
    scene.step(Camera())
    scene.step(Camera())
    assert scene.time() == pytest.approx(2 * scene.h)


def test_step_moves_first_sphere_along_z():
    scene = _small_scene()
    scene.step(Camera())
    z = scene.spheres[0].x[2]
    assert 0.0 < z <= 0.5


def test_gravity_pulls_free_cloth_particles_down():
    scene = _small_scene()
    scene.grav = np.array([0.0, -9.8, 0.0])
    cloth = scene.cloths[0]
    free = [p for p in cloth.particles if not p.fixed]
    before = [p.x[1] for p in free]
    for _ in range(3):
        scene.step(Camera())
    after = [p.x[1] for p in free]
    assert all(a < b for a, b in zip(after, before))
    assert all(p.x[1] == pytest.approx(0.5) for p in cloth.particles if p.fixed)


def test_reset_restores_time_and_particles():
    scene = _small_scene()
    scene.grav = np.array([0.0, -9.8, 0.0])
    scene.tare()
    start = [p.x.copy() for p in scene.cloths[0].particles]
    for _ in range(3):
        scene.step(Camera())
    scene.reset()
    assert scene.time() == 0.0
    for particle, x in zip(scene.cloths[0].particles, start):
        np.testing.assert_allclose(particle.x, x)


def test_hold_sphere_places_it_in_front_of_camera():
    scene = _small_scene()
    scene.set_held_object(HeldObject.SPHERE, Camera())
    assert len(scene.spheres) == 2
    held = scene.spheres[-1]
    assert held.r == pytest.approx(0.1)
    np.testing.assert_allclose(held.x, [0.0, 0.0, 1.0])


def test_same_held_object_twice_changes_nothing():
    scene = _small_scene()
    camera = Camera()
    scene.set_held_object(HeldObject.SPHERE, camera)
    scene.set_held_object(HeldObject.SPHERE, camera)
    assert len(scene.spheres) == 2


def test_switching_held_object_swaps_colliders():
    scene = _small_scene()
    camera = Camera()
    scene.set_held_object(HeldObject.SPHERE, camera)
    scene.set_held_object(HeldObject.TETRAHEDRON, camera)
    assert len(scene.spheres) == 1
    assert len(scene.tetrahedrons) == 1
    np.testing.assert_allclose(scene.tetrahedrons[0].x[0], [0.0, 0.0, 1.0])
    scene.set_held_object(HeldObject.NONE, camera)
    assert scene.tetrahedrons == []
    assert scene.held_object is HeldObject.NONE


def test_held_sphere_follows_camera_during_step():
    scene = _small_scene()
    camera = Camera()
    scene.set_held_object(HeldObject.SPHERE, camera)
    camera.translation = np.array([1.0, 2.0, 3.0])
    scene.step(camera)
    np.testing.assert_allclose(scene.spheres[-1].x, camera.translation + camera.forward())


def test_held_tetrahedron_tip_is_ahead_of_camera():
    scene = _small_scene()
    camera = Camera()
    scene.set_held_object(HeldObject.TETRAHEDRON, camera)
    scene.step(camera)
    tetrahedron = scene.tetrahedrons[-1]
    np.testing.assert_allclose(tetrahedron.x[0], [0.0, 0.0, 1.5])
    assert all(v[2] == pytest.approx(1.0) for v in tetrahedron.x[1:])


def test_wind_changes_target_after_period():
    scene = _small_scene(seed=7)
    scene.wind_n = 2
    camera = Camera()
    scene.step(camera)
    np.testing.assert_allclose(scene.wind, np.zeros(3))
    scene.step(camera)
    assert scene.wind_i == 0
    scene.step(camera)
    assert scene.wind[1] == 0.0
    assert np.linalg.norm(scene.wind) <= scene.wind_max_magnitude
    np.testing.assert_allclose(scene.wind, scene.wind_target)


def test_load_builds_demo_scene():
    scene = Scene(rng=random.Random(0))
    scene.load()
    assert scene.h == pytest.approx(1e-3)
    np.testing.assert_allclose(scene.grav, [0.0, -9.8, 0.0])
    assert [len(c.particles) for c in scene.cloths] == [15 * 15, 15 * 15, 30 * 30]
    assert len(scene.soft_bodies) == 1
    assert len(scene.soft_bodies[0].particles) == 10 * 10 * 10
    assert scene.spheres[0].r == pytest.approx(0.1)
    np.testing.assert_allclose(scene.spheres[0].x, [0.0, 0.2, 0.0])
    assert len(scene.planes) == 1
    flagpole = scene.cylinders[0]
    assert flagpole.r == pytest.approx(0.025)
    assert flagpole.h == pytest.approx(1.1)
    np.testing.assert_allclose(flagpole.x, [-1.975, 0.0, 0.0])
    assert scene.held_object is HeldObject.NONE