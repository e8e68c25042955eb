import numpy as np
import pytest

from clothsim.colliders import Plane
from clothsim.softbody import SoftBody


def make_body(n=2, damping=1e-3):
    return SoftBody(n, n, n, (0.5, 0.5, 0.5), (0.75, 0.75, 0.75),
                    1.0, 1.0, damping, 0.01)


def test_particle_count_and_corners():
    body = make_body(3)
    assert len(body.particles) == 27
    assert np.allclose(body.particles[0].x, [0.5, 0.5, 0.5])
    assert np.allclose(body.particles[-1].x, [0.75, 0.75, 0.75])


def test_particle_mass_is_shared():
    body = make_body(2)
    total = sum(p.m for p in body.particles)
    assert total == pytest.approx(1.0)


def test_pos_buf_matches_positions():
    body = make_body(2)
    expected = np.array([p.x for p in body.particles], dtype=np.float32).reshape(-1)
    assert np.allclose(body.pos_buf, expected)


def test_initial_ele_buf_holds_every_triangle():
    body = make_body(2)
    tri_count = sum(1 for _ in body.mesh.tris())
    assert len(body.ele_buf) == 3 * tri_count
    assert set(body.ele_buf) <= set(range(len(body.particles)))


def test_normals_are_unit_or_zero():
    body = make_body(3)
    normals = body.nor_buf.reshape(-1, 3)
    for n in normals:
        length = float(np.linalg.norm(n))
        assert length == pytest.approx(1.0, abs=1e-5) or length == pytest.approx(0.0)


def test_broken_spring_removes_triangles():
    body = make_body(2)
    before = len(body.ele_buf)
    body.springs[0].broken = True
    body.update_ele()
    assert len(body.ele_buf) < before
    assert len(body.ele_buf) % 3 == 0
    for tri in body.mesh.tris():
        if any(s.broken for s in tri.edge_springs):
            assert tri.broken


def test_step_without_forces_keeps_shape():
    body = make_body(2)
    start = [p.x.copy() for p in body.particles]
    body.step(1e-3, (0, 0, 0), (0, 0, 0), [], [], [], [])
    for p, x in zip(body.particles, start):
        assert np.allclose(p.x, x)
        assert np.allclose(p.v, 0.0)


def test_gravity_pulls_body_down():
    body = make_body(2)
    start = np.mean([p.x[1] for p in body.particles])
    for _ in range(5):
        body.step(1e-3, (0, -9.8, 0), (0, 0, 0), [], [], [], [])
    end = np.mean([p.x[1] for p in body.particles])
    assert end < start
    assert all(p.v[1] < 0.0 for p in body.particles)


def test_plane_stops_body():
    body = make_body(2)
    ground = Plane(x=(0.0, 0.55, 0.0))
    body.step(1e-3, (0, -9.8, 0), (0, 0, 0), [], [ground], [], [])
    for p in body.particles:
        assert p.x[1] >= 0.55 + p.r - 1e-9


def test_tare_and_reset_round_trip():
    body = make_body(2)
    body.tare()
    start = [p.x.copy() for p in body.particles]
    for _ in range(3):
        body.step(1e-3, (0, -9.8, 0), (0, 0, 0), [], [], [], [])
    assert not np.allclose(body.particles[0].x, start[0])
    body.reset()
    for p, x in zip(body.particles, start):
        assert np.allclose(p.x, x)
        assert np.allclose(p.v, 0.0)


def test_update_pos_nor_follows_moved_particle():
    body = make_body(2)
    body.particles[3].x = np.array([1.0, 2.0, 3.0])
    body.update_pos_nor()
    assert np.allclose(body.pos_buf[9:12], [1.0, 2.0, 3.0])


@pytest.mark.parametrize("kwargs", [
    dict(rows=1),
    dict(tubes=1),
    dict(mass=0.0),
    dict(alpha=-1.0),
    dict(damping=-1.0),
    dict(pradius=-0.1),
])
def test_invalid_arguments_raise(kwargs):
    args = dict(rows=2, cols=2, tubes=2, x000=(0, 0, 0), x111=(1, 1, 1),
                mass=1.0, alpha=0.0, damping=0.0, pradius=0.01)
    args.update(kwargs)
    with pytest.raises(ValueError):
        SoftBody(**args)