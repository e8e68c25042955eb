import math

import numpy as np
import pytest

from clothsim.camera import Camera
from clothsim.matrix_stack import MatrixStack, perspective


def test_defaults_from_source():
    camera = Camera()
    assert camera.aspect == 1.0
    assert camera.fovy == pytest.approx(45.0 * math.pi / 180.0)
    assert camera.znear == pytest.approx(0.1)
    assert camera.zfar == pytest.approx(1000.0)
    assert camera.rfactor == pytest.approx(0.005)


def test_forward_at_zero_yaw_points_along_z():
    camera = Camera()
    assert np.allclose(camera.forward(), [0.0, 0.0, 1.0])


def test_mouse_drag_turns_by_rfactor():
    camera = Camera()
    camera.mouse_clicked(10.0, 20.0, False, False, False)
    camera.mouse_moved(110.0, 60.0)
    assert camera.yaw == pytest.approx(camera.rfactor * 100.0)
    assert camera.pitch == pytest.approx(camera.rfactor * 40.0)
    assert np.allclose(camera.mouse_prev, [110.0, 60.0])


def test_click_resets_drag_origin():
    camera = Camera()
    camera.mouse_moved(50.0, 50.0)
    yaw = camera.yaw
    camera.mouse_clicked(200.0, 200.0, False, False, False)
    camera.mouse_moved(200.0, 200.0)
    assert camera.yaw == pytest.approx(yaw)


def test_move_forward_uses_elapsed_time():
    camera = Camera()
    camera.move({"w"}, 2.0)
    assert np.allclose(camera.translation, camera.tfactor * 2.0 * np.array([0.0, 0.0, 1.0]))
    assert camera.t_prev == 2.0


def test_opposite_keys_cancel():
    camera = Camera(yaw=0.7)
    camera.move(["w", "s", "a", "d"], 1.5)
    assert np.allclose(camera.translation, np.zeros(3))


def test_left_is_perpendicular_to_forward():
    camera = Camera(yaw=0.3)
    camera.move({"a"}, 1.0)
    fwd = camera.forward()
    fwd[1] = 0.0
    assert float(np.dot(camera.translation, fwd)) == pytest.approx(0.0, abs=1e-12)
    assert float(np.linalg.norm(camera.translation)) == pytest.approx(camera.tfactor)


def test_move_without_keys_only_advances_clock():
    camera = Camera(translation=(1.0, 2.0, 3.0))
    camera.move(set(), 5.0)
    assert np.allclose(camera.translation, [1.0, 2.0, 3.0])
    assert camera.t_prev == 5.0


def test_projection_matrix_is_perspective():
    camera = Camera(aspect=1.5)
    stack = MatrixStack()
    camera.apply_projection_matrix(stack)
    assert np.allclose(stack.top(), perspective(camera.fovy, 1.5, camera.znear, camera.zfar))


def test_view_matrix_sends_eye_to_origin_and_forward_to_minus_z():
    camera = Camera(translation=(0.0, 1.0, -2.0), yaw=0.4, pitch=0.1)
    stack = MatrixStack()
    camera.apply_view_matrix(stack)
    view = stack.top()
    eye = np.append(camera.translation, 1.0)
    assert np.allclose(view @ eye, [0.0, 0.0, 0.0, 1.0])
    ahead = np.append(camera.translation + camera.forward(), 1.0)
    mapped = view @ ahead
    assert mapped[2] < 0.0
    assert np.allclose(mapped[:2], [0.0, 0.0])