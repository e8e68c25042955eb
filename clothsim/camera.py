"""A free-flying first-person camera driven by the mouse and WASD keys."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from clothsim.matrix_stack import MatrixStack, look_at, perspective


def _vec3(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


@dataclass(eq=False)
class Camera:
    """Yaw and pitch follow mouse drags; W, A, S and D move on the ground plane."""

    aspect: float = 1.0
    fovy: float = 45.0 * math.pi / 180.0
    znear: float = 0.1
    zfar: float = 1000.0
    yaw: float = 0.0
    pitch: float = 0.0
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    mouse_prev: np.ndarray = field(default_factory=lambda: np.zeros(2))
    t_prev: float = 0.0
    rfactor: float = 0.005
    tfactor: float = 1.0

    def __post_init__(self) -> None:
        self.translation = _vec3(self.translation)
        self.mouse_prev = np.array(self.mouse_prev, dtype=float).reshape(2)

    def mouse_clicked(self, x: float, y: float, shift: bool = False,
                      ctrl: bool = False, alt: bool = False) -> None:
        """Remember where a drag starts."""
        self.mouse_prev = np.array([x, y], dtype=float)

    def mouse_moved(self, x: float, y: float) -> None:
        """Turn by the distance the mouse travelled since the last event."""
        current = np.array([x, y], dtype=float)
        dx, dy = current - self.mouse_prev
        self.yaw += self.rfactor * float(dx)
        self.pitch += self.rfactor * float(dy)
        self.mouse_prev = current

    def move(self, keys: Iterable[str], t: float) -> None:
        """Move for the time elapsed since the last call while ``keys`` are held."""
        dt = t - self.t_prev
        self.t_prev = t
        held = {key.lower() for key in keys}
        s = math.sin(self.yaw)
        c = math.cos(self.yaw)
        directions = {
            "w": (s, 0.0, c),
            "a": (c, 0.0, -s),
            "s": (-s, 0.0, -c),
            "d": (-c, 0.0, s),
        }
        for key in "wasd":
            if key in held:
                self.translation = self.translation + self.tfactor * dt * _vec3(directions[key])

    def apply_projection_matrix(self, stack: MatrixStack) -> None:
        """Right-multiply the stack by the perspective projection."""
        stack.mult(perspective(self.fovy, self.aspect, self.znear, self.zfar))

    def apply_view_matrix(self, stack: MatrixStack) -> None:
        """Right-multiply the stack by the view transform."""
        eye = self.translation
        stack.mult(look_at(eye, eye + self.forward(), (0.0, 1.0, 0.0)))

    def forward(self) -> np.ndarray:
        """The (unnormalised) viewing direction."""
        return np.array([math.sin(self.yaw), self.pitch, math.cos(self.yaw)])