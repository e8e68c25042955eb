"""A stack of 4x4 transforms and the usual transform builders."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

#: The stack holds fewer matrices than this.
MAX_DEPTH = 100


def _vec3(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


def _normalize(v: np.ndarray) -> np.ndarray:
    return v / float(np.linalg.norm(v))


def translation(t) -> np.ndarray:
    """A matrix that translates by ``t``."""
    m = np.eye(4)
    m[:3, 3] = _vec3(t)
    return m


def scaling(s) -> np.ndarray:
    """A matrix that scales each axis by ``s``."""
    m = np.eye(4)
    m[0, 0], m[1, 1], m[2, 2] = _vec3(s)
    return m


def rotation(angle: float, axis) -> np.ndarray:
    """A matrix that rotates by ``angle`` radians about ``axis``."""
    a = _normalize(_vec3(axis))
    c = math.cos(angle)
    s = math.sin(angle)
    cross = np.array([
        [0.0, -a[2], a[1]],
        [a[2], 0.0, -a[0]],
        [-a[1], a[0], 0.0],
    ])
    m = np.eye(4)
    m[:3, :3] = c * np.eye(3) + (1.0 - c) * np.outer(a, a) + s * cross
    return m


def perspective(fovy: float, aspect: float, znear: float, zfar: float) -> np.ndarray:
    """A right-handed perspective projection onto depth range [-1, 1]."""
    tan_half = math.tan(fovy / 2.0)
    m = np.zeros((4, 4))
    m[0, 0] = 1.0 / (aspect * tan_half)
    m[1, 1] = 1.0 / tan_half
    m[2, 2] = -(zfar + znear) / (zfar - znear)
    m[2, 3] = -(2.0 * zfar * znear) / (zfar - znear)
    m[3, 2] = -1.0
    return m


def ortho(left: float, right: float, bottom: float, top: float,
          znear: float, zfar: float) -> np.ndarray:
    """A right-handed orthographic projection onto depth range [-1, 1]."""
    m = np.eye(4)
    m[0, 0] = 2.0 / (right - left)
    m[1, 1] = 2.0 / (top - bottom)
    m[2, 2] = -2.0 / (zfar - znear)
    m[0, 3] = -(right + left) / (right - left)
    m[1, 3] = -(top + bottom) / (top - bottom)
    m[2, 3] = -(zfar + znear) / (zfar - znear)
    return m


def look_at(eye, target, up) -> np.ndarray:
    """A right-handed view matrix looking from ``eye`` towards ``target``."""
    eye = _vec3(eye)
    f = _normalize(_vec3(target) - eye)
    s = _normalize(np.cross(f, _vec3(up)))
    u = np.cross(s, f)
    m = np.eye(4)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -float(np.dot(s, eye))
    m[1, 3] = -float(np.dot(u, eye))
    m[2, 3] = float(np.dot(f, eye))
    return m


def format_matrix(mat, name: Optional[str] = None) -> str:
    """Render a 4x4 matrix row by row with two decimals."""
    mat = np.asarray(mat, dtype=float)
    lines = []
    if name:
        lines.append(f"{name} = [\n")
    for row in mat:
        lines.append("".join("%- 5.2f " % value for value in row) + "\n")
    if name:
        lines.append("];")
    lines.append("\n")
    return "".join(lines)


def _three(args, what: str) -> np.ndarray:
    if len(args) == 1:
        return _vec3(args[0])
    if len(args) == 3:
        return _vec3(args)
    raise TypeError(f"{what} takes a vector or three components")


class MatrixStack:
    """A stack of transforms whose top is right-multiplied by each operation."""

    def __init__(self) -> None:
        self._stack = [np.eye(4)]

    def __len__(self) -> int:
        return len(self._stack)

    def push(self) -> None:
        """Duplicate the top matrix."""
        if len(self._stack) + 1 >= MAX_DEPTH:
            raise IndexError("matrix stack overflow")
        self._stack.append(self._stack[-1].copy())

    def pop(self) -> None:
        """Remove the top matrix; the last one is never removed."""
        if len(self._stack) <= 1:
            raise IndexError("matrix stack underflow")
        self._stack.pop()

    def load_identity(self) -> None:
        self._stack[-1] = np.eye(4)

    def mult(self, matrix) -> None:
        """Right-multiply the top matrix by ``matrix``."""
        self._stack[-1] = self._stack[-1] @ np.asarray(matrix, dtype=float)

    def translate(self, *args) -> None:
        """Translate by a vector or by x, y, z."""
        self.mult(translation(_three(args, "translate")))

    def scale(self, *args) -> None:
        """Scale by a vector, by x, y, z, or uniformly by one number."""
        if len(args) == 1 and np.ndim(args[0]) == 0:
            s = float(args[0])
            self.mult(scaling((s, s, s)))
        else:
            self.mult(scaling(_three(args, "scale")))

    def rotate(self, angle: float, *args) -> None:
        """Rotate by ``angle`` radians about a vector or about x, y, z."""
        self.mult(rotation(angle, _three(args, "rotate")))

    def top(self) -> np.ndarray:
        """A copy of the top matrix."""
        return self._stack[-1].copy()

    def format(self, name: Optional[str] = None) -> str:
        """Render the top matrix."""
        return format_matrix(self._stack[-1], name)