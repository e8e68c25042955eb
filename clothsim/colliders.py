"""Static collision shapes and the particle projection against them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np

from clothsim.particle import Particle


def _normalized(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    return v / n if n > 0.0 else v.copy()


def _vector(value) -> np.ndarray:
    return np.array(value, dtype=float).reshape(3)


@dataclass(frozen=True, eq=False)
class Face:
    """A point on a face and its outward unit normal."""

    x: np.ndarray
    n: np.ndarray


@dataclass(eq=False)
class Plane:
    """An infinite plane through ``x`` with normal ``n``."""

    x: np.ndarray = field(default_factory=lambda: np.zeros(3))
    n: np.ndarray = field(default_factory=lambda: np.array([0.0, 1.0, 0.0]))

    def __post_init__(self) -> None:
        self.x = _vector(self.x)
        self.n = _vector(self.n)


@dataclass(eq=False)
class Cylinder:
    """A capped cylinder standing on ``x`` along ``axis``."""

    r: float = 1.0
    h: float = 1.0
    x: np.ndarray = field(default_factory=lambda: np.zeros(3))
    axis: np.ndarray = field(default_factory=lambda: np.array([0.0, 1.0, 0.0]))

    def __post_init__(self) -> None:
        self.x = _vector(self.x)
        self.axis = _vector(self.axis)


class Tetrahedron:
    """A tetrahedron given by four vertices."""

    FACE_INDICES = ((0, 1, 2), (0, 2, 3), (0, 3, 1), (1, 3, 2))
    FACE_OPPOSITE_INDICES = (3, 1, 2, 0)

    def __init__(self, vertices: Optional[Sequence] = None) -> None:
        if vertices is None:
            vertices = (
                (0.0, 0.0, 0.0),
                (1.0, 0.0, 0.0),
                (0.0, 1.0, 0.0),
                (0.0, 0.0, 1.0),
            )
        if len(vertices) != 4:
            raise ValueError("a tetrahedron has four vertices")
        self.x = [_vector(v) for v in vertices]

    def faces(self) -> list[Face]:
        """The four faces, each with a normal pointing away from the body."""
        result = []
        for (i0, i1, i2), opposite in zip(self.FACE_INDICES, self.FACE_OPPOSITE_INDICES):
            p0, p1, p2 = self.x[i0], self.x[i1], self.x[i2]
            n = _normalized(np.cross(p1 - p0, p2 - p0))
            if float(np.dot(n, self.x[opposite] - p0)) > 0.0:
                n = -n
            result.append(Face(p0.copy(), n))
        return result


def _collide_sphere(particle: Particle, sphere: Particle) -> None:
    offset = particle.x - sphere.x
    reach = particle.r + sphere.r
    if float(np.linalg.norm(offset)) < reach:
        particle.x = reach * _normalized(offset) + sphere.x


def _collide_plane(particle: Particle, plane: Plane) -> None:
    distance = float(np.dot(particle.x - plane.x, plane.n))
    if distance < particle.r:
        particle.x = particle.x - plane.n * (distance - particle.r)


def _collide_cylinder(particle: Particle, cylinder: Cylinder) -> None:
    axis = cylinder.axis
    top = float(np.dot(particle.x - (cylinder.x + cylinder.h * axis), axis)) - particle.r
    bottom = float(np.dot(particle.x - cylinder.x, -axis)) - particle.r

    d = particle.x - cylinder.x
    d = d - float(np.dot(d, axis)) * axis
    radial = float(np.linalg.norm(d)) - cylinder.r - particle.r

    if top < 0.0 and bottom < 0.0 and radial < 0.0:
        if top > bottom and top > radial:
            particle.x = particle.x - axis * top
        elif bottom > radial:
            particle.x = particle.x + axis * bottom
        else:
            particle.x = particle.x - _normalized(d) * radial


def _collide_tetrahedron(particle: Particle, faces: Sequence[Face]) -> None:
    best = -math.inf
    best_face = None
    for face in faces:
        distance = float(np.dot(particle.x - face.x, face.n)) - particle.r
        if distance > best:
            best = distance
            best_face = face
    if best_face is not None and best < 0.0:
        particle.x = particle.x - best * best_face.n


def collide_particles(
    particles: Iterable[Particle],
    spheres: Iterable[Particle],
    planes: Iterable[Plane],
    cylinders: Iterable[Cylinder],
    tetrahedrons: Iterable[Tetrahedron],
) -> None:
    """Push every free particle out of spheres, planes, cylinders and tetrahedrons."""
    free = [p for p in particles if not p.fixed]
    for sphere in spheres:
        for particle in free:
            _collide_sphere(particle, sphere)
    for plane in planes:
        for particle in free:
            _collide_plane(particle, plane)
    for cylinder in cylinders:
        for particle in free:
            _collide_cylinder(particle, cylinder)
    for tetrahedron in tetrahedrons:
        faces = tetrahedron.faces()
        for particle in free:
            _collide_tetrahedron(particle, faces)