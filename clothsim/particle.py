"""Point masses and the constraints that connect them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

#: A spring snaps once it is stretched to this multiple of its rest length.
BREAK_RATIO = 2.5

_VECTOR_FIELDS = ("x0", "v0", "x", "p", "v")


def _zero() -> np.ndarray:
    return np.zeros(3)


def _as_vector(value) -> np.ndarray:
    return np.array(value, dtype=float).reshape(3)


@dataclass(eq=False)
class Particle:
    """A point mass with position, velocity and collision radius."""

    r: float = 1.0
    m: float = 1.0
    d: float = 0.0
    x0: np.ndarray = field(default_factory=_zero)
    v0: np.ndarray = field(default_factory=_zero)
    x: np.ndarray = field(default_factory=_zero)
    p: np.ndarray = field(default_factory=_zero)
    v: np.ndarray = field(default_factory=_zero)
    fixed: bool = True

    def __post_init__(self) -> None:
        for name in _VECTOR_FIELDS:
            setattr(self, name, _as_vector(getattr(self, name)))

    def tare(self) -> None:
        """Record the current state as the initial state."""
        self.x0 = self.x.copy()
        self.v0 = self.v.copy()

    def reset(self) -> None:
        """Return to the recorded initial state."""
        self.x = self.x0.copy()
        self.v = self.v0.copy()


class Spring:
    """A distance constraint between two particles that can break."""

    def __init__(self, p0: Particle, p1: Particle, alpha: float) -> None:
        if p0 is None or p1 is None:
            raise ValueError("a spring needs two particles")
        if p0 is p1:
            raise ValueError("a spring cannot connect a particle to itself")
        self.p0 = p0
        self.p1 = p1
        self.alpha = float(alpha)
        self.broken = False
        self.L = float(np.linalg.norm(p1.x0 - p0.x0))

    def solve(self, h: float) -> None:
        """Project the particles towards the rest length, or break."""
        if self.broken:
            return
        delta = self.p1.x - self.p0.x
        length = float(np.linalg.norm(delta))
        if length >= self.L * BREAK_RATIO:
            self.broken = True
            return

        c = length - self.L
        direction = delta / length
        w0 = 1.0 / self.p0.m
        w1 = 1.0 / self.p1.m
        lam = -c / (w0 + w1 + self.alpha / (h * h))

        if not self.p0.fixed:
            self.p0.x = self.p0.x - lam * w0 * direction
        if not self.p1.fixed:
            self.p1.x = self.p1.x + lam * w1 * direction


def _signed_volume(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray) -> float:
    return float(np.dot(np.cross(b - a, c - a), d - a)) / 6.0


class Volume:
    """A volume-preserving constraint on a tetrahedron of four particles."""

    def __init__(
        self,
        p0: Particle,
        p1: Particle,
        p2: Particle,
        p3: Particle,
        alpha: float,
        springs: Iterable[Spring],
    ) -> None:
        springs = tuple(springs)
        if len(springs) != 6:
            raise ValueError("a volume needs exactly six edge springs")
        self.p0 = p0
        self.p1 = p1
        self.p2 = p2
        self.p3 = p3
        self.alpha = float(alpha)
        self.springs = springs
        self.broken = False
        self.volume0 = _signed_volume(p0.x, p1.x, p2.x, p3.x)

    def is_broken(self) -> bool:
        """True once any edge spring has broken; the result sticks."""
        if self.broken:
            return True
        if any(spring.broken for spring in self.springs):
            self.broken = True
            return True
        return False

    def solve(self, h: float) -> None:
        """Project the four particles towards the rest volume."""
        if self.is_broken():
            return
        p0, p1, p2, p3 = self.p0, self.p1, self.p2, self.p3

        current = _signed_volume(p0.x, p1.x, p2.x, p3.x)
        c = 6.0 * (current - self.volume0)

        grads = (
            np.cross(p3.x - p1.x, p2.x - p1.x),
            np.cross(p2.x - p0.x, p3.x - p0.x),
            np.cross(p3.x - p0.x, p1.x - p0.x),
            np.cross(p1.x - p0.x, p2.x - p0.x),
        )
        particles = (p0, p1, p2, p3)
        weights = tuple(1.0 / particle.m for particle in particles)

        denominator = sum(w * float(np.dot(g, g)) for w, g in zip(weights, grads))
        lam = -c / (denominator + self.alpha / (h * h))

        for particle, w, g in zip(particles, weights, grads):
            if not particle.fixed:
                particle.x = particle.x + lam * w * g


@dataclass(eq=False)
class Tri:
    """A triangle of particle indices bounded by three edge springs."""

    index0: int = 0
    index1: int = 0
    index2: int = 0
    vertex_particles: list = field(default_factory=lambda: [None, None, None])
    edge_springs: list = field(default_factory=lambda: [None, None, None])
    broken: bool = False

    @property
    def indices(self) -> tuple[int, int, int]:
        return (self.index0, self.index1, self.index2)

    def is_broken(self) -> bool:
        """True once any edge spring has broken; the result sticks."""
        if self.broken:
            return True
        if any(spring.broken for spring in self.edge_springs):
            self.broken = True
            return True
        return False


@dataclass(eq=False)
class Quad:
    """Two triangles that make up a quadrilateral cell."""

    tris: list = field(default_factory=lambda: [Tri(), Tri()])


@dataclass(eq=False)
class Hexa:
    """Six quadrilateral faces that make up a hexahedral cell."""

    quads: list = field(default_factory=lambda: [Quad() for _ in range(6)])


def make_particle(position, *, mass: float = 1.0, radius: float = 1.0,
                  damping: float = 0.0, fixed: bool = False,
                  velocity: Optional[Iterable[float]] = None) -> Particle:
    """Create a particle at rest at ``position`` with its initial state recorded."""
    pos = _as_vector(position)
    vel = _zero() if velocity is None else _as_vector(velocity)
    return Particle(r=radius, m=mass, d=damping, x0=pos, v0=vel,
                    x=pos, p=pos, v=vel, fixed=fixed)