"""A rectangular cloth of particles held together by breakable springs."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from clothsim.colliders import Cylinder, Plane, Tetrahedron, collide_particles
from clothsim.particle import Particle, Quad, Spring, make_particle


def _vec3(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


def _normalized(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    return v / n if n > 0.0 else v.copy()


class Cloth:
    """A grid of ``rows`` by ``cols`` particles spanning four corner points.

    Row 0 runs from ``x00`` to ``x01`` and is pinned at both ends; the last
    row runs from ``x10`` to ``x11``.
    """

    def __init__(self, rows: int, cols: int, x00, x01, x10, x11,
                 mass: float, alpha: float, damping: float, pradius: float) -> None:
        if rows <= 1 or cols <= 1:
            raise ValueError("a cloth needs at least two rows and two columns")
        if mass <= 0.0:
            raise ValueError("mass must be positive")
        if alpha < 0.0:
            raise ValueError("alpha must not be negative")
        if damping < 0.0:
            raise ValueError("damping must not be negative")
        if pradius < 0.0:
            raise ValueError("particle radius must not be negative")

        self.rows = rows
        self.cols = cols
        x00, x01, x10, x11 = (_vec3(v) for v in (x00, x01, x10, x11))

        n_verts = rows * cols
        particle_mass = mass / n_verts
        self.particles: list[Particle] = []
        for i in range(rows):
            beta = i / (rows - 1)
            for j in range(cols):
                a = j / (cols - 1)
                top = (1.0 - a) * x00 + a * x01
                bottom = (1.0 - a) * x10 + a * x11
                pos = (1.0 - beta) * top + beta * bottom
                fixed = i == 0 and (j == 0 or j == cols - 1)
                self.particles.append(make_particle(
                    pos, mass=particle_mass, radius=pradius,
                    damping=damping, fixed=fixed))

        self.cells: list[list[Quad]] = [[Quad() for _ in range(cols - 1)]
                                        for _ in range(rows - 1)]
        for i, row in enumerate(self.cells):
            for j, quad in enumerate(row):
                a = self._index(i, j)
                b = self._index(i + 1, j)
                c = self._index(i + 1, j + 1)
                d = self._index(i, j + 1)
                t0, t1 = quad.tris
                t0.index0, t0.index1, t0.index2 = a, b, c
                t1.index0, t1.index1, t1.index2 = c, d, b

        self.springs: list[Spring] = []

        def connect(k0: int, k1: int) -> Spring:
            spring = Spring(self.particles[k0], self.particles[k1], alpha)
            self.springs.append(spring)
            return spring

        for i in range(rows):
            for j in range(cols - 1):
                spring = connect(self._index(i, j), self._index(i, j + 1))
                if i < rows - 1:
                    self.cells[i][j].tris[0].edge_springs[0] = spring
                if i > 0:
                    self.cells[i - 1][j].tris[1].edge_springs[0] = spring

        for i in range(rows - 1):
            for j in range(cols):
                spring = connect(self._index(i, j), self._index(i + 1, j))
                if j < cols - 1:
                    self.cells[i][j].tris[0].edge_springs[1] = spring
                if j > 0:
                    self.cells[i][j - 1].tris[1].edge_springs[1] = spring

        for i in range(rows - 1):
            for j in range(cols - 1):
                connect(self._index(i, j), self._index(i + 1, j + 1))
                diagonal = connect(self._index(i + 1, j), self._index(i, j + 1))
                self.cells[i][j].tris[0].edge_springs[2] = diagonal
                self.cells[i][j].tris[1].edge_springs[2] = diagonal

        for i in range(rows):
            for j in range(cols - 2):
                connect(self._index(i, j), self._index(i, j + 2))

        for i in range(rows - 2):
            for j in range(cols):
                connect(self._index(i, j), self._index(i + 2, j))

        self.pos_buf = np.zeros(n_verts * 3, dtype=np.float32)
        self.nor_buf = np.zeros(n_verts * 3, dtype=np.float32)
        self.ele_buf: list[int] = []
        self.update_pos_nor()
        self.update_ele()

        self.tex_buf = np.array(
            [value
             for i in range(rows)
             for j in range(cols)
             for value in (i / (rows - 1.0), j / (cols - 1.0))],
            dtype=np.float32,
        )

    def _index(self, i: int, j: int) -> int:
        return i * self.cols + j

    def _tris(self):
        for row in self.cells:
            for quad in row:
                yield from quad.tris

    def tare(self) -> None:
        """Record every particle's current state as its initial state."""
        for particle in self.particles:
            particle.tare()

    def reset(self) -> None:
        """Return every particle to its recorded initial state."""
        for particle in self.particles:
            particle.reset()

    def update_pos_nor(self) -> None:
        """Refresh the position and per-vertex normal buffers."""
        rows, cols = self.rows, self.cols
        positions = np.array([p.x for p in self.particles])
        self.pos_buf[:] = positions.reshape(-1)

        for i in range(rows):
            for j in range(cols):
                k = self._index(i, j)
                x = positions[k]
                # Neighbour pairs of the up to four triangles around the vertex.
                pairs = []
                if j != cols - 1 and i != rows - 1:
                    pairs.append((k + 1, k + cols))
                if j != 0 and i != rows - 1:
                    pairs.append((k + cols, k - 1))
                if j != 0 and i != 0:
                    pairs.append((k - 1, k - cols))
                if j != cols - 1 and i != 0:
                    pairs.append((k - cols, k + 1))
                nor = np.zeros(3)
                for u, v in pairs:
                    nor += _normalized(np.cross(positions[u] - x, positions[v] - x))
                nor = _normalized(nor / len(pairs))
                self.nor_buf[3 * k:3 * k + 3] = nor

    def update_ele(self) -> None:
        """Rebuild the triangle index buffer, leaving out torn triangles."""
        ele: list[int] = []
        for i, row in enumerate(self.cells):
            for j, quad in enumerate(row):
                t0, t1 = quad.tris
                if not any(spring.broken for spring in t0.edge_springs):
                    ele.extend((self._index(i, j), self._index(i + 1, j),
                                self._index(i, j + 1)))
                if not any(spring.broken for spring in t1.edge_springs):
                    ele.extend((self._index(i, j + 1), self._index(i + 1, j),
                                self._index(i + 1, j + 1)))
        self.ele_buf = ele

    def _wind_forces(self, wind: np.ndarray) -> np.ndarray:
        forces = np.zeros((len(self.particles), 3))
        for tri in self._tris():
            x0, x1, x2 = (self.particles[k].x for k in tri.indices)
            normal = np.cross(x1 - x0, x2 - x0)
            area = float(np.linalg.norm(normal))
            normal = _normalized(normal)
            pressure = float(np.dot(normal, wind))
            share = normal * (pressure * area) / 3.0
            for k in tri.indices:
                forces[k] += share
        return forces

    def step(self, h: float, grav, wind,
             spheres: Sequence[Particle], planes: Sequence[Plane],
             cylinders: Sequence[Cylinder], tetrahedrons: Sequence[Tetrahedron]) -> None:
        """Advance the cloth by one time step of length ``h``."""
        grav = _vec3(grav)
        wind = _vec3(wind)
        forces = self._wind_forces(wind)

        for particle, wind_force in zip(self.particles, forces):
            if particle.fixed:
                particle.v = particle.v0.copy()
                continue
            force = particle.m * grav - particle.d * particle.v + wind_force
            particle.v = particle.v + (h / particle.m) * force
            particle.p = particle.x.copy()
            particle.x = particle.x + h * particle.v

        for spring in self.springs:
            spring.solve(h)

        collide_particles(self.particles, spheres, planes, cylinders, tetrahedrons)

        for particle in self.particles:
            particle.v = (particle.x - particle.p) / h