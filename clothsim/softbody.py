"""A deformable box of particles kept in shape by springs and volume constraints."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from clothsim.colliders import Cylinder, Plane, Tetrahedron, collide_particles
from clothsim.particle import Particle
from clothsim.softbody_mesh import build_softbody_mesh

#: Number of passes over the springs in each step.
SPRING_ITERATIONS = 10


def _vec3(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


def _normalized(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    return v / n if n > 0.0 else v.copy()


class SoftBody:
    """An axis-aligned lattice of ``rows`` x ``cols`` x ``tubes`` particles.

    The lattice spans the box from ``x000`` to ``x111``; rows run along x,
    columns along y and tubes along z.
    """

    def __init__(self, rows: int, cols: int, tubes: int, x000, x111,
                 mass: float, alpha: float, damping: float, pradius: float) -> None:
        mesh = build_softbody_mesh(rows, cols, tubes, x000, x111,
                                   mass, alpha, damping, pradius)
        self.mesh = mesh
        self.rows = rows
        self.cols = cols
        self.tubes = tubes
        self.particles = mesh.particles
        self.springs = mesh.springs
        self.volumes = mesh.volumes
        self.cells = mesh.cells
        self.tex_buf = mesh.tex_buf

        n_verts = rows * cols * tubes
        self.pos_buf = np.zeros(n_verts * 3, dtype=np.float32)
        self.nor_buf = np.zeros(n_verts * 3, dtype=np.float32)
        self.ele_buf: list[int] = []
        self.update_pos_nor()
        self.update_ele()

    def tare(self) -> None:
        """Record every particle's current state as its initial state."""
        for particle in self.particles:
            particle.tare()

    def reset(self) -> None:
        """Return every particle to its recorded initial state."""
        for particle in self.particles:
            particle.reset()

    def update_pos_nor(self) -> None:
        """Refresh the position buffer and the area-weighted vertex normals."""
        positions = np.array([p.x for p in self.particles])
        self.pos_buf[:] = positions.reshape(-1)

        accumulated = np.zeros_like(positions)
        for tri in self.mesh.tris():
            i0, i1, i2 = tri.indices
            x0 = positions[i0]
            normal = np.cross(positions[i1] - x0, positions[i2] - x0)
            accumulated[i0] += normal
            accumulated[i1] += normal
            accumulated[i2] += normal

        normals = np.array([_normalized(n) for n in accumulated])
        self.nor_buf[:] = normals.reshape(-1)

    def update_ele(self) -> None:
        """Rebuild the triangle index buffer, leaving out torn triangles."""
        ele: list[int] = []
        for tri in self.mesh.tris():
            if not tri.is_broken():
                ele.extend(tri.indices)
        self.ele_buf = ele

    def _wind_forces(self, wind: np.ndarray) -> np.ndarray:
        forces = np.zeros((len(self.particles), 3))
        for tri in self.mesh.tris():
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
        """Advance the body by one time step of length ``h``."""
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

        for _ in range(SPRING_ITERATIONS):
            for spring in self.springs:
                spring.solve(h)

        for volume in self.volumes:
            volume.solve(h)

        collide_particles(self.particles, spheres, planes, cylinders, tetrahedrons)

        for particle in self.particles:
            particle.v = (particle.x - particle.p) / h