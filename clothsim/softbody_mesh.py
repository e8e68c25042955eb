"""Construction of the particle lattice, springs and volumes of a soft body."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from clothsim.particle import Hexa, Particle, Spring, Tri, Volume, make_particle


def _vec3(values) -> np.ndarray:
    return np.array(values, dtype=float).reshape(3)


def _key(k0: int, k1: int) -> tuple[int, int]:
    return (k0, k1) if k0 <= k1 else (k1, k0)


# Corner labels of a hexahedral cell and their (di, dj, dk) offsets.
_CORNERS = {
    "a": (0, 0, 0),
    "b": (1, 0, 0),
    "c": (1, 1, 0),
    "d": (0, 1, 0),
    "e": (0, 0, 1),
    "f": (1, 0, 1),
    "g": (1, 1, 1),
    "h": (0, 1, 1),
}

# Each face of a cell as two triangles; each triangle lists its three corners
# and then the three corner pairs whose springs bound it.
_FACES = (
    (("abd", ("ab", "ad", "bd")), ("cdb", ("cd", "cb", "db"))),
    (("cbg", ("cb", "cg", "bg")), ("fgb", ("fg", "fb", "gb"))),
    (("feh", ("fe", "fg", "eg")), ("hgf", ("hg", "he", "ge"))),
    (("ade", ("ad", "ae", "de")), ("hed", ("he", "hd", "ed"))),
    (("cgd", ("cg", "cd", "gd")), ("hdg", ("hd", "hg", "dg"))),
    (("aeb", ("ae", "ab", "eb")), ("fbe", ("fb", "fe", "be"))),
)

# The five tetrahedra a cell is split into: four corners and a centre one.
_TETRAHEDRA = ("abde", "cbgd", "fbeg", "hdge", "bdeg")


@dataclass(eq=False)
class SoftBodyMesh:
    """The lattice of a soft body: particles, springs, volumes and cells."""

    rows: int
    cols: int
    tubes: int
    particles: list[Particle] = field(default_factory=list)
    springs: list[Spring] = field(default_factory=list)
    volumes: list[Volume] = field(default_factory=list)
    cells: list = field(default_factory=list)
    tex_buf: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float32))
    _spring_map: dict = field(default_factory=dict, repr=False)

    def index(self, i: int, j: int, k: int) -> int:
        """The particle index of lattice point (i, j, k)."""
        return (i * self.cols + j) * self.tubes + k

    def spring_between(self, k0: int, k1: int) -> Spring:
        """The spring joining two particle indices, in either order."""
        try:
            return self._spring_map[_key(k0, k1)]
        except KeyError:
            raise KeyError(f"no spring between particles {k0} and {k1}") from None

    def add_spring(self, k0: int, k1: int, alpha: float) -> Spring:
        """Connect two particles with a new spring and register it."""
        spring = Spring(self.particles[k0], self.particles[k1], alpha)
        self._spring_map[_key(k0, k1)] = spring
        self.springs.append(spring)
        return spring

    def hexas(self) -> Iterator[Hexa]:
        """Every cell of the lattice in row, column, tube order."""
        for plane in self.cells:
            for line in plane:
                yield from line

    def tris(self) -> Iterator[Tri]:
        """Every surface triangle of every cell."""
        for hexa in self.hexas():
            for quad in hexa.quads:
                yield from quad.tris

    def _cell_corners(self, i: int, j: int, k: int) -> dict[str, int]:
        return {name: self.index(i + di, j + dj, k + dk)
                for name, (di, dj, dk) in _CORNERS.items()}


def _check(rows, cols, tubes, mass, alpha, damping, pradius) -> None:
    if rows <= 1 or cols <= 1 or tubes <= 1:
        raise ValueError("a soft body needs at least two points along each axis")
    if mass <= 0.0:
        raise ValueError("mass must be positive")
    if alpha < 0.0:
        raise ValueError("alpha must not be negative")
    if damping < 0.0:
        raise ValueError("damping must not be negative")
    if pradius < 0.0:
        raise ValueError("particle radius must not be negative")


def build_softbody_mesh(rows: int, cols: int, tubes: int, x000, x111,
                        mass: float, alpha: float, damping: float,
                        pradius: float) -> SoftBodyMesh:
    """Build an axis-aligned box of particles from corner ``x000`` to ``x111``.

    Rows run along x, columns along y and tubes along z.
    """
    _check(rows, cols, tubes, mass, alpha, damping, pradius)
    lo = _vec3(x000)
    hi = _vec3(x111)
    mesh = SoftBodyMesh(rows, cols, tubes)

    n_verts = rows * cols * tubes
    particle_mass = mass / n_verts
    for i in range(rows):
        gx = i / (rows - 1)
        for j in range(cols):
            gy = j / (cols - 1)
            for k in range(tubes):
                gz = k / (tubes - 1)
                pos = (
                    (1.0 - gx) * lo[0] + gx * hi[0],
                    (1.0 - gy) * lo[1] + gy * hi[1],
                    (1.0 - gz) * lo[2] + gz * hi[2],
                )
                mesh.particles.append(make_particle(
                    pos, mass=particle_mass, radius=pradius,
                    damping=damping, fixed=False))

    # Structural and shear springs, added point by point.
    for i in range(rows):
        for j in range(cols):
            for k in range(tubes):
                here = mesh.index(i, j, k)
                more_i = i < rows - 1
                more_j = j < cols - 1
                more_k = k < tubes - 1
                if more_i:
                    mesh.add_spring(here, mesh.index(i + 1, j, k), alpha)
                if more_j:
                    mesh.add_spring(here, mesh.index(i, j + 1, k), alpha)
                if more_k:
                    mesh.add_spring(here, mesh.index(i, j, k + 1), alpha)
                if more_i and more_j:
                    mesh.add_spring(here, mesh.index(i + 1, j + 1, k), alpha)
                    mesh.add_spring(mesh.index(i + 1, j, k), mesh.index(i, j + 1, k), alpha)
                if more_j and more_k:
                    mesh.add_spring(here, mesh.index(i, j + 1, k + 1), alpha)
                    mesh.add_spring(mesh.index(i, j + 1, k), mesh.index(i, j, k + 1), alpha)
                if more_i and more_k:
                    mesh.add_spring(here, mesh.index(i + 1, j, k + 1), alpha)
                    mesh.add_spring(mesh.index(i + 1, j, k), mesh.index(i, j, k + 1), alpha)

    def spring(corners: dict[str, int], pair: str) -> Spring:
        return mesh.spring_between(corners[pair[0]], corners[pair[1]])

    # Volume constraints: five tetrahedra per cell.
    for i in range(rows - 1):
        for j in range(cols - 1):
            for k in range(tubes - 1):
                corners = mesh._cell_corners(i, j, k)
                for tet in _TETRAHEDRA:
                    q0, q1, q2, q3 = tet
                    edges = (q0 + q1, q0 + q2, q0 + q3, q1 + q2, q1 + q3, q2 + q3)
                    mesh.volumes.append(Volume(
                        *(mesh.particles[corners[name]] for name in tet),
                        0.0,
                        [spring(corners, edge) for edge in edges],
                    ))

    # Cells with their surface triangles.
    cells = []
    for i in range(rows - 1):
        plane = []
        for j in range(cols - 1):
            line = []
            for k in range(tubes - 1):
                corners = mesh._cell_corners(i, j, k)
                hexa = Hexa()
                for quad, face in zip(hexa.quads, _FACES):
                    for tri, (names, edges) in zip(quad.tris, face):
                        tri.index0, tri.index1, tri.index2 = (corners[n] for n in names)
                        tri.vertex_particles = [mesh.particles[k_] for k_ in tri.indices]
                        tri.edge_springs = [spring(corners, edge) for edge in edges]
                line.append(hexa)
            plane.append(line)
        cells.append(plane)
    mesh.cells = cells

    mesh.tex_buf = np.array(
        [value
         for i in range(rows)
         for j in range(cols)
         for _ in range(tubes)
         for value in (i / (rows - 1.0), j / (cols - 1.0))],
        dtype=np.float32,
    )
    return mesh