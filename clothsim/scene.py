"""The demo scene: cloths, a soft body, colliders, wind and a held object."""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import Optional

import numpy as np

from clothsim.camera import Camera
from clothsim.cloth import Cloth
from clothsim.colliders import Cylinder, Plane, Tetrahedron
from clothsim.particle import Particle
from clothsim.softbody import SoftBody


def _normalized(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    return v / n if n > 0.0 else v.copy()


class HeldObject(Enum):
    """What the camera is carrying in front of it."""

    NONE = 0
    SPHERE = 1
    TETRAHEDRON = 2


#: Radius of spheres in the scene, including a held one.
SPHERE_RADIUS = 0.1


class Scene:
    """Owns the simulated bodies and the colliders they run into."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.t = 0.0
        self.h = 1e-2
        self.grav = np.zeros(3)

        self.wind = np.zeros(3)
        self.wind_max_magnitude = 5.0
        self.wind_target = np.zeros(3)
        self.prev_wind_target = np.zeros(3)
        self.wind_n = 3000
        self.wind_i = 0

        self.held_object = HeldObject.NONE

        self.cloths: list[Cloth] = []
        self.soft_bodies: list[SoftBody] = []
        self.spheres: list[Particle] = []
        self.planes: list[Plane] = []
        self.cylinders: list[Cylinder] = []
        self.tetrahedrons: list[Tetrahedron] = []

        self._rng = rng if rng is not None else random.Random()

    def load(self) -> None:
        """Populate the scene with the demo bodies and colliders."""
        # Units: metres, kilograms, seconds.
        self.h = 1e-3
        self.grav = np.array([0.0, -9.8, 0.0])

        rows = 15
        cols = 15
        mass = 0.1
        alpha = 0.0
        damping = 1e-3
        pradius = 0.01

        self.cloths.append(Cloth(
            rows, cols,
            (-0.25, 0.5, 0.0), (0.25, 0.5, 0.0),
            (-0.25, 0.5, -0.5), (0.25, 0.5, -0.5),
            mass, alpha, damping, pradius))
        self.cloths.append(Cloth(
            rows, cols,
            (-1.25, 0.5, 0.0), (-0.75, 0.5, 0.0),
            (-1.25, 0.5, -0.5), (-0.75, 0.5, -0.5),
            mass, alpha, damping, pradius))
        self.cloths.append(Cloth(
            2 * rows, 2 * cols,
            (-2.0, 1.0, 0.0), (-2.0, 0.5, 0.0),
            (-3.0, 1.0, 0.0), (-3.0, 0.5, 0.0),
            mass, alpha, damping, pradius))

        self.soft_bodies.append(SoftBody(
            10, 10, 10,
            (0.5, 0.5, 0.5), (0.75, 0.75, 0.75),
            1.0, 1.0, 1e-3, pradius))

        self.spheres.append(Particle(r=SPHERE_RADIUS, x=(0.0, 0.2, 0.0)))
        self.planes.append(Plane())
        self.cylinders.append(Cylinder(r=0.025, h=1.1, x=(-1.975, 0.0, 0.0)))

        self.held_object = HeldObject.NONE

    def tare(self) -> None:
        """Record the current state of every body as its initial state."""
        for sphere in self.spheres:
            sphere.tare()
        for cloth in self.cloths:
            cloth.tare()
        for body in self.soft_bodies:
            body.tare()

    def reset(self) -> None:
        """Rewind the clock and return every body to its initial state."""
        self.t = 0.0
        for sphere in self.spheres:
            sphere.reset()
        for cloth in self.cloths:
            cloth.reset()
        for body in self.soft_bodies:
            body.reset()

    def time(self) -> float:
        """Simulated time since the last reset."""
        return self.t

    @staticmethod
    def _camera_point(camera: Camera) -> np.ndarray:
        return camera.translation + _normalized(camera.forward())

    def _place_held_tetrahedron(self, camera: Camera) -> None:
        tetrahedron = self.tetrahedrons[-1]
        forward = _normalized(camera.forward())
        up = np.array([0.0, 1.0, 0.0])
        right = _normalized(np.cross(forward, up))
        up = _normalized(np.cross(right, forward))
        origin = camera.translation

        tetrahedron.x = [
            origin + forward * 1.5,
            origin + forward + right * 0.1 - up * 0.1,
            origin + forward + right * 0.2 - up * 0.1,
            origin + forward + right * 0.15 - up * 0.25,
        ]

    def _update_wind(self) -> None:
        self.wind_i += 1
        if self.wind_i == self.wind_n:
            self.prev_wind_target = self.wind_target
            magnitude = self.wind_max_magnitude * self._rng.random()
            direction = 2.0 * math.pi * self._rng.random()
            self.wind_target = np.array([
                magnitude * math.cos(direction),
                0.0,
                magnitude * math.sin(direction),
            ])
            self.wind_i = 0
        blend = min(1.0, 2.0 * self.wind_i / self.wind_n)
        self.wind = self.prev_wind_target * (1.0 - blend) + self.wind_target * blend

    def step(self, camera: Camera) -> None:
        """Advance the whole scene by one time step."""
        self.t += self.h

        moving = self.spheres[0]
        moving.x = moving.x.copy()
        moving.x[2] = 0.5 * math.sin(0.5 * self.t)

        if self.held_object is HeldObject.SPHERE:
            self.spheres[-1].x = self._camera_point(camera)
        elif self.held_object is HeldObject.TETRAHEDRON:
            self._place_held_tetrahedron(camera)

        self._update_wind()

        for cloth in self.cloths:
            cloth.step(self.h, self.grav, self.wind, self.spheres,
                       self.planes, self.cylinders, self.tetrahedrons)
        for body in self.soft_bodies:
            body.step(self.h, self.grav, self.wind, self.spheres,
                      self.planes, self.cylinders, self.tetrahedrons)

    def set_held_object(self, held_object: HeldObject, camera: Camera) -> None:
        """Swap the object carried in front of the camera."""
        held_object = HeldObject(held_object)
        if self.held_object is held_object:
            return

        if self.held_object is HeldObject.SPHERE:
            self.spheres.pop()
        elif self.held_object is HeldObject.TETRAHEDRON:
            self.tetrahedrons.pop()

        if held_object is HeldObject.SPHERE:
            self.spheres.append(Particle(r=SPHERE_RADIUS, x=self._camera_point(camera)))
        elif held_object is HeldObject.TETRAHEDRON:
            tetrahedron = Tetrahedron()
            tetrahedron.x[0] = self._camera_point(camera)
            self.tetrahedrons.append(tetrahedron)

        self.held_object = held_object