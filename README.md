# clothsim

A small physics library for simulating cloth and volumetric soft bodies with
position-based dynamics. Particles are joined by distance constraints
("springs") that tear once stretched to two and a half times their rest
length; soft bodies add volume constraints on tetrahedra. Bodies are pushed
by gravity and a slowly drifting wind, and collide with spheres, planes,
capped cylinders and tetrahedra.

Only `numpy` is required at run time.

## What is in the package

| Module | Contents |
| --- | --- |
| `clothsim.particle` | `Particle`, `Spring`, `Volume`, the mesh cells `Tri`, `Quad`, `Hexa`, and `make_particle` |
| `clothsim.colliders` | `Plane`, `Cylinder`, `Tetrahedron` (with its `Face`s) and `collide_particles` |
| `clothsim.matrix_stack` | `MatrixStack` plus `translation`, `scaling`, `rotation`, `perspective`, `ortho`, `look_at`, `format_matrix` |
| `clothsim.camera` | `Camera`, a free-look camera turned by mouse drags and moved with W, A, S, D |
| `clothsim.cloth` | `Cloth`, a rectangular sheet pinned at both ends of its first row |
| `clothsim.softbody_mesh` | `build_softbody_mesh` and the `SoftBodyMesh` it returns |
| `clothsim.softbody` | `SoftBody`, a box of particles held together by springs and volumes |
| `clothsim.scene` | `Scene`, the demo set-up, and the `HeldObject` choice |
| `clothsim.textfile` | `valid_utf8`, `text_file_read`, `text_file_write` |

## Running the demo scene

```python
import random

from clothsim.camera import Camera
from clothsim.scene import HeldObject, Scene

camera = Camera()
scene = Scene(rng=random.Random(1))   # the rng only drives the wind
scene.load()      # three cloths, a soft body, a moving sphere, ground and a flagpole
scene.tare()      # remember the current state as the one to reset to

for _ in range(1000):
    scene.step(camera)

scene.set_held_object(HeldObject.SPHERE, camera)   # a sphere follows the camera
scene.step(camera)
print(scene.time())

scene.reset()     # clock back to zero, bodies back to the tared state
```

Each `step` advances the clock by the scene's fixed time step, moves the
driven sphere, places any held sphere or tetrahedron in front of the camera,
updates the wind (a new random target is picked every 3000 steps and blended
in), and steps every cloth and soft body against all colliders in the scene.

The camera is driven by calls rather than by a window: `mouse_clicked` and
`mouse_moved` turn it, and `move(keys, t)` moves it for the time elapsed
since the previous call while the given keys (`"w"`, `"a"`, `"s"`, `"d"`)
are held.

## Bodies on their own

```python
from clothsim.cloth import Cloth
from clothsim.colliders import Plane

cloth = Cloth(10, 10,
              (-0.5, 1.0, 0.0), (0.5, 1.0, 0.0),
              (-0.5, 1.0, -1.0), (0.5, 1.0, -1.0),
              mass=0.1, alpha=0.0, damping=1e-3, pradius=0.01)
for _ in range(100):
    cloth.step(1e-3, (0.0, -9.8, 0.0), (0.0, 0.0, 0.0),
               spheres=[], planes=[Plane()], cylinders=[], tetrahedrons=[])
cloth.update_pos_nor()
cloth.update_ele()   # triangles bounded by a torn spring are left out
```

`Cloth` and `SoftBody` keep flat `float32` position, normal and texture
coordinate buffers (`pos_buf`, `nor_buf`, `tex_buf`) and a triangle index
list (`ele_buf`). Invalid sizes, masses, compliances, damping or radii raise
`ValueError`.

## Colliders

`collide_particles` projects every particle that is not fixed out of the
given spheres (which are `Particle`s with a radius), planes, cylinders and
tetrahedra:

```python
from clothsim.colliders import Plane, collide_particles
from clothsim.particle import make_particle

particles = [make_particle((0.0, -0.5, 0.0), radius=0.01)]
collide_particles(particles, spheres=[], planes=[Plane()], cylinders=[], tetrahedrons=[])
```

## Matrices

`MatrixStack` keeps a stack of 4×4 transforms with an identity at the bottom;
`translate`, `scale`, `rotate` and `mult` right-multiply the top matrix, and
`push`/`pop` save and restore it (`pop` on the last matrix, or `push` past
the depth limit, raises `IndexError`). `format` and `format_matrix` render a
matrix as text. The helpers `perspective`, `ortho` and `look_at` build the
usual camera matrices as `numpy` arrays.

## Text files

`text_file_read` returns a file's contents and issues a `UserWarning` if the
bytes are not valid UTF-8 (as judged by `valid_utf8`); `text_file_write`
replaces a file's contents.

## What this package does not do

There is no window, no rendering and no interactive program: the package
simulates and produces vertex buffers and matrices, but does not draw them,
open a display, compile shaders or load mesh files. Drive the camera and the
scene from your own code.

## Tests

The test suite uses pytest and lives in `tests/`.