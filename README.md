# trimeshlab

Tools for working with triangle meshes:

- `trimeshlab.halfedge`: an array-based half-edge structure (`HalfedgeDS`)
  built from a triangle list by `build_mesh`, or by `build_mesh_with_faces`,
  which also stores one half-edge per face. Boundaries get exterior
  half-edges linked into cycles (`next_boundary_halfedge`). `HalfedgeDS.dump()`
  returns a text table of all references.
- `trimeshlab.subdivision`: one round of 1-to-4 refinement.
  `LoopSubdivision.subdivide()` applies Loop subdivision;
  `LoopSubdivision.subdivide_adaptive()` inserts edge points only on edges
  touching a vertex whose `gaussian_curvature` estimate exceeds 0.1.
  `SphereGeneration.subdivide()` places each new vertex at the normalised
  sum of its edge's endpoints. Results are in `new_vertices` and `new_faces`;
  `summary(verbosity)` describes them. Both need a mesh made with
  `build_mesh_with_faces`.
- `trimeshlab.meshparts`: linked elements `Vertex`, `HalfEdge`, `Edge`,
  `PrimalFace` and `VertexTree`.
- `trimeshlab.mesh.Mesh`: a mesh of linked vertices, faces and half-edges,
  with `face_normals`, `face_normals_hed`, `vertex_normals`,
  `vertex_normals_hed` (which points the opposite way), a per-vertex
  `gaussian_curvature` estimate (2π minus an angle sum, over a third of the
  one-ring area), `vertex_degree_statistics` and `count_boundaries`.
- `trimeshlab.electric`: `cotmatrix` and `barycentric_massmatrix`, and
  `ElectricMesh`, which solves `-L u = M rho` for a per-vertex charge
  density and computes a per-face electric field, also expressed in a
  per-face tangent frame (`basis_x`, `basis_y`).
- `trimeshlab.meshio`: `read_off`, `read_obj`, `read_mesh` (chosen by file
  ending) and `write_off`. Only triangle faces are accepted.

## Install

```
pip install .
```

## Library use

```python
from trimeshlab.cli import octagon, perform_loop_subdivision
from trimeshlab.meshio import write_off

vertices, faces = octagon()
vertices, faces = perform_loop_subdivision(vertices, faces)
write_off("octagon_loop.off", vertices, faces)
```

`perform_sphere_generation` and `perform_adaptive_loop_subdivision` work
the same way.

Electric field from a charge density:

```python
import numpy as np
from trimeshlab.electric import ElectricMesh
from trimeshlab.meshio import read_mesh

vertices, faces = read_mesh("surface.obj")
mesh = ElectricMesh(vertices, faces)
rho = np.zeros((len(vertices), 1))
rho[0, 0] = 1.0
rho[1, 0] = -1.0
mesh.initialize_charge_density(rho)
mesh.solve_for_u()
mesh.compute_electric_field()
print(mesh.electric_field[:5])
```

## Command line

```
trimeshlab [mesh] [-s {adaptive,loop,sphere}]... [-o OUTPUT] [--electric] [-v]
```

- `mesh`: an `.off` or `.obj` file; without it the built-in octahedron is used.
- `-s/--step`: a refinement step to apply; repeat to apply several in order.
  The vertex and face counts are printed after each step.
- `-o/--output`: write the resulting mesh as OFF.
- `--electric`: solve for the field of a zero charge density and print the
  largest field magnitude.
- `-v/--verbose`: log progress.

Errors reading or writing files are printed and the command exits with
status 1.

## What it does not do

There is no viewer or interactive display: meshes are read, processed and
written as files. Only OFF output is written; OBJ is read only. The
electric field command line option uses a zero charge density; other
densities are set through `ElectricMesh` in Python.

## Tests

```
pip install .[test]
pytest
```