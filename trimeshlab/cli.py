"""Command line driver for subdivision and electric field computations."""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from trimeshlab.electric import ElectricMesh
from trimeshlab.halfedge import build_mesh_with_faces
from trimeshlab.meshio import read_mesh, write_off
from trimeshlab.subdivision import LoopSubdivision, SphereGeneration

logger = logging.getLogger(__name__)


def octagon() -> tuple[np.ndarray, np.ndarray]:
    """Return the octahedron whose equator is inscribed in the unit circle."""
    vertices = np.array(
        [
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [-1.0, 0.0, 0.0],
            [0.0, -1.0, 0.0],
            [0.0, 0.0, -1.0],
        ]
    )
    faces = np.array(
        [
            [0, 1, 2],
            [0, 2, 3],
            [0, 3, 4],
            [0, 4, 1],
            [5, 2, 1],
            [5, 3, 2],
            [5, 4, 3],
            [5, 1, 4],
        ]
    )
    return vertices, faces


def _run(subdivider_cls, vertices, faces, adaptive: bool = False):
    V = np.asarray(vertices, dtype=float)
    F = np.asarray(faces, dtype=int)
    he = build_mesh_with_faces(len(V), F)
    step = subdivider_cls(V, F, he)
    if adaptive:
        step.subdivide_adaptive()
    else:
        step.subdivide()
    logger.info("%s", step.summary(0))
    return step.new_vertices.copy(), step.new_faces.copy()


def perform_loop_subdivision(vertices, faces) -> tuple[np.ndarray, np.ndarray]:
    """Return the mesh after one round of Loop subdivision."""
    return _run(LoopSubdivision, vertices, faces)


def perform_sphere_generation(vertices, faces) -> tuple[np.ndarray, np.ndarray]:
    """Return the mesh after one round of sphere-projected midpoint subdivision."""
    return _run(SphereGeneration, vertices, faces)


def perform_adaptive_loop_subdivision(vertices, faces) -> tuple[np.ndarray, np.ndarray]:
    """Return the mesh after one round of curvature-adaptive Loop subdivision."""
    return _run(LoopSubdivision, vertices, faces, adaptive=True)


_STEPS = {
    "loop": perform_loop_subdivision,
    "sphere": perform_sphere_generation,
    "adaptive": perform_adaptive_loop_subdivision,
}


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trimeshlab", description="Subdivision surfaces and electric fields on triangle meshes."
    )
    parser.add_argument("mesh", nargs="?", help="input mesh (.off or .obj); default: octahedron")
    parser.add_argument(
        "-s", "--step", action="append", choices=sorted(_STEPS), default=[],
        help="subdivision step to apply; may be repeated",
    )
    parser.add_argument("-o", "--output", help="write the resulting mesh to this OFF file")
    parser.add_argument(
        "--electric", action="store_true",
        help="solve for the electric field of a zero charge density",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    return parser


def main(argv=None) -> int:
    args = _parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    print(" -- Subdivision Surfaces -- ")
    try:
        if args.mesh is None:
            vertices, faces = octagon()
        else:
            vertices, faces = read_mesh(args.mesh)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        for name in args.step:
            vertices, faces = _STEPS[name](vertices, faces)
            print(f"\tn={len(vertices)}, f={len(faces)}")

        if args.electric:
            electric = ElectricMesh(vertices, faces)
            electric.initialize_charge_density(np.zeros((len(vertices), 1)))
            electric.solve_for_u()
            electric.compute_electric_field()
            magnitude = float(np.max(np.linalg.norm(electric.electric_field, axis=1), initial=0.0))
            print(f"electric field: {len(faces)} faces, max |E| = {magnitude:.6g}")

        if args.output:
            write_off(args.output, vertices, faces)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())