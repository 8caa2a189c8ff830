import math

import numpy as np
import pytest

from trimeshlab.halfedge import build_mesh, build_mesh_with_faces
from trimeshlab.subdivision import LoopSubdivision, SphereGeneration, compute_alpha

OCTA_V = np.array(
    [
        [0.0, 0.0, 1.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [-1.0, 0.0, 0.0],
        [0.0, -1.0, 0.0],
        [0.0, 0.0, -1.0],
    ]
)
OCTA_F = np.array(
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


def _loop():
    mesh = build_mesh_with_faces(len(OCTA_V), OCTA_F)
    return mesh, LoopSubdivision(OCTA_V, OCTA_F, mesh)


def _undirected_edges(faces):
    edges = set()
    for a, b, c in faces.tolist():
        for u, v in ((a, b), (b, c), (c, a)):
            edges.add((min(u, v), max(u, v)))
    return edges


def test_compute_alpha_values():
    assert compute_alpha(3) == 3.0 / 16
    assert compute_alpha(2) == 0.0
    assert compute_alpha(5) == pytest.approx(3.0 / 40)


def test_loop_sizes():
    mesh, loop = _loop()
    loop.subdivide()
    assert loop.new_vertices.shape == (len(OCTA_V) + mesh.n_halfedges // 2, 3)
    assert loop.new_faces.shape == (4 * len(OCTA_F), 3)


def test_loop_preserves_euler_characteristic():
    _, loop = _loop()
    loop.subdivide()
    n_v = len(loop.new_vertices)
    n_e = len(_undirected_edges(loop.new_faces))
    n_f = len(loop.new_faces)
    before = len(OCTA_V) - len(_undirected_edges(OCTA_F)) + len(OCTA_F)
    assert n_v - n_e + n_f == before


def test_loop_uses_every_vertex():
    _, loop = _loop()
    loop.subdivide()
    assert set(loop.new_faces.ravel().tolist()) == set(range(len(loop.new_vertices)))


def test_vertex_degrees_sum_to_halfedges():
    mesh, loop = _loop()
    degrees = [loop.vertex_degree(v) for v in range(len(OCTA_V))]
    assert sum(degrees) == mesh.n_halfedges
    assert len(set(degrees)) == 1


def test_loop_moves_original_vertices_along_their_direction():
    _, loop = _loop()
    loop.subdivide()
    for v in range(len(OCTA_V)):
        cross = np.cross(loop.new_vertices[v], OCTA_V[v])
        assert np.allclose(cross, 0.0)
    norms = np.linalg.norm(loop.new_vertices[: len(OCTA_V)], axis=1)
    assert np.allclose(norms, norms[0])


def test_loop_edge_points_are_symmetric():
    _, loop = _loop()
    loop.subdivide()
    norms = np.linalg.norm(loop.new_vertices[len(OCTA_V):], axis=1)
    assert np.allclose(norms, norms[0])


def test_gaussian_curvature_is_uniform_and_above_threshold():
    _, loop = _loop()
    values = [loop.gaussian_curvature(v) for v in range(len(OCTA_V))]
    assert all(val == pytest.approx(values[0]) for val in values)
    assert values[0] == pytest.approx(4 * math.pi / 3)


def test_adaptive_matches_full_subdivision():
    _, full = _loop()
    full.subdivide()
    _, adaptive = _loop()
    adaptive.subdivide_adaptive()
    assert np.allclose(full.new_vertices, adaptive.new_vertices)
    assert np.array_equal(full.new_faces, adaptive.new_faces)


def test_summary_lines():
    _, loop = _loop()
    loop.subdivide()
    short = loop.summary(0)
    assert short.startswith("\tn=")
    assert "\n" not in short
    long = loop.summary(1).splitlines()
    assert len(long) == 2 + loop.n_vertices + loop.n_faces
    assert long[1 + loop.n_vertices] == f"new faces: {loop.n_faces}"


def test_loop_requires_face_records():
    mesh = build_mesh(len(OCTA_V), OCTA_F)
    with pytest.raises(ValueError):
        LoopSubdivision(OCTA_V, OCTA_F, mesh)


def test_loop_on_single_triangle_boundary():
    v = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    f = np.array([[0, 1, 2]])
    mesh = build_mesh_with_faces(3, f)
    loop = LoopSubdivision(v, f, mesh)
    loop.subdivide()
    assert loop.new_faces.shape == (4, 3)
    assert set(loop.new_faces.ravel().tolist()) == set(range(len(loop.new_vertices)))


def test_sphere_vertices_on_unit_sphere():
    mesh = build_mesh_with_faces(len(OCTA_V), OCTA_F)
    sphere = SphereGeneration(OCTA_V, OCTA_F, mesh)
    sphere.subdivide()
    norms = np.linalg.norm(sphere.new_vertices, axis=1)
    assert np.allclose(norms, 1.0)
    assert np.allclose(sphere.new_vertices[: len(OCTA_V)], OCTA_V)


def test_sphere_two_rounds_keep_topology():
    v, f = OCTA_V, OCTA_F
    for _ in range(2):
        mesh = build_mesh_with_faces(len(v), f)
        sphere = SphereGeneration(v, f, mesh)
        sphere.subdivide()
        new_v, new_f = sphere.new_vertices, sphere.new_faces
        assert len(new_f) == 4 * len(f)
        assert len(new_v) - len(_undirected_edges(new_f)) + len(new_f) == (
            len(v) - len(_undirected_edges(f)) + len(f)
        )
        v, f = new_v, new_f
    assert np.allclose(np.linalg.norm(v, axis=1), 1.0)


def test_sphere_summary():
    mesh = build_mesh_with_faces(len(OCTA_V), OCTA_F)
    sphere = SphereGeneration(OCTA_V, OCTA_F, mesh)
    sphere.subdivide()
    assert sphere.summary(0) == f"\tn={len(sphere.new_vertices)}, f={len(sphere.new_faces)}"