"""Loop subdivision and sphere generation on half-edge triangle meshes."""

from __future__ import annotations

import logging
import math

import numpy as np

from trimeshlab.halfedge import HalfedgeDS

logger = logging.getLogger(__name__)

CURVATURE_THRESHOLD = 0.1


def compute_alpha(degree: int) -> float:
    """Return the Loop weight of a neighbour for a vertex of the given degree."""
    if degree == 3:
        return 3.0 / 16
    if degree > 3:
        return 3.0 / (8 * degree)
    return 0.0


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a <= b else (b, a)


def _format_row(row) -> str:
    return " ".join(str(x) for x in row.tolist())


class _Subdivider:
    """Shared state of one round of 1-to-4 triangle subdivision."""

    def _setup(self, vertices, faces, mesh: HalfedgeDS) -> None:
        if mesh.face_edge is None:
            raise ValueError("the half-edge mesh must store face incidences")
        self.mesh = mesh
        self.vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
        self.faces = np.asarray(faces, dtype=int).reshape(-1, 3)
        n_edges = mesh.n_halfedges // 2
        self.n_vertices = len(self.vertices) + n_edges
        self.n_faces = 4 * len(self.faces)
        self.new_vertices = np.zeros((self.n_vertices, 3))
        self.new_faces = np.zeros((self.n_faces, 3), dtype=int)

    def _face_corners(self, f: int) -> tuple[int, int, int]:
        he = self.mesh
        h = he.face_edge[f]
        h1 = he.next[h]
        h2 = he.next[h1]
        return he.target[h], he.target[h1], he.target[h2]

    def _summary_text(self, verbosity: int) -> str:
        lines = [f"\tn={self.n_vertices}, f={self.n_faces}"]
        if verbosity > 0:
            lines += [f"v{i}: {_format_row(r)}" for i, r in enumerate(self.new_vertices)]
            lines.append(f"new faces: {self.n_faces}")
            lines += [f"f{i}: {_format_row(r)}" for i, r in enumerate(self.new_faces)]
        return "\n".join(lines)


class LoopSubdivision(_Subdivider):
    """One round of Loop subdivision; results in ``new_vertices``/``new_faces``."""

    def __init__(self, vertices, faces, mesh: HalfedgeDS):
        self._setup(vertices, faces, mesh)

    def summary(self, verbosity: int) -> str:
        """Describe the subdivided mesh; with ``verbosity > 0`` list everything."""
        return self._summary_text(verbosity)

    def _edge_point(self, h: int) -> np.ndarray:
        he, V = self.mesh, self.vertices
        opp = he.opposite[h]
        return (
            3.0 / 8 * V[he.target[h]]
            + 3.0 / 8 * V[he.target[opp]]
            + 1.0 / 8 * V[he.target[he.next[h]]]
            + 1.0 / 8 * V[he.target[he.next[opp]]]
        )

    def _ring(self, v: int):
        """Yield the outgoing half-edges of ``v``, starting from a fixed one."""
        he = self.mesh
        edge = he.opposite[he.vertex_edge[v]]
        yield edge
        adjacent = he.next[he.opposite[edge]]
        while adjacent != edge:
            yield adjacent
            adjacent = he.next[he.opposite[adjacent]]

    def vertex_degree(self, v: int) -> int:
        """Return the number of half-edges leaving ``v``."""
        return sum(1 for _ in self._ring(v))

    def _updated_point(self, v: int) -> np.ndarray:
        degree = self.vertex_degree(v)
        alpha = compute_alpha(degree)
        point = (1.0 - degree * alpha) * self.vertices[v]
        for e in self._ring(v):
            point = point + alpha * self.vertices[self.mesh.target[e]]
        return point

    def gaussian_curvature(self, v: int) -> float:
        """Return the angle-defect estimate used by adaptive subdivision."""
        he = self.mesh
        angle_sum = 0.0
        edge = he.vertex_edge[v]
        adjacent = he.next[he.opposite[edge]]
        while True:
            angle_sum += 2 * math.pi / 3
            edge = he.next[he.opposite[adjacent]]
            adjacent = he.next[he.opposite[adjacent]]
            if adjacent == edge:
                break
        return 2 * math.pi - angle_sum

    def _refine(self, edge_selected) -> None:
        he = self.mesh
        n = he.n_vertices
        self.new_vertices[:n] = self.vertices

        midpoints: dict[tuple[int, int], int] = {}
        for h in range(he.n_halfedges):
            a = he.target[h]
            b = he.target[he.opposite[h]]
            key = _edge_key(a, b)
            if key not in midpoints and edge_selected(a, b):
                self.new_vertices[n + len(midpoints)] = self._edge_point(h)
                midpoints[key] = len(midpoints)

        def mid(a: int, b: int) -> int:
            try:
                return n + midpoints[_edge_key(a, b)]
            except KeyError:
                raise ValueError(f"edge ({a}, {b}) has no midpoint") from None

        for i in range(he.n_faces):
            v1, v2, v3 = self._face_corners(i)
            v4, v5, v6 = mid(v1, v2), mid(v2, v3), mid(v1, v3)
            self.new_faces[4 * i : 4 * i + 4] = [
                (v1, v4, v6),
                (v4, v2, v5),
                (v4, v5, v6),
                (v6, v5, v3),
            ]

        for v in range(n):
            self.new_vertices[v] = self._updated_point(v)

    def subdivide(self) -> None:
        """Perform one round of Loop subdivision."""
        logger.info("Performing one round of Loop subdivision")
        self._refine(lambda a, b: True)

    def subdivide_adaptive(self) -> None:
        """Subdivide, inserting midpoints only on edges near curved vertices."""
        logger.info("Performing one round subdivision")
        curvature = [self.gaussian_curvature(v) for v in range(self.mesh.n_vertices)]
        self._refine(
            lambda a, b: curvature[a] > CURVATURE_THRESHOLD
            or curvature[b] > CURVATURE_THRESHOLD
        )


class SphereGeneration(_Subdivider):
    """Midpoint subdivision with new vertices projected onto the unit sphere."""

    def __init__(self, vertices, faces, mesh: HalfedgeDS):
        self._setup(vertices, faces, mesh)

    def summary(self, verbosity: int) -> str:
        """Describe the subdivided mesh; with ``verbosity > 0`` list everything."""
        return self._summary_text(verbosity)

    def subdivide(self) -> None:
        """Perform one round of subdivision."""
        logger.info("Performing one round subdivision")
        he, V = self.mesh, self.vertices
        n = he.n_vertices
        self.new_vertices[:n] = V

        midpoints: dict[tuple[int, int], int] = {}
        for h in range(he.n_halfedges):
            a = he.target[h]
            b = he.target[he.opposite[h]]
            key = _edge_key(a, b)
            if key not in midpoints:
                point = V[a] + V[b]
                norm = np.linalg.norm(point)
                index = n + len(midpoints)
                self.new_vertices[index] = point / norm if norm > 0 else point
                midpoints[key] = index

        for f in range(he.n_faces):
            v0, v1, v2 = self._face_corners(f)
            m0 = midpoints[_edge_key(v0, v1)]
            m1 = midpoints[_edge_key(v1, v2)]
            m2 = midpoints[_edge_key(v2, v0)]
            self.new_faces[4 * f : 4 * f + 4] = [
                (v0, m0, m2),
                (m0, v1, m1),
                (m1, v2, m2),
                (m0, m1, m2),
            ]