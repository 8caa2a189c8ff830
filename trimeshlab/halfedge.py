"""Array-based half-edge data structure for triangle meshes."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

UNDEFINED = -1
_DEGREE = 3


class HalfedgeDS:
    """Combinatorial half-edge representation with integer references.

    Each half-edge ``e`` has an ``opposite``, a ``next`` and ``prev`` half-edge
    in the same face, a ``target`` vertex and a containing ``face``.
    Undefined references are ``-1``. Face/half-edge incidences are stored
    only when ``n_faces`` is given.
    """

    def __init__(self, n_vertices: int, n_halfedges: int, n_faces: int | None = None):
        if n_vertices < 0 or n_halfedges < 0 or (n_faces is not None and n_faces < 0):
            raise ValueError("sizes must be non-negative")
        self.n_vertices = n_vertices
        self.n_halfedges = n_halfedges
        self.n_faces = n_faces
        self.opposite = [UNDEFINED] * n_halfedges
        self.next = [UNDEFINED] * n_halfedges
        self.target = [UNDEFINED] * n_halfedges
        self.face = [UNDEFINED] * n_halfedges
        self.prev = [UNDEFINED] * n_halfedges
        self.vertex_edge = [UNDEFINED] * n_vertices
        self.face_edge = None if n_faces is None else [UNDEFINED] * n_faces

    def source(self, e: int) -> int:
        """Return the origin vertex of half-edge ``e``."""
        return self.target[self.opposite[e]]

    def is_exterior(self, e: int) -> bool:
        """True when ``e`` lies on a boundary cycle outside every face."""
        return self.face[e] == UNDEFINED

    def dump(self) -> str:
        """Return a textual table of all references and faces."""
        lines = [
            f"he{i}: \t{self.opposite[i]}\t{self.next[i]}\t{self.target[i]}\t{self.face[i]}"
            for i in range(self.n_halfedges)
        ]
        if self.face_edge is not None:
            lines.append(f"face list: {self.n_faces}")
            for f, e1 in enumerate(self.face_edge):
                e2 = self.next[e1]
                e3 = self.next[e2]
                lines.append(
                    f"f{f}: \tincident edge: e{e1}"
                    f"\t v{self.target[e3]}, v{self.target[e1]}, v{self.target[e2]}"
                )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"HalfedgeDS(n_vertices={self.n_vertices}, "
            f"n_halfedges={self.n_halfedges}, n_faces={self.n_faces})"
        )


def _face_rows(faces: Iterable[Sequence[int]]) -> list[tuple[int, int, int]]:
    rows = []
    for row in faces:
        values = tuple(int(x) for x in row)
        if len(values) != _DEGREE:
            raise ValueError("only triangle faces are supported")
        rows.append(values)
    return rows


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a <= b else (b, a)


def _face_edges(rows):
    """Yield (halfedge index, undirected key) for every face side."""
    for i, f in enumerate(rows):
        for j in range(_DEGREE):
            yield i * _DEGREE + j, _edge_key(f[j], f[(j + 1) % _DEGREE])


def _build(n_vertices: int, faces, store_faces: bool) -> HalfedgeDS:
    start = time.perf_counter()
    rows = _face_rows(faces)
    n_faces = len(rows)

    seen: set[tuple[int, int]] = set()
    inner_edges = 0
    for _, key in _face_edges(rows):
        if key in seen:
            inner_edges += 1
        else:
            seen.add(key)
    n_edges = len(seen)
    n_halfedges = 2 * n_edges
    n_boundary = n_edges - inner_edges
    logger.info(
        "n=%d, e=%d, f=%d, boundary edges=%d, inner edges=%d",
        n_vertices, n_edges, n_faces, n_boundary, inner_edges,
    )

    mesh = HalfedgeDS(n_vertices, n_halfedges, n_faces if store_faces else None)

    for i, f in enumerate(rows):
        for j in range(_DEGREE):
            e = i * _DEGREE + j
            mesh.target[e] = f[(j + 1) % _DEGREE]
            mesh.face[e] = i
        if store_faces:
            mesh.face_edge[i] = i * _DEGREE

    for e in range(n_faces * _DEGREE):
        nxt = e + 1 if e % _DEGREE != _DEGREE - 1 else e - (_DEGREE - 1)
        mesh.next[e] = nxt
        mesh.prev[nxt] = e

    inserted: dict[tuple[int, int], int] = {}
    for e, key in _face_edges(rows):
        other = inserted.get(key)
        if other is None:
            inserted[key] = e
        else:
            mesh.opposite[e] = other
            mesh.opposite[other] = e

    for e, v in enumerate(mesh.target):
        if v != UNDEFINED:
            mesh.vertex_edge[v] = e

    if n_boundary > 0:
        _add_boundary_edges(mesh)

    logger.info("Construction time: %f s", time.perf_counter() - start)
    return mesh


def _add_boundary_edges(mesh: HalfedgeDS) -> None:
    """Create exterior half-edges and link them into boundary cycles."""
    boundary = deque(
        e
        for e in range(mesh.n_halfedges)
        if mesh.opposite[e] == UNDEFINED and mesh.next[e] != UNDEFINED
    )
    counter = mesh.n_halfedges - len(boundary)

    while boundary:
        first = boundary.popleft()
        added = counter
        counter += 1
        mesh.opposite[added] = first
        mesh.opposite[first] = added
        mesh.target[added] = mesh.target[mesh.next[mesh.next[first]]]
        mesh.face[added] = UNDEFINED

    for e in range(mesh.n_halfedges):
        if mesh.face[e] == UNDEFINED:
            nxt = next_boundary_halfedge(mesh, e)
            mesh.next[e] = nxt
            mesh.prev[nxt] = e


def build_mesh(n_vertices: int, faces) -> HalfedgeDS:
    """Build the half-edge structure of a triangle mesh, without face records."""
    return _build(n_vertices, faces, store_faces=False)


def build_mesh_with_faces(n_vertices: int, faces) -> HalfedgeDS:
    """Build the half-edge structure, also storing one half-edge per face."""
    return _build(n_vertices, faces, store_faces=True)


def next_boundary_halfedge(mesh: HalfedgeDS, e: int) -> int:
    """Return the exterior half-edge following exterior half-edge ``e``.

    The mesh is assumed manifold, so boundary cycles are disjoint.
    """
    if mesh.face[e] != UNDEFINED:
        raise ValueError(f"half-edge {e} is not an exterior boundary half-edge")
    p = mesh.opposite[e]
    while mesh.face[p] != UNDEFINED:
        p = mesh.opposite[mesh.next[mesh.next[p]]]
    return p