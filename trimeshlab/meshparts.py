"""Linked mesh elements: vertices, half-edges, edges and faces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


def _require(value, what: str):
    """Return ``value``, or raise when the reference has not been set."""
    if value is None:
        raise ValueError(f"{what} is not set")
    return value


def _vectors_equal(a, b) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return bool(np.array_equal(np.asarray(a), np.asarray(b)))


def _format_vector(vector) -> str:
    return "\n".join(f"{float(x):g}" for x in np.asarray(vector).ravel())


@dataclass(eq=False)
class Vertex:
    """A mesh vertex with its position and incident elements."""

    index: int = -1
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    one_ring_faces: list = field(default_factory=list)
    incoming_half_edges: list = field(default_factory=list)
    angle_defect: float = 0.0
    gaussian_curvature: float = 0.0
    voronoi_area: float = 0.0
    normal: Optional[np.ndarray] = None

    def add_one_ring_face(self, face: "PrimalFace") -> None:
        """Record a face incident to this vertex."""
        self.one_ring_faces.append(face)

    def add_incoming_half_edge(self, hedge: "HalfEdge") -> None:
        """Record a half-edge attached to this vertex."""
        self.incoming_half_edges.append(hedge)

    def describe(self) -> str:
        """Return the index and position as text."""
        return f"position of vertex{self.index} is \n{_format_vector(self.position)}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vertex):
            return NotImplemented
        return self.index == other.index and _vectors_equal(self.position, other.position)

    def __hash__(self) -> int:
        return hash(("vertex", self.index))


@dataclass(eq=False)
class HalfEdge:
    """A directed side of a face, linked to its neighbours."""

    index: int = -1
    boundary: bool = False
    sign_edge: int = 1
    index_edge: int = -1
    start: Optional[Vertex] = None
    end: Optional[Vertex] = None
    flip: Optional["HalfEdge"] = None
    next: Optional["HalfEdge"] = None
    primal_face: Optional["PrimalFace"] = None
    edge: Optional["Edge"] = None
    use_frame: bool = False
    hinge_connection_angle: float = 0.0

    def describe(self) -> str:
        """Return the start and end vertex indices as text."""
        start = _require(self.start, "start vertex")
        end = _require(self.end, "end vertex")
        return f"start: {start.index} end: {end.index}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, HalfEdge):
            return NotImplemented
        if self is other:
            return True
        return (
            self.index == other.index
            and _require(self.start, "start vertex") is _require(other.start, "start vertex")
            and _require(self.flip, "flip half-edge").index
            == _require(other.flip, "flip half-edge").index
            and _require(self.next, "next half-edge").index
            == _require(other.next, "next half-edge").index
            and _require(self.primal_face, "primal face").index
            == _require(other.primal_face, "primal face").index
        )

    def __hash__(self) -> int:
        return hash(("halfedge", self.index))


@dataclass(eq=False)
class PrimalFace:
    """A triangle of the primal mesh with its incident elements."""

    index: int = -1
    edges_face: list = field(default_factory=list)
    vertices_face: list = field(default_factory=list)
    hedges_face: list = field(default_factory=list)
    indices_vertices: list = field(default_factory=list)
    indices_edges: list = field(default_factory=list)
    indices_hedges: list = field(default_factory=list)
    signs_edges: list = field(default_factory=list)
    barycenter: Optional[np.ndarray] = None
    circumcenter: Optional[np.ndarray] = None
    normal: Optional[np.ndarray] = None
    frame: Optional[np.ndarray] = None
    root: bool = False
    precessor: Optional["PrimalFace"] = None
    successors: list = field(default_factory=list)
    hedge_to_precessor: Optional[HalfEdge] = None

    def add_vertex(self, vertex: Vertex) -> None:
        """Attach a corner vertex."""
        self.vertices_face.append(vertex)

    def add_half_edge(self, hedge: HalfEdge) -> None:
        """Attach a half-edge bounding this face."""
        self.hedges_face.append(hedge)

    def add_edge(self, edge: "Edge") -> None:
        """Attach an edge bounding this face."""
        self.edges_face.append(edge)

    def add_successor(self, face: "PrimalFace") -> None:
        """Attach a child face in the dual spanning tree."""
        self.successors.append(face)

    def describe(self) -> str:
        """Return the face index and its vertex indices as text."""
        corners = " ".join(str(v) for v in self.indices_vertices)
        return f"vertices of face {self.index} are {corners}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PrimalFace):
            return NotImplemented
        return (
            list(self.indices_vertices) == list(other.indices_vertices)
            and self.index == other.index
            and _vectors_equal(self.normal, other.normal)
            and _vectors_equal(self.barycenter, other.barycenter)
            and list(self.indices_hedges) == list(other.indices_hedges)
        )

    def __hash__(self) -> int:
        return hash(("face", self.index))


@dataclass(eq=False)
class Edge:
    """An undirected edge between two vertices, bordered by up to two faces."""

    start: int = -1
    end: int = -1
    face_left: int = -1
    face_right: int = -1
    index: int = -1
    hedge_index: int = -1
    start_vertex: Optional[Vertex] = None
    end_vertex: Optional[Vertex] = None
    left_face: Optional[PrimalFace] = None
    right_face: Optional[PrimalFace] = None
    hedge: Optional[HalfEdge] = None
    marked: bool = False
    in_tree: bool = False
    connection_angle: float = 0.0

    def describe(self) -> str:
        """Return the edge index, endpoints and faces as text."""
        return (
            f"edge {self.index}: {self.start} -> {self.end}"
            f" (left face {self.face_left}, right face {self.face_right})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.start == other.start and self.end == other.end) or (
            self.start == other.end and self.end == other.start
        )

    def __hash__(self) -> int:
        return hash(frozenset((self.start, self.end)))


@dataclass
class VertexTree:
    """A node of a spanning tree over vertices."""

    index: int = -1
    precessor: int = -1
    successors: list = field(default_factory=list)
    in_tree: bool = False