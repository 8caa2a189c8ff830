"""Triangle mesh with linked vertices, faces and half-edges."""

from __future__ import annotations

import logging
import math
import time
from collections import Counter
from dataclasses import dataclass

import numpy as np

from trimeshlab.meshparts import HalfEdge, PrimalFace, Vertex

logger = logging.getLogger(__name__)


def _normalized(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else vector


def _face_normal(v0, v1, v2) -> np.ndarray:
    return _normalized(np.cross(v1 - v0, v2 - v0))


@dataclass(frozen=True)
class DegreeStatistics:
    """Vertex degree distribution and any disagreement with the half-edges.

    ``inconsistencies`` holds ``(vertex, face_degree, halfedge_degree)`` triples.
    """

    distribution: dict
    inconsistencies: tuple = ()

    @property
    def consistent(self) -> bool:
        return not self.inconsistencies


class Mesh:
    """A triangle mesh whose elements are linked objects."""

    def __init__(self, vertices, faces):
        V = np.asarray(vertices, dtype=float)
        F = np.asarray(faces, dtype=int)
        if V.ndim != 2 or V.shape[1] != 3:
            raise ValueError("vertices must be an (n, 3) array")
        if F.size == 0:
            F = F.reshape(0, 3)
        if F.ndim != 2 or F.shape[1] != 3:
            raise ValueError("only triangle faces are supported")
        if F.size and (F.min() < 0 or F.max() >= len(V)):
            raise ValueError("face refers to a vertex that does not exist")
        self.vertices = V
        self.faces = F
        self.boundaries = -1

        self.primal_vertices = [
            Vertex(index=i, position=V[i].copy()) for i in range(len(V))
        ]
        self.primal_faces = [
            PrimalFace(index=j, indices_vertices=[int(x) for x in F[j]])
            for j in range(len(F))
        ]
        self.hedges: list[HalfEdge] = []

        logger.info("Calling constructor of the mesh")
        start = time.perf_counter()
        self._initialize_complex()
        stop0 = time.perf_counter()
        logger.info("Elapsed time for complex initialization: %f seconds", stop0 - start)
        self._compute_half_edges()
        logger.info(
            "Elapsed time for hedge initialization: %f seconds",
            time.perf_counter() - stop0,
        )

    def _initialize_complex(self) -> None:
        for face in self.primal_faces:
            barycenter = np.zeros(3)
            for vi in face.indices_vertices:
                vertex = self.primal_vertices[vi]
                face.add_vertex(vertex)
                barycenter += vertex.position
                vertex.add_one_ring_face(face)
            face.barycenter = barycenter / len(face.indices_vertices)
            v0, v1, v2 = (self.primal_vertices[i].position for i in face.indices_vertices[:3])
            face.normal = _face_normal(v0, v1, v2)

    def _compute_half_edges(self) -> None:
        n_hedges = len(self.faces) * 3
        self.hedges = [HalfEdge(index=i) for i in range(n_hedges)]

        for f, face in enumerate(self.primal_faces):
            for j in range(3):
                hedge = self.hedges[f * 3 + j]
                v0 = self.primal_vertices[int(self.faces[f, j])]
                v1 = self.primal_vertices[int(self.faces[f, (j + 1) % 3])]
                hedge.start = v0
                hedge.end = v1
                v0.add_incoming_half_edge(hedge)
                hedge.primal_face = face
                face.add_half_edge(hedge)
                face.indices_hedges.append(hedge.index)
                hedge.next = self.hedges[f * 3 + (j + 1) % 3]

        by_endpoints: dict[tuple[int, int], HalfEdge] = {}
        for hedge in self.hedges:
            by_endpoints.setdefault((hedge.start.index, hedge.end.index), hedge)

        for hedge in self.hedges:
            if hedge.flip is not None:
                continue
            candidate = by_endpoints.get((hedge.end.index, hedge.start.index))
            if candidate is None:
                hedge.boundary = True
            else:
                hedge.flip = candidate
                candidate.flip = hedge

    def vertex_degree_statistics(self) -> DegreeStatistics:
        """Count vertex degrees and check them against the half-edges."""
        start = time.perf_counter()
        degrees = [0] * len(self.primal_vertices)
        for face in self.primal_faces:
            for vi in face.indices_vertices:
                degrees[vi] += 1
        distribution = dict(Counter(degrees))
        for degree, count in distribution.items():
            logger.info("Degree: %d, Count: %d", degree, count)
        logger.info(
            "Elapsed time for vertex degree statistics: %f seconds",
            time.perf_counter() - start,
        )

        inconsistencies = tuple(
            (i, degrees[i], len(v.incoming_half_edges))
            for i, v in enumerate(self.primal_vertices)
            if degrees[i] != len(v.incoming_half_edges)
        )
        for vertex, face_degree, hedge_degree in inconsistencies:
            logger.error(
                "Inconsistency found at vertex %d: Face-vertex degree = %d, "
                "HalfEdge degree = %d",
                vertex, face_degree, hedge_degree,
            )
        return DegreeStatistics(distribution, inconsistencies)

    @staticmethod
    def _hedge_corners(face: PrimalFace):
        hedge = face.hedges_face[0]
        return (
            hedge.start.position,
            hedge.next.start.position,
            hedge.next.next.start.position,
        )

    def gaussian_curvature(self) -> np.ndarray:
        """Return the per-vertex angle defect divided by a third of the ring area."""
        curvature = np.zeros(len(self.primal_vertices))
        for vertex in self.primal_vertices:
            angle_sum = 0.0
            area_sum = 0.0
            for face in vertex.one_ring_faces:
                v0, v1, v2 = self._hedge_corners(face)
                e1 = _normalized(v1 - v0)
                e2 = _normalized(v2 - v0)
                angle_sum += math.acos(float(np.clip(np.dot(e1, e2), -1.0, 1.0)))
                area_sum += np.linalg.norm(np.cross(v1 - v0, v2 - v0)) / 2.0 / 3.0
            with np.errstate(divide="ignore", invalid="ignore"):
                curvature[vertex.index] = np.float64(2.0 * math.pi - angle_sum) / np.float64(
                    area_sum
                )
        return curvature

    def count_boundaries(self) -> int:
        """Count the cycles reached by following ``next`` from boundary half-edges."""
        visited: set[int] = set()
        count = 0
        for hedge in self.hedges:
            if hedge.boundary and hedge.index not in visited:
                count += 1
                current = hedge
                while True:
                    visited.add(current.index)
                    current = current.next
                    if current is hedge:
                        break
        logger.info("boundary_count  %d", count)
        self.boundaries = count
        return count

    def face_normals(self) -> np.ndarray:
        """Return unit face normals computed from the face corners."""
        normals = np.zeros((len(self.primal_faces), 3))
        for i, face in enumerate(self.primal_faces):
            v0, v1, v2 = (v.position for v in face.vertices_face[:3])
            normals[i] = _face_normal(v0, v1, v2)
        return normals

    def face_normals_hed(self) -> np.ndarray:
        """Return unit face normals computed by walking the half-edges."""
        normals = np.zeros((len(self.primal_faces), 3))
        for i, face in enumerate(self.primal_faces):
            normals[i] = _face_normal(*self._hedge_corners(face))
        return normals

    def vertex_normals(self) -> np.ndarray:
        """Return unit vertex normals as sums of incident face normals."""
        normals = np.zeros((len(self.primal_vertices), 3))
        face_normals = self.face_normals()
        for i, face in enumerate(self.primal_faces):
            for vertex in face.vertices_face:
                normals[vertex.index] += face_normals[i]
        return np.array([_normalized(row) for row in normals]).reshape(-1, 3)

    def vertex_normals_hed(self) -> np.ndarray:
        """Return vertex normals from the one-ring, pointing the opposite way."""
        normals = np.zeros((len(self.primal_vertices), 3))
        for i, vertex in enumerate(self.primal_vertices):
            total = np.zeros(3)
            for face in vertex.one_ring_faces:
                total += _face_normal(*self._hedge_corners(face))
            normals[i] = -_normalized(total)
        return normals