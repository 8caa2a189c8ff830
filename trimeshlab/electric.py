"""Electric potential and field on a triangle mesh from a vertex charge density."""

from __future__ import annotations

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import lsqr

from trimeshlab.mesh import Mesh


def _as_mesh_arrays(vertices, faces) -> tuple[np.ndarray, np.ndarray]:
    V = np.asarray(vertices, dtype=float).reshape(-1, 3)
    F = np.asarray(faces, dtype=int).reshape(-1, 3)
    return V, F


def _normalize_rows(rows: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(rows, axis=1, keepdims=True)
    safe = np.where(norms > 0, norms, 1.0)
    return rows / safe


def cotmatrix(vertices, faces) -> sparse.csr_matrix:
    """Return the cotangent Laplacian: off-diagonal ``(cot a + cot b) / 2``, rows summing to zero."""
    V, F = _as_mesh_arrays(vertices, faces)
    n = len(V)
    rows, cols, data = [], [], []
    for corner in range(3):
        a = F[:, corner]
        b = F[:, (corner + 1) % 3]
        d = F[:, (corner + 2) % 3]
        u = V[b] - V[a]
        w = V[d] - V[a]
        cross_norm = np.linalg.norm(np.cross(u, w), axis=1)
        with np.errstate(divide="ignore", invalid="ignore"):
            half_cot = 0.5 * np.einsum("ij,ij->i", u, w) / cross_norm
        rows += [b, d, b, d]
        cols += [d, b, b, d]
        data += [half_cot, half_cot, -half_cot, -half_cot]
    if not rows:
        return sparse.csr_matrix((n, n))
    return sparse.coo_matrix(
        (np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
        shape=(n, n),
    ).tocsr()


def barycentric_massmatrix(vertices, faces) -> sparse.csr_matrix:
    """Return the diagonal mass matrix giving each vertex a third of its incident face areas."""
    V, F = _as_mesh_arrays(vertices, faces)
    areas = 0.5 * np.linalg.norm(np.cross(V[F[:, 1]] - V[F[:, 0]], V[F[:, 2]] - V[F[:, 0]]), axis=1)
    diagonal = np.bincount(F.ravel(), weights=np.repeat(areas / 3.0, 3), minlength=len(V))
    return sparse.diags(diagonal).tocsr()


class ElectricMesh(Mesh):
    """A mesh carrying a charge density, its potential ``u`` and the resulting field."""

    def __init__(self, vertices, faces):
        super().__init__(vertices, faces)
        self.rho: np.ndarray | None = None
        self.rho_vector: np.ndarray | None = None
        self.u: np.ndarray | None = None
        self.electric_field: np.ndarray | None = None
        self.electric_field_in_frame: np.ndarray | None = None
        self._set_frame_field()

    def _set_frame_field(self) -> None:
        V, F = self.vertices, self.faces
        v0, v1, v2 = V[F[:, 0]], V[F[:, 1]], V[F[:, 2]]
        normal = _normalize_rows(np.cross(v1 - v0, v2 - v0))
        self.basis_x = _normalize_rows(v1 - v0)
        self.basis_y = _normalize_rows(np.cross(normal, self.basis_x))
        self.bases_tangent_spaces_mat = np.stack([self.basis_x, self.basis_y], axis=1)
        self.bases_tangent_spaces = list(zip(self.basis_x, self.basis_y))

    def initialize_charge_density(self, rho) -> None:
        """Store the per-vertex charge density (a vector or an ``(n, 1)`` matrix)."""
        matrix = np.asarray(rho, dtype=float)
        if matrix.ndim == 1:
            matrix = matrix.reshape(-1, 1)
        if matrix.ndim != 2 or matrix.shape[0] != len(self.vertices):
            raise ValueError("charge density must have one row per vertex")
        self.rho = matrix
        self.rho_vector = matrix[:, 0].copy()

    def solve_for_u(self) -> None:
        """Solve the Poisson equation ``-L u = M rho`` for the potential."""
        if self.rho_vector is None:
            raise RuntimeError("charge density has not been initialized")
        L = cotmatrix(self.vertices, self.faces)
        M = barycentric_massmatrix(self.vertices, self.faces)
        b = M @ self.rho_vector
        n = len(self.vertices)
        if not np.any(b):
            self.u = np.zeros(n)
            return
        self.u = lsqr(-L, b, atol=1e-14, btol=1e-14, iter_lim=20 * n + 100)[0]

    def compute_electric_field(self) -> None:
        """Compute the per-face field from the potential and express it in each face frame."""
        if self.u is None:
            raise RuntimeError("the potential has not been solved for")
        V, F, u = self.vertices, self.faces, self.u
        v0, v1, v2 = V[F[:, 0]], V[F[:, 1]], V[F[:, 2]]
        u0, u1, u2 = u[F[:, 0]], u[F[:, 1]], u[F[:, 2]]
        e1 = v1 - v0
        e2 = v2 - v0
        area = np.linalg.norm(np.cross(e1, e2), axis=1) / 2.0
        grad = -(u1 - u0)[:, None] * e1 + (u2 - u0)[:, None] * e2
        with np.errstate(divide="ignore", invalid="ignore"):
            self.electric_field = grad / (2.0 * area)[:, None]
        self.electric_field_in_frame = np.column_stack(
            [
                np.einsum("ij,ij->i", self.electric_field, self.basis_x),
                np.einsum("ij,ij->i", self.electric_field, self.basis_y),
            ]
        )