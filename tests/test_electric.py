import numpy as np
import pytest

from trimeshlab.electric import ElectricMesh, barycentric_massmatrix, cotmatrix

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
TRI_V = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
TRI_F = np.array([[0, 1, 2]])


@pytest.fixture
def mesh():
    return ElectricMesh(OCTA_V, OCTA_F)


def test_cotmatrix_right_triangle():
    L = cotmatrix(TRI_V, TRI_F).toarray()
    assert L[0, 1] == pytest.approx(0.5)
    assert L[1, 2] == pytest.approx(0.0, abs=1e-12)
    assert L[0, 0] == pytest.approx(-1.0)


def test_cotmatrix_symmetric_with_zero_row_sums():
    L = cotmatrix(OCTA_V, OCTA_F).toarray()
    assert np.allclose(L, L.T)
    assert np.allclose(L.sum(axis=1), 0.0)


def test_massmatrix_is_diagonal_and_scales_with_area():
    M = barycentric_massmatrix(TRI_V, TRI_F).toarray()
    assert np.allclose(M, np.diag(np.diag(M)))
    assert np.allclose(np.diag(M), M[0, 0])
    M2 = barycentric_massmatrix(2 * TRI_V, TRI_F).toarray()
    assert np.allclose(M2, 4 * M)


def test_frame_field_is_orthonormal_and_tangent(mesh):
    bx, by = mesh.basis_x, mesh.basis_y
    assert np.allclose(np.linalg.norm(bx, axis=1), 1.0)
    assert np.allclose(np.linalg.norm(by, axis=1), 1.0)
    assert np.allclose(np.einsum("ij,ij->i", bx, by), 0.0)
    v0, v1, v2 = (OCTA_V[OCTA_F[:, k]] for k in range(3))
    normals = np.cross(v1 - v0, v2 - v0)
    assert np.allclose(np.einsum("ij,ij->i", by, normals), 0.0)
    assert mesh.bases_tangent_spaces_mat.shape == (len(OCTA_F), 2, 3)
    assert np.allclose(mesh.bases_tangent_spaces[3][0], bx[3])


def test_charge_density_accepts_column(mesh):
    rho = np.zeros((6, 1))
    rho[2, 0] = 1.0
    mesh.initialize_charge_density(rho)
    assert mesh.rho_vector.tolist() == [0.0, 0.0, 1.0, 0.0, 0.0, 0.0]


def test_charge_density_length_mismatch(mesh):
    with pytest.raises(ValueError):
        mesh.initialize_charge_density(np.zeros(4))


def test_solve_before_density_raises(mesh):
    with pytest.raises(RuntimeError):
        mesh.solve_for_u()


def test_field_before_potential_raises(mesh):
    with pytest.raises(RuntimeError):
        mesh.compute_electric_field()


def test_zero_density_gives_zero_field(mesh):
    mesh.initialize_charge_density(np.zeros((6, 1)))
    mesh.solve_for_u()
    mesh.compute_electric_field()
    assert np.allclose(mesh.u, 0.0)
    assert np.allclose(mesh.electric_field, 0.0)
    assert mesh.electric_field.shape == (8, 3)


def test_potential_solves_poisson(mesh):
    rho = np.zeros(6)
    rho[0], rho[5] = 1.0, -1.0
    mesh.initialize_charge_density(rho)
    mesh.solve_for_u()
    L = cotmatrix(OCTA_V, OCTA_F)
    M = barycentric_massmatrix(OCTA_V, OCTA_F)
    assert np.allclose(-(L @ mesh.u), M @ rho, atol=1e-8)
    assert mesh.u.sum() == pytest.approx(0.0, abs=1e-8)
    assert mesh.u[0] == pytest.approx(-mesh.u[5])
    assert mesh.u[0] > 0


def test_field_lies_in_face_frame(mesh):
    rho = np.zeros(6)
    rho[0], rho[5] = 1.0, -1.0
    mesh.initialize_charge_density(rho)
    mesh.solve_for_u()
    mesh.compute_electric_field()
    local = mesh.electric_field_in_frame
    rebuilt = local[:, :1] * mesh.basis_x + local[:, 1:] * mesh.basis_y
    assert np.allclose(rebuilt, mesh.electric_field)
    assert np.any(np.abs(mesh.electric_field) > 1e-6)