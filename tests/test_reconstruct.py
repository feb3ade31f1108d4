"""Expansion of the reduced solution to the active DOFs and the mesh."""

import numpy as np
import pytest

from seawave.fea.analysis.local_to_global import ActiveVertexSet
from seawave.fea.analysis.periodic import PeriodicAliasTable
from seawave.fea.post.reconstruct import FieldReconstructor


@pytest.fixture
def reconstructor():
    # 8 mesh vertices, vertices 2 and 6 inactive -> 6 DOFs
    active = ActiveVertexSet([0, 1, 3, 4, 5, 7], number_of_mesh_vertices=8)
    # DOF 0 -> 3 -> 5 chains, DOF 1 -> 4
    aliases = PeriodicAliasTable.from_pairs({0: 3, 3: 5, 1: 4})
    return FieldReconstructor(active=active, aliases=aliases, retained=[2, 4, 5])


def test_expand_to_active_mirrors_aliases(reconstructor):
    u_full = reconstructor.expand_to_active([10.0, 20.0 + 1j, 30.0])
    np.testing.assert_array_equal(u_full, [30.0, 20.0 + 1j, 10.0, 30.0, 20.0 + 1j, 30.0])


def test_expand_to_mesh_zero_off_active(reconstructor):
    u_mesh = reconstructor.expand_to_mesh(np.arange(1, 7, dtype=float))
    np.testing.assert_array_equal(u_mesh, [1, 2, 0, 3, 4, 5, 0, 6])
    assert u_mesh.dtype == np.complex128


def test_reconstruct_chain(reconstructor):
    solution = reconstructor.reconstruct([1.0, 2.0, 3.0])
    np.testing.assert_array_equal(solution.u, [1.0, 2.0, 3.0])
    assert solution.u_mesh.shape == (8,)
    # source DOF 0 lives on mesh vertex 0, its final target DOF 5 on vertex 7
    assert solution.u_mesh[0] == solution.u_mesh[7] == 3.0
    np.testing.assert_array_equal(solution.magnitude, np.abs(solution.u_mesh))


def test_wrong_length_rejected(reconstructor):
    with pytest.raises(ValueError):
        reconstructor.expand_to_active([1.0, 2.0])
    with pytest.raises(ValueError):
        reconstructor.expand_to_mesh(np.zeros(5))


def test_identity_without_aliases():
    active = ActiveVertexSet([0, 2], number_of_mesh_vertices=3)
    reconstructor = FieldReconstructor(active=active, aliases=PeriodicAliasTable(), retained=[0, 1])
    solution = reconstructor.reconstruct([1j, 2.0])
    np.testing.assert_array_equal(solution.u_full, [1j, 2.0])
    np.testing.assert_array_equal(solution.u_mesh, [1j, 0.0, 2.0])
