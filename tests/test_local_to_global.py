"""Active vertex filtering and local-to-global maps."""

import numpy as np
import pytest

from conftest import grid_index
from seawave.fea.analysis.local_to_global import (
    INACTIVE,
    INACTIVE_INDEX,
    Active,
    ActiveVertexSet,
    LocalToGlobalMap,
)


class TestActiveVertexSet:
    def test_all_domain_vertices_without_dirichlet(self, square_mesh):
        active = ActiveVertexSet.from_mesh(square_mesh, "Sea")
        assert len(active) == 20
        np.testing.assert_array_equal(active.vertices, np.arange(20))

    def test_dirichlet_vertices_removed(self, island_mesh):
        active = ActiveVertexSet.from_mesh(island_mesh, "Sea", dirichlet=("Coast",))
        coast = island_mesh.vertices_of("Coast")
        assert len(active) == island_mesh.number_of_vertices - coast.size
        assert all(v not in active for v in coast.tolist())
        assert np.all(np.diff(active.vertices) > 0)

    def test_position_two_variants(self, island_mesh):
        active = ActiveVertexSet.from_mesh(island_mesh, "Sea", dirichlet=("Coast",))
        coast_vertex = grid_index(2, 2, 6)
        assert active.position(coast_vertex) is INACTIVE
        assert active.position(0) == Active(0)
        assert active.position(coast_vertex - 1) == Active(coast_vertex - 1)
        # two coast vertices precede it on its grid row
        assert active.position(grid_index(4, 2, 6)) == Active(grid_index(4, 2, 6) - 2)

    def test_unsorted_vertices_rejected(self):
        with pytest.raises(ValueError):
            ActiveVertexSet([0, 2, 1], number_of_mesh_vertices=3)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            ActiveVertexSet([0, 5], number_of_mesh_vertices=3)


class TestLocalToGlobalMap:
    def test_lookup_matches_active_vertices(self, island_mesh):
        active = ActiveVertexSet.from_mesh(island_mesh, "Sea", dirichlet=("Coast",))
        connectivity = island_mesh.connectivity("Sea")
        gl = LocalToGlobalMap.build(active, connectivity)

        assert gl.number_of_elements == connectivity.shape[0]
        assert gl.nodes_per_element == 3
        for k in range(gl.number_of_elements):
            for p in range(3):
                result = gl(k, p)
                vertex = connectivity[k, p]
                if isinstance(result, Active):
                    assert active.vertices[result.index] == vertex
                else:
                    assert result is INACTIVE
                    assert vertex not in active

    def test_injective_over_active_slots(self, island_mesh):
        active = ActiveVertexSet.from_mesh(island_mesh, "Sea", dirichlet=("Coast",))
        gl = LocalToGlobalMap.build(active, island_mesh.connectivity("Sea"))
        for k in range(gl.number_of_elements):
            dofs = gl.dofs(k)
            dofs = dofs[dofs != INACTIVE_INDEX]
            assert len(set(dofs.tolist())) == dofs.size

    def test_some_slots_inactive_near_coast(self, island_mesh):
        active = ActiveVertexSet.from_mesh(island_mesh, "Sea", dirichlet=("Coast",))
        gl = LocalToGlobalMap.build(active, island_mesh.connectivity("Sea"))
        assert np.any(gl.table == INACTIVE_INDEX)

    def test_table_is_read_only(self, square_mesh):
        active = ActiveVertexSet.from_mesh(square_mesh, "Sea")
        gl = LocalToGlobalMap.build(active, square_mesh.connectivity("Sea"))
        with pytest.raises(ValueError):
            gl.table[0, 0] = 3

    def test_redirected_keeps_inactive_slots(self):
        gl = LocalToGlobalMap(np.array([[0, 1, INACTIVE_INDEX], [2, 1, 0]]), number_of_dofs=3)
        wrapped = gl.redirected(np.array([0, 1, 0]))
        np.testing.assert_array_equal(wrapped.table, [[0, 1, INACTIVE_INDEX], [0, 1, 0]])
        assert wrapped.number_of_dofs == 3

    def test_redirect_shape_checked(self):
        gl = LocalToGlobalMap(np.array([[0, 1, 2]]), number_of_dofs=3)
        with pytest.raises(ValueError):
            gl.redirected(np.arange(2))
