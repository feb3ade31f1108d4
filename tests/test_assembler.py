"""Global assembly through the wrapped maps and reduction."""

import numpy as np
import pytest

from seawave.config import SolverConfig
from seawave.fea.analysis.model import Model
from seawave.fea.pre.source import GaussianPulse
from seawave.fea.solvers.assembler import AssemblyContext, GlobalSystemBuilder


def unit_source(x, y, z):
    return 1.0


def boundary_dofs(model):
    table = np.concatenate([gl.table.ravel() for gl in model.wrapped_absorbing_maps.values()])
    return set(table[table >= 0].tolist())


class TestGlobalSystem:
    def test_dimensions_and_dtype(self, square_mesh, periodic_config):
        model = Model(square_mesh, periodic_config)
        system = GlobalSystemBuilder(model).build(unit_source)
        n = model.number_of_equations
        assert system.S.shape == (n, n)
        assert system.T.shape == (n, n)
        assert system.F.shape == (n,)
        assert system.S.dtype == np.complex128

    def test_matrix_is_symmetric(self, island_mesh):
        config = SolverConfig(wavelength=2.0, periodic=True, absorbing=True, dirichlet_tags=("Coast",))
        system = GlobalSystemBuilder(Model(island_mesh, config)).build(unit_source)
        S_eff = system.S_eff.toarray()
        np.testing.assert_allclose(S_eff, S_eff.T, atol=1e-14)

    def test_stiffness_rows_sum_to_zero_without_mass(self, square_mesh):
        config = SolverConfig(wavelength=np.inf, periodic=False, dirichlet_tags=())
        S = GlobalSystemBuilder(Model(square_mesh, config)).assemble_matrix()
        np.testing.assert_allclose(np.asarray(S.sum(axis=1)).ravel(), 0.0, atol=1e-12)

    @pytest.mark.parametrize("periodic", [False, True])
    def test_unit_load_integrates_domain_area(self, square_mesh, periodic):
        config = SolverConfig(periodic=periodic, dirichlet_tags=())
        F = GlobalSystemBuilder(Model(square_mesh, config)).assemble_vector(unit_source)
        assert F.sum() == pytest.approx(1.0)

    def test_source_rows_empty_after_wrapping(self, square_mesh, periodic_config):
        model = Model(square_mesh, periodic_config)
        system = GlobalSystemBuilder(model).build(GaussianPulse(sigma_squared=0.1, center=(0.5, 0.5, 0.0)))
        sources = model.resolution.aliases.sources
        S = system.S.toarray()
        assert np.all(S[sources] == 0)
        assert np.all(S[:, sources] == 0)
        assert np.all(system.F[sources] == 0)

    def test_context_overrides_wave_number(self, square_mesh, periodic_config):
        model = Model(square_mesh, periodic_config)
        builder = GlobalSystemBuilder(model)
        ctx = AssemblyContext.from_model(model)
        laplace = AssemblyContext(
            wave_number=0.0,
            absorption=ctx.absorption,
            number_of_dofs=ctx.number_of_dofs,
            domain_map=ctx.domain_map,
            boundary_maps=ctx.boundary_maps,
        )
        difference = (builder.assemble_matrix() - builder.assemble_matrix(laplace)).toarray()
        # the mass part has no negative entries before scaling by -k²
        assert np.all(difference.real <= 1e-14)
        assert np.any(difference.real < 0)

    def test_inactive_slots_skipped(self, island_mesh):
        config = SolverConfig(periodic=False, dirichlet_tags=("Coast",))
        model = Model(island_mesh, config)
        system = GlobalSystemBuilder(model).build(unit_source)
        assert system.S.shape == (model.number_of_equations,) * 2
        # the lumped load of triangles touching the coast loses the coast vertex share
        assert system.F.sum().real < 1.0


class TestAbsorbingTerm:
    def test_disabled_absorption_leaves_stiffness(self, square_mesh):
        config = SolverConfig(wavelength=0.5, periodic=True, absorbing=False, dirichlet_tags=())
        system = GlobalSystemBuilder(Model(square_mesh, config)).build(unit_source)
        assert np.all(system.T.toarray() == 0)
        np.testing.assert_array_equal((system.S_eff - system.T).toarray(), system.S.toarray())

    def test_enabled_absorption_touches_only_boundary(self, island_mesh):
        off = SolverConfig(wavelength=0.5, periodic=False, absorbing=False, dirichlet_tags=("Coast",))
        on = SolverConfig(wavelength=0.5, periodic=False, absorbing=True, dirichlet_tags=("Coast",))
        model_off, model_on = Model(island_mesh, off), Model(island_mesh, on)

        S_off = GlobalSystemBuilder(model_off).build(unit_source).S_eff.toarray()
        S_on = GlobalSystemBuilder(model_on).build(unit_source).S_eff.toarray()

        changed_rows, changed_cols = np.nonzero(S_on != S_off)
        assert changed_rows.size > 0
        boundary = boundary_dofs(model_on)
        assert set(changed_rows.tolist()) <= boundary
        assert set(changed_cols.tolist()) <= boundary
        np.testing.assert_array_equal((S_on - S_off).real, 0.0)

    def test_boundary_term_value(self, square_mesh):
        k = 2 * np.pi / 0.5
        config = SolverConfig(wavelength=0.5, periodic=False, absorbing=True, dirichlet_tags=())
        T = GlobalSystemBuilder(Model(square_mesh, config)).assemble_boundary().toarray()
        # corner vertex: two segments of lengths 1/4 and 1/3 meet there
        expected = 1j * k * (2 / 6) * (1 / 4 + 1 / 3)
        assert T[0, 0] == pytest.approx(expected)
        # total ∫ φᵢ φⱼ over the perimeter equals its length
        assert T.sum() == pytest.approx(1j * k * 4.0)


class TestReduction:
    def test_reduced_dimension(self, square_mesh, periodic_config):
        model = Model(square_mesh, periodic_config)
        builder = GlobalSystemBuilder(model)
        reduced = builder.reduce(builder.build(unit_source))
        assert reduced.dimension == model.number_of_retained_dofs
        assert reduced.matrix.shape == (reduced.dimension, reduced.dimension)
        assert reduced.vector.shape == (reduced.dimension,)

    def test_reduction_is_a_slice(self, square_mesh, periodic_config):
        model = Model(square_mesh, periodic_config)
        system = GlobalSystemBuilder(model).build(unit_source)
        retained = model.retained_dofs
        reduced = system.reduce(retained)
        np.testing.assert_array_equal(reduced.matrix.toarray(), system.S_eff.toarray()[np.ix_(retained, retained)])
        np.testing.assert_array_equal(reduced.vector, system.F[retained])

    def test_no_reduction_without_periodicity(self, square_mesh):
        model = Model(square_mesh, SolverConfig(periodic=False, dirichlet_tags=()))
        builder = GlobalSystemBuilder(model)
        assert builder.reduce(builder.build(unit_source)).dimension == model.number_of_equations
