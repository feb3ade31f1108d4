"""Element kernels: Tri3 stiffness, mass and load, Line2 absorbing term."""

import numpy as np
import pytest

from seawave.exceptions import DegenerateElementError
from seawave.fea.analysis.finite_elements.edges import Line2
from seawave.fea.analysis.finite_elements.tri3 import Tri3
from seawave.fea.analysis.gauss import gauss_points_weights_edge, gauss_points_weights_triangle
from seawave.fea.analysis.node import Node

STANDARD_MASS = np.array([[2.0, 1.0, 1.0], [1.0, 2.0, 1.0], [1.0, 1.0, 2.0]]) / 12.0


def make_tri3(*points):
    return Tri3(index=0, tag="Sea", nodes=[Node(i, p) for i, p in enumerate(points)])


@pytest.fixture
def reference_triangle():
    return make_tri3((0, 0, 0), (1, 0, 0), (0, 1, 0))


@pytest.fixture
def skew_triangle():
    return make_tri3((0.3, -1.2, 0.0), (2.5, 0.4, 0.0), (-0.7, 1.9, 0.0))


# ---------------------------------------------------------------------------
# Quadrature
# ---------------------------------------------------------------------------
class TestGauss:
    @pytest.mark.parametrize("n", [1, 3])
    def test_triangle_weights_sum_to_one(self, n):
        points, weights = gauss_points_weights_triangle(n)
        assert weights.sum() == pytest.approx(1.0)
        np.testing.assert_allclose(points.sum(axis=1), 1.0)

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_edge_weights_sum_to_interval_length(self, n):
        _, weights = gauss_points_weights_edge(n)
        assert weights.sum() == pytest.approx(2.0)

    def test_two_point_edge_rule(self):
        points, weights = gauss_points_weights_edge(2)
        np.testing.assert_allclose(points, [-1 / np.sqrt(3), 1 / np.sqrt(3)])
        np.testing.assert_allclose(weights, [1.0, 1.0])

    def test_unsupported_rule(self):
        with pytest.raises(ValueError):
            gauss_points_weights_triangle(2)
        with pytest.raises(ValueError):
            gauss_points_weights_edge(0)


# ---------------------------------------------------------------------------
# Tri3
# ---------------------------------------------------------------------------
class TestTri3:
    def test_reference_triangle_area_and_gradients(self, reference_triangle):
        assert reference_triangle.area == pytest.approx(0.5)
        np.testing.assert_allclose(reference_triangle.gradients.sum(axis=0), 0.0, atol=1e-14)
        np.testing.assert_allclose(
            reference_triangle.gradients,
            [[-1.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
            atol=1e-14,
        )

    def test_area_positive_for_both_windings(self):
        ccw = make_tri3((0, 0, 0), (2, 0, 0), (0, 3, 0))
        cw = make_tri3((0, 0, 0), (0, 3, 0), (2, 0, 0))
        assert ccw.area == pytest.approx(3.0)
        assert cw.area == pytest.approx(3.0)

    def test_gradients_sum_to_zero(self, skew_triangle):
        np.testing.assert_allclose(skew_triangle.gradients.sum(axis=0), 0.0, atol=1e-12)

    def test_gradients_reproduce_linear_field(self, skew_triangle):
        # u = 2x - 3y + 1 is interpolated exactly, so Σ u_i ∇φ_i = (2, -3, 0)
        u = 2 * skew_triangle.coords[:, 0] - 3 * skew_triangle.coords[:, 1] + 1
        np.testing.assert_allclose(u @ skew_triangle.gradients, [2.0, -3.0, 0.0], atol=1e-12)

    def test_tilted_triangle_in_3d(self):
        element = make_tri3((0, 0, 0), (1, 0, 1), (0, 1, 0))
        assert element.area == pytest.approx(np.sqrt(2) / 2)
        np.testing.assert_allclose(element.gradients.sum(axis=0), 0.0, atol=1e-12)

    def test_stiffness_symmetric_with_zero_row_sums(self, skew_triangle):
        k_e = skew_triangle.get_stiffness_matrix()
        np.testing.assert_allclose(k_e, k_e.T)
        np.testing.assert_allclose(k_e.sum(axis=1), 0.0, atol=1e-12)

    def test_stiffness_follows_vertex_permutation(self):
        points = [(0.3, -1.2, 0.0), (2.5, 0.4, 0.0), (-0.7, 1.9, 0.0)]
        original = make_tri3(*points).get_stiffness_matrix()
        order = [2, 1, 0]
        permuted = make_tri3(*[points[i] for i in order]).get_stiffness_matrix()
        np.testing.assert_allclose(permuted, original[np.ix_(order, order)], atol=1e-12)

    def test_mass_matrix_is_standard_linear_triangle_mass(self, skew_triangle):
        np.testing.assert_allclose(
            skew_triangle.get_mass_matrix(), skew_triangle.area * STANDARD_MASS, rtol=1e-12
        )

    def test_helmholtz_matrix_coefficients(self, skew_triangle):
        k = 0.7
        area = skew_triangle.area
        grads = skew_triangle.gradients
        mass = np.full((3, 3), -k ** 2 / 12) + np.eye(3) * (-k ** 2 / 12)
        expected = area * (grads @ grads.T + mass)
        s_e = skew_triangle.get_helmholtz_matrix(wave_number=k)
        np.testing.assert_allclose(s_e, expected, rtol=1e-12, atol=1e-14)
        np.testing.assert_allclose(np.diag(s_e - skew_triangle.get_stiffness_matrix()), -k ** 2 * area / 6)

    def test_load_vector_lumped(self, reference_triangle):
        f_e = reference_triangle.get_load_vector(lambda x, y, z: x + 2 * y + 1j)
        expected = 0.5 * np.array([1j, 1 + 1j, 2 + 1j]) / 3
        np.testing.assert_allclose(f_e, expected)
        assert f_e.dtype == np.complex128

    def test_degenerate_triangle(self):
        element = make_tri3((0, 0, 0), (1, 1, 0), (2, 2, 0))
        assert element.area == 0.0
        with pytest.raises(DegenerateElementError):
            element.get_stiffness_matrix()

    def test_needs_three_nodes(self):
        with pytest.raises(ValueError):
            Tri3(index=0, tag="Sea", nodes=[Node(0, (0, 0)), Node(1, (1, 0))])


# ---------------------------------------------------------------------------
# Line2
# ---------------------------------------------------------------------------
class TestLine2:
    def make_line(self, a, b):
        return Line2(index=0, tag="Border", nodes=[Node(0, a), Node(1, b)])

    def test_length(self):
        assert self.make_line((0, 0, 0), (3, 4, 0)).length == pytest.approx(5.0)

    def test_absorbing_matrix(self):
        line = self.make_line((1, 1, 0), (1, 3.5, 0))
        k = 2 * np.pi / 50
        expected = 1j * k * 2.5 / 6 * np.array([[2, 1], [1, 2]])
        np.testing.assert_allclose(line.get_absorbing_matrix(k, 1.0), expected, rtol=1e-12)

    def test_absorbing_switched_off(self):
        line = self.make_line((0, 0, 0), (1, 0, 0))
        np.testing.assert_array_equal(line.get_absorbing_matrix(1.0, 0.0), np.zeros((2, 2)))

    def test_zero_length_segment(self):
        line = self.make_line((1, 1, 0), (1, 1, 0))
        with pytest.raises(DegenerateElementError):
            line.get_absorbing_matrix(1.0, 1.0)


class TestNode:
    def test_two_dimensional_input_padded(self):
        node = Node(3, (1.5, -2.0))
        assert (node.x, node.y, node.z) == (1.5, -2.0, 0.0)

    def test_wrong_dimension(self):
        with pytest.raises(ValueError):
            Node(0, (1.0,))
