from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def gauss_points_weights_edge(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Gauss-Legendre points and weights on the interval [-1, +1].

    An n-point rule integrates polynomials up to degree 2n - 1 exactly, so two
    points suffice for the mass matrix of a linear segment.

    Raises:
        ValueError: If `n_points` is smaller than 1.
    """
    if n_points < 1:
        raise ValueError(f"Unsupported number of Gauss points: {n_points}. 'n_points' must be at least 1.")
    points, weights = np.polynomial.legendre.leggauss(n_points)
    return points, weights


def gauss_points_weights_triangle(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate Gauss points and weights for a triangular Gaussian integration.

    Points are given in barycentric coordinates. The weights sum to one, so a
    rule applied to a physical triangle is multiplied by its area.

    Args:
        n_points: Number of integration points.

    Raises:
        ValueError: If `n_points` is not 1 or 3.

    Returns:
        A tuple containing the Gauss points and weights.
    """
    if n_points == 1:
        return np.array([[1.0/3.0, 1.0/3.0, 1.0/3.0]]), np.array([1.0])
    elif n_points == 3:
        return np.array([
            [2.0/3.0, 1.0/6.0, 1.0/6.0],
            [1.0/6.0, 2.0/3.0, 1.0/6.0],
            [1.0/6.0, 1.0/6.0, 2.0/3.0]]
        ), np.array([1.0/3.0, 1.0/3.0, 1.0/3.0])
    else:
        raise ValueError(f"Unsupported number of Gauss points: {n_points}. "
                         f"'n_points' must be 1 or 3.")
