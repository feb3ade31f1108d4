from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

from seawave.exceptions import DegenerateElementError
from seawave.fea.analysis.finite_elements.finite_element import FiniteElement

if TYPE_CHECKING:
    import numpy.typing as npt
    from seawave.fea.analysis.node import Node


@nb.jit(cache=True)
def _cross(
    a0: float, a1: float, a2: float,
    b0: float, b1: float, b2: float
) -> tuple[float, float, float]:
    """Cross product a × b of two 3D vectors given by components."""
    return a1 * b2 - a2 * b1, a2 * b0 - a0 * b2, a0 * b1 - a1 * b0


@nb.jit(cache=True)
def _tri3_area_and_gradients(
    coords: npt.NDArray[np.float64]
) -> tuple[float, npt.NDArray[np.float64]]:
    """
    Area and gradients of the linear basis functions of a triangle in 3D space.

    The gradient of the basis function of vertex i is (n̂ × tᵢ) / (2·area),
    where tᵢ is the edge opposite to vertex i, oriented cyclically.

    Args:
        coords: (3, 3) array of vertex coordinates, one vertex per row.

    Returns:
        area: Non-negative area of the triangle.
        grads: (3, 3) array, row i is the gradient of basis function i.
            Zero when the triangle is degenerate.
    """
    v1 = coords[0]
    v2 = coords[1]
    v3 = coords[2]

    # normal = (v1 - v3) × (v2 - v3)
    nx, ny, nz = _cross(
        v1[0] - v3[0], v1[1] - v3[1], v1[2] - v3[2],
        v2[0] - v3[0], v2[1] - v3[1], v2[2] - v3[2],
    )
    norm = np.sqrt(nx * nx + ny * ny + nz * nz)
    area = 0.5 * norm

    grads = np.zeros((3, 3), dtype=np.float64)
    if norm == 0.0:
        return area, grads

    nx /= norm
    ny /= norm
    nz /= norm

    for i in range(3):
        # tangent opposite to vertex i: t1 = v3 - v2, t2 = v1 - v3, t3 = v2 - v1
        head = coords[(i + 2) % 3]
        tail = coords[(i + 1) % 3]
        gx, gy, gz = _cross(
            nx, ny, nz,
            head[0] - tail[0], head[1] - tail[1], head[2] - tail[2],
        )
        grads[i, 0] = gx / (2.0 * area)
        grads[i, 1] = gy / (2.0 * area)
        grads[i, 2] = gz / (2.0 * area)

    return area, grads


class Tri3(FiniteElement):
    """
    Represents a three-node linear triangular finite element (Tri3).
    """
    def __init__(
        self,
        index: int,
        tag: str,
        nodes: list[Node],
    ) -> None:
        """
        Initialize the Tri3 element.

        Args:
            index: Element index.
            tag: Element tag.
            nodes: List of nodes that form the element.

        Raises:
            ValueError: If the element does not have three nodes.
        """
        if len(nodes) != 3:
            raise ValueError(f"Tri3 element {index} needs 3 nodes, got {len(nodes)}.")

        super().__init__(
            index=index,
            tag=tag,
            nodes=nodes,
            n_integration_points=3
        )

        self._area, self._grads = _tri3_area_and_gradients(self.coords)

    @staticmethod
    def shape_functions(iso_coords: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Calculate the shape functions for the Tri3 element.

        Args:
            iso_coords: Barycentric coordinates [λ1, λ2, λ3].

        Returns:
            Shape function values at the given coordinates ``[[N1, N2, N3]]``.
        """
        # For Tri3, the shape functions are the barycentric coordinates
        return np.array([iso_coords], dtype=np.float64)

    @property
    def area(self) -> float:
        """
        Area of the Tri3 element, half the magnitude of the cross product of two edges.

        Returns:
            Non-negative area, independent of the vertex winding.
        """
        return self._area

    @property
    def gradients(self) -> npt.NDArray[np.float64]:
        """
        Gradients of the three linear basis functions.

        Returns:
            (3, 3) array, row i is ∇φᵢ.

        Raises:
            DegenerateElementError: If the triangle has zero area.
        """
        if self._area == 0.0:
            raise DegenerateElementError(self.id, "Tri3", self._area)
        return self._grads

    def get_stiffness_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate element stiffness matrix [K] = area * (∇φᵢ · ∇φⱼ).

        Returns:
            (3, 3) symmetric stiffness matrix for Tri3.
        """
        grads = self.gradients
        return self._area * (grads @ grads.T)
