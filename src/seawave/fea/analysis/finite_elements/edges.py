from __future__ import annotations

from abc import ABC, abstractmethod

from typing import TYPE_CHECKING

import numpy as np

from seawave.exceptions import DegenerateElementError
import seawave.fea.analysis.gauss as gauss

if TYPE_CHECKING:
    import numpy.typing as npt
    from seawave.fea.analysis.node import Node


class LineElement(ABC):
    """Abstract base class for boundary segment elements."""

    def __init__(
        self,
        index: int,
        tag: str,
        nodes: list[Node],
        number_of_integration_points: int,
    ) -> None:
        """
        Initialize the line element with an index, tag, and nodes.

        Args:
            index: Element index inside its physical group.
            tag: Physical group name of the element.
            nodes: List of nodes that form the element.
            number_of_integration_points: Number of integration points for numerical integration.
        """
        self.id = index
        self.tag = tag
        self.nodes = nodes
        self.number_of_integration_points = number_of_integration_points
        self.vertex_ids: npt.NDArray[np.int64] = np.array([node.uid for node in nodes], dtype=np.int64)

    def __repr__(self) -> str:
        """String representation of the line element."""
        return f"{self.__class__.__name__}(id={self.id}, tag='{self.tag}', vertices={self.vertex_ids.tolist()})"

    @property
    def number_of_nodes(self) -> int:
        """Return the number of nodes in the edge element."""
        return len(self.nodes)

    @property
    def coords(self) -> npt.NDArray[np.float64]:
        """Return the (n, 3) coordinates of the nodes in the edge element."""
        return np.array([node.coords for node in self.nodes], dtype=np.float64)

    @property
    def jacobian_determinant(self) -> float:
        """
        Calculate the Jacobian determinant of the edge element.

        Returns:
            The Jacobian determinant value.
        """
        return float(np.sqrt(np.sum(self.jacobian_matrix ** 2)))

    @abstractmethod
    def shape_functions(self, iso_coord: float) -> npt.NDArray[np.float64]:
        """
        Calculate the shape functions for the line element at a given local coordinate.

        Args:
            iso_coord: Local coordinate in the range [-1, 1].

        Returns:
            Shape function values at the local coordinate.
        """
        pass

    @property
    @abstractmethod
    def jacobian_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate the Jacobian of the line element.

        Returns:
            The Jacobian vector dx/dξ.
        """
        pass

    def get_integration_scheme(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Get the integration scheme for the line element.

        Returns:
            A tuple containing the integration points and weights.
        """
        return gauss.gauss_points_weights_edge(n_points=self.number_of_integration_points)

    def get_mass_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate the boundary mass matrix ∫ φᵢ φⱼ ds.

        Returns:
            (n, n) boundary mass matrix.

        Raises:
            DegenerateElementError: If the segment has zero length.
        """
        det_j = self.jacobian_determinant
        if det_j == 0.0:
            raise DegenerateElementError(self.id, self.__class__.__name__, det_j)

        m_e = np.zeros((self.number_of_nodes, self.number_of_nodes), dtype=np.float64)

        gauss_points, weights = self.get_integration_scheme()
        for gp_i, w_i in zip(gauss_points, weights):
            n_ei = self.shape_functions(iso_coord=gp_i)
            m_e += np.outer(n_ei, n_ei) * w_i * det_j

        return m_e

    def get_absorbing_matrix(self, wave_number: float, absorption: float) -> npt.NDArray[np.complex128]:
        """
        Calculate the first-order absorbing boundary matrix.

        [T] = absorption * i * k * ∫ φᵢ φⱼ ds

        Args:
            wave_number: Wave number k.
            absorption: Absorption toggle, 0 (disabled) or 1 (enabled).

        Returns:
            Complex boundary matrix of the element.
        """
        return absorption * 1j * wave_number * self.get_mass_matrix().astype(np.complex128)


class Line2(LineElement):
    """Linear line element with two nodes."""

    def __init__(self, index: int, tag: str, nodes: list[Node]) -> None:
        """
        Initialize the linear line element.

        Args:
            index: Element index.
            tag: Element tag.
            nodes: List of nodes that form the element.
        """
        if len(nodes) != 2:
            raise ValueError(f"Line2 element {index} needs 2 nodes, got {len(nodes)}.")
        super().__init__(index=index, tag=tag, nodes=nodes, number_of_integration_points=2)

    def shape_functions(self, iso_coord: float) -> npt.NDArray[np.float64]:
        """Shape functions for a linear line element."""
        return np.array([(1 - iso_coord) / 2, (1 + iso_coord) / 2], dtype=np.float64)

    @property
    def length(self) -> float:
        """Euclidean distance between the end points."""
        return float(np.linalg.norm(self.nodes[0].coords - self.nodes[1].coords))

    @property
    def jacobian_matrix(self) -> npt.NDArray[np.float64]:
        """Jacobian for a linear line element."""
        b = np.array([-1/2, 1/2], dtype=np.float64)  # Derivative of shape functions w.r.t. local coordinate
        return b @ self.coords
