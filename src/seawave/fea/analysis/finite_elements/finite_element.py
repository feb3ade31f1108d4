from __future__ import annotations

from abc import ABC, abstractmethod

from typing import TYPE_CHECKING, Callable

import numpy as np

import seawave.fea.analysis.gauss as gauss

if TYPE_CHECKING:
    import numpy.typing as npt
    from seawave.fea.analysis.node import Node


class FiniteElement(ABC):
    """
    Abstract base class for surface finite elements of the Helmholtz problem.
    """

    def __init__(
        self,
        index: int,
        tag: str,
        nodes: list[Node],
        n_integration_points: int
    ) -> None:
        """
        Initialize the finite element with an index and a tag.

        Args:
            index: Element index inside its physical group.
            tag: Physical group name of the element.
            nodes: List of nodes.
            n_integration_points: Number of integration points for numerical integration.
        """
        self.id = index
        self.tag = tag
        self.nodes = nodes
        self.n_integration_points = n_integration_points
        self.vertex_ids: npt.NDArray[np.int64] = np.array([node.uid for node in nodes], dtype=np.int64)

        self.coords = np.array([node.coords for node in nodes], dtype=np.float64)

    def __repr__(self) -> str:
        """String representation of the finite element."""
        return f"{self.__class__.__name__}(id={self.id}, tag='{self.tag}', vertices={self.vertex_ids.tolist()})"

    @property
    def number_of_nodes(self) -> int:
        """Number of nodes in the finite element."""
        return len(self.nodes)

    @staticmethod
    @abstractmethod
    def shape_functions(iso_coords: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate the shape function at given local coordinates."""
        pass

    @property
    @abstractmethod
    def area(self) -> float:
        """Calculate the area of the finite element."""
        pass

    @abstractmethod
    def get_stiffness_matrix(self) -> npt.NDArray[np.float64]:
        """Calculate the element matrix of ∫ ∇φᵢ·∇φⱼ."""
        pass

    def get_integration_scheme(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Get the integration scheme for the finite element.

        Returns:
            Tuple of Gauss points and weights for numerical integration.
        """
        return gauss.gauss_points_weights_triangle(self.n_integration_points)

    def get_mass_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate the mass matrix [M] = ∑ (Nᵀ N * area * w).

        Returns:
            Mass matrix of the element.
        """
        m_e = np.zeros((self.number_of_nodes, self.number_of_nodes), dtype=np.float64)

        gauss_points, weights = self.get_integration_scheme()
        area = self.area

        for gp_i, w_i in zip(gauss_points, weights):
            n_ei = self.shape_functions(iso_coords=gp_i)
            m_e += n_ei.T @ n_ei * area * w_i

        return m_e

    def get_helmholtz_matrix(self, wave_number: float) -> npt.NDArray[np.float64]:
        """
        Calculate the local matrix of the weak form of ∇²u + k²u.

        [S] = [K] - k² [M]

        Args:
            wave_number: Wave number k.

        Returns:
            Local Helmholtz matrix of the element.
        """
        return self.get_stiffness_matrix() - wave_number ** 2 * self.get_mass_matrix()

    def get_load_vector(self, source: Callable[[float, float, float], complex]) -> npt.NDArray[np.complex128]:
        """
        Calculate the load vector with one-point-per-vertex lumped quadrature.

        f_i = area * f(v_i) / 3

        Args:
            source: Scalar source function f(x, y, z).

        Returns:
            Load vector of the element.
        """
        values = np.array([source(*node.coords) for node in self.nodes], dtype=np.complex128)
        return self.area * values / self.number_of_nodes
