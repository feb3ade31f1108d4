"""
Local-to-Global Maps
====================
Translation between the local vertex slots of an element and the indices of
the active degrees of freedom.

A lookup answers with an explicit two-variant result: ``Active(index)`` when
the vertex carries a DOF and ``INACTIVE`` when it was eliminated by the
homogeneous Dirichlet condition.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Sequence, Union

import numpy as np

from seawave.exceptions import MeshLoadError

if TYPE_CHECKING:
    import numpy.typing as npt
    from seawave.fea.pre.mesh import Mesh

logger = logging.getLogger(__name__)

INACTIVE_INDEX = -1


@dataclass(frozen=True)
class Active:
    """The local slot carries the DOF ``index``."""
    index: int


class Inactive:
    """The local slot carries no DOF."""
    _instance: Inactive | None = None

    def __new__(cls) -> Inactive:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INACTIVE"


INACTIVE = Inactive()

DofLookup = Union[Active, Inactive]


class ActiveVertexSet:
    """
    Ordered, duplicate-free set of mesh vertices that carry a DOF.

    The i-th active vertex carries DOF i.
    """
    def __init__(self, vertices: npt.ArrayLike, number_of_mesh_vertices: int) -> None:
        """
        Args:
            vertices: Mesh vertex indices, strictly ascending.
            number_of_mesh_vertices: Size of the full vertex list.

        Raises:
            ValueError: If the indices are unsorted, repeated or out of range.
        """
        vertices = np.asarray(vertices, dtype=np.int64).ravel()
        if vertices.size and (np.any(np.diff(vertices) <= 0)
                              or vertices[0] < 0 or vertices[-1] >= number_of_mesh_vertices):
            raise ValueError("Active vertices must be strictly ascending mesh vertex indices.")

        self._vertices = vertices
        self._vertices.setflags(write=False)
        self.number_of_mesh_vertices = number_of_mesh_vertices

        self._lookup = np.full(number_of_mesh_vertices, INACTIVE_INDEX, dtype=np.int64)
        self._lookup[vertices] = np.arange(vertices.size, dtype=np.int64)
        self._lookup.setflags(write=False)

    @classmethod
    def from_mesh(cls, mesh: Mesh, domain: str, dirichlet: Sequence[str] = ()) -> ActiveVertexSet:
        """
        Vertices of the domain region minus the vertices of the Dirichlet curves.

        Args:
            mesh: The mesh.
            domain: Name of the region, e.g. ``"Sea"``.
            dirichlet: Names of the groups whose vertices are forced to zero.

        Raises:
            MeshLoadError: If a named group is missing or the domain is empty.
        """
        domain_vertices = mesh.vertices_of(domain)
        if domain_vertices.size == 0:
            raise MeshLoadError(f"Domain region '{domain}' contains no elements.")

        eliminated = np.empty(0, dtype=np.int64)
        for name in dirichlet:
            eliminated = np.union1d(eliminated, mesh.vertices_of(name))

        active = np.setdiff1d(domain_vertices, eliminated, assume_unique=True)
        logger.info(
            f"Active vertices: {active.size} of {domain_vertices.size} in '{domain}' "
            f"({domain_vertices.size - active.size} eliminated by {list(dirichlet)})"
        )
        return cls(active, mesh.number_of_vertices)

    def __len__(self) -> int:
        return int(self._vertices.size)

    def __iter__(self) -> Iterator[int]:
        return iter(self._vertices.tolist())

    def __contains__(self, vertex: int) -> bool:
        return 0 <= vertex < self.number_of_mesh_vertices and self._lookup[vertex] != INACTIVE_INDEX

    @property
    def vertices(self) -> npt.NDArray[np.int64]:
        """Mesh vertex index of each DOF."""
        return self._vertices

    @property
    def lookup(self) -> npt.NDArray[np.int64]:
        """Mesh vertex -> DOF index, ``INACTIVE_INDEX`` for inactive vertices."""
        return self._lookup

    def position(self, vertex: int) -> DofLookup:
        """DOF carried by a mesh vertex."""
        index = int(self._lookup[vertex])
        return INACTIVE if index == INACTIVE_INDEX else Active(index)


class LocalToGlobalMap:
    """
    Map ``gl(k, p)`` from the p-th vertex of element k to its DOF.

    The connectivity of the domain is translated through the vertex lookup of
    the active set once, so every query is a table lookup.
    """
    def __init__(self, table: npt.NDArray[np.int64], number_of_dofs: int) -> None:
        """
        Args:
            table: (M, n) DOF per element slot, ``INACTIVE_INDEX`` for inactive slots.
            number_of_dofs: Size of the DOF space the table indexes into.
        """
        self._table = np.asarray(table, dtype=np.int64)
        self._table.setflags(write=False)
        self.number_of_dofs = number_of_dofs

    @classmethod
    def build(cls, active: ActiveVertexSet, connectivity: npt.ArrayLike) -> LocalToGlobalMap:
        """
        Build the map of a domain.

        Args:
            active: Active vertex set.
            connectivity: (M, n) mesh vertex indices of the domain elements.

        Returns:
            The local-to-global map.
        """
        connectivity = np.asarray(connectivity, dtype=np.int64)
        return cls(active.lookup[connectivity], len(active))

    def __call__(self, k: int, p: int) -> DofLookup:
        index = int(self._table[k, p])
        return INACTIVE if index == INACTIVE_INDEX else Active(index)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(elements={self.number_of_elements}, "
                f"slots={self.nodes_per_element}, dofs={self.number_of_dofs})")

    @property
    def table(self) -> npt.NDArray[np.int64]:
        """(M, n) read-only DOF table."""
        return self._table

    @property
    def number_of_elements(self) -> int:
        return self._table.shape[0]

    @property
    def nodes_per_element(self) -> int:
        return self._table.shape[1]

    def dofs(self, k: int) -> npt.NDArray[np.int64]:
        """DOFs of all slots of element k, ``INACTIVE_INDEX`` for inactive slots."""
        return self._table[k]

    def redirected(self, redirect: npt.NDArray[np.int64]) -> LocalToGlobalMap:
        """
        Map whose active lookups are rewritten through ``redirect``.

        Args:
            redirect: (number_of_dofs,) array, DOF -> DOF it is merged into.

        Returns:
            New map over the same DOF space.
        """
        redirect = np.asarray(redirect, dtype=np.int64)
        if redirect.shape != (self.number_of_dofs,):
            raise ValueError(f"Redirect must have shape ({self.number_of_dofs},), got {redirect.shape}.")
        if self.number_of_dofs == 0:
            return LocalToGlobalMap(self._table.copy(), 0)
        inactive = self._table == INACTIVE_INDEX
        table = np.where(inactive, INACTIVE_INDEX, redirect[np.where(inactive, 0, self._table)])
        return LocalToGlobalMap(table, self.number_of_dofs)
