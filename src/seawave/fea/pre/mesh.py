from __future__ import annotations

import logging
from collections import defaultdict

import numpy as np
import gmsh

from seawave.exceptions import MeshLoadError
from seawave.fea.analysis.node import Node
from seawave.fea.analysis.finite_elements.finite_element import FiniteElement
from seawave.fea.analysis.finite_elements.tri3 import Tri3
from seawave.fea.analysis.finite_elements.edges import LineElement, Line2

from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

LINE_ELEMENT_TYPE_MAP = {
    1: (Line2, 2),  # 2-node line
}

SURFACE_ELEMENT_TYPE_MAP = {
    2: (Tri3, 3),  # 3-node triangle
}

ELEMENT_TYPE_MAP = {
    **LINE_ELEMENT_TYPE_MAP,
    **SURFACE_ELEMENT_TYPE_MAP,
}

POINT_ELEMENT_TYPE = 15


class Mesh:
    """
    Vertices plus named groups of triangles (regions) and segments (curves).

    Groups are keyed by gmsh physical name, e.g. ``"Sea"`` for the water
    region and ``"Coast"``/``"Border"`` for the boundary curves.
    """
    def __init__(
        self,
        nodes: list[Node],
        elements: dict[str, list[FiniteElement]],
        boundary_elements: dict[str, list[LineElement]],
        filename: str | None = None,
    ) -> None:
        """
        Initialize the Mesh class.

        Raises:
            MeshLoadError: If element vertices are out of range or repeated.
        """
        nodes = sorted(nodes, key=lambda node: node.uid)
        if [node.uid for node in nodes] != list(range(len(nodes))):
            raise MeshLoadError("Node indices must be contiguous and zero-based.")

        self.nodes = nodes
        self.elements = dict(elements)
        self.boundary_elements = dict(boundary_elements)
        self.filename = filename
        self._vertices = np.array([node.coords for node in nodes], dtype=np.float64).reshape(-1, 3)
        self._vertices.setflags(write=False)

        self._validate()

    def __repr__(self) -> str:
        groups = {name: len(els) for name, els in {**self.elements, **self.boundary_elements}.items()}
        return f"{self.__class__.__name__}(nodes={len(self.nodes)}, groups={groups})"

    def _validate(self) -> None:
        for name, elements in {**self.elements, **self.boundary_elements}.items():
            for element in elements:
                ids = element.vertex_ids
                if np.unique(ids).size != ids.size:
                    raise MeshLoadError(
                        f"Element {element.id} of group '{name}' repeats a vertex: {ids.tolist()}."
                    )

    @classmethod
    def from_arrays(
        cls,
        vertices: npt.ArrayLike,
        groups: Mapping[str, npt.ArrayLike],
    ) -> Mesh:
        """
        Build a mesh from a coordinate array and per-group connectivity arrays.

        Args:
            vertices: (N, 2) or (N, 3) vertex coordinates.
            groups: Physical name -> (M, 3) triangle or (M, 2) segment connectivity,
                zero-based vertex indices.

        Returns:
            The mesh.

        Raises:
            MeshLoadError: If the arrays are malformed.
        """
        coords = np.asarray(vertices, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[1] not in (2, 3):
            raise MeshLoadError(f"Vertices must have shape (N, 2) or (N, 3), got {coords.shape}.")

        nodes = [Node(index=i, coords=xyz) for i, xyz in enumerate(coords)]

        surface_elements: dict[str, list[FiniteElement]] = {}
        boundary_elements: dict[str, list[LineElement]] = {}

        for name, connectivity in groups.items():
            connectivity = np.asarray(connectivity, dtype=np.int64)
            if connectivity.ndim != 2 or connectivity.shape[1] not in (2, 3):
                raise MeshLoadError(
                    f"Group '{name}' must have shape (M, 2) or (M, 3), got {connectivity.shape}."
                )
            if connectivity.size and (connectivity.min() < 0 or connectivity.max() >= len(nodes)):
                raise MeshLoadError(f"Group '{name}' references vertices outside the mesh.")

            if connectivity.shape[1] == 3:
                surface_elements[name] = [
                    Tri3(index=k, tag=name, nodes=[nodes[i] for i in row])
                    for k, row in enumerate(connectivity)
                ]
            else:
                boundary_elements[name] = [
                    Line2(index=k, tag=name, nodes=[nodes[i] for i in row])
                    for k, row in enumerate(connectivity)
                ]

        return cls(nodes=nodes, elements=surface_elements, boundary_elements=boundary_elements)

    @classmethod
    def from_file(cls, filename: str) -> Mesh:
        """
        Load mesh data from a gmsh file.

        Every physical group with 3-node triangles becomes a region and every
        physical group with 2-node lines becomes a curve. Point groups are ignored.

        Raises:
            MeshLoadError: If the file cannot be read or holds unsupported elements.
        """
        logger.info(f"Loading mesh from: {filename}")
        gmsh.initialize()
        gmsh.option.set_number("General.Terminal", 0)
        try:
            try:
                gmsh.open(filename)
            except Exception as e:
                raise MeshLoadError(f"Could not open mesh file '{filename}': {e}") from e

            # 1) Read all nodes once
            node_tags, flat_coords, _ = gmsh.model.mesh.get_nodes()
            if len(node_tags) == 0:
                raise MeshLoadError(f"Mesh file '{filename}' contains no nodes.")
            coords = np.asarray(flat_coords, dtype=np.float64).reshape(-1, 3)

            order = np.argsort(node_tags)
            node_tags = np.asarray(node_tags)[order]
            coords = coords[order]
            tag_to_index = {int(tag): i for i, tag in enumerate(node_tags)}
            nodes = [Node(index=i, coords=xyz) for i, xyz in enumerate(coords)]

            # 2) Prepare containers for elements by physical-group names
            surface_elements: dict[str, list[FiniteElement]] = defaultdict(list)
            boundary_elements: dict[str, list[LineElement]] = defaultdict(list)

            # 3) Loop all physical groups and their entities
            for dim, physical_tag in gmsh.model.get_physical_groups():
                name = gmsh.model.get_physical_name(dim, physical_tag)
                if name is None or name.strip() == "":
                    raise MeshLoadError(
                        f"Physical group (dim={dim}, tag={physical_tag}) has empty/undefined name."
                    )

                for entity_tag in gmsh.model.get_entities_for_physical_group(dim, physical_tag):
                    element_types, _, flat_node_tags = gmsh.model.mesh.get_elements(dim, entity_tag)

                    for element_type, element_node_tags in zip(element_types, flat_node_tags):
                        if element_type == POINT_ELEMENT_TYPE:
                            continue
                        if element_type not in ELEMENT_TYPE_MAP:
                            raise MeshLoadError(
                                f"Physical group '{name}' holds unsupported gmsh element type {element_type}; "
                                "only 3-node triangles and 2-node lines are supported."
                            )

                        element_class, nodes_per_element = ELEMENT_TYPE_MAP[element_type]
                        connectivity = np.asarray(element_node_tags).reshape(-1, nodes_per_element)

                        target = surface_elements if element_type in SURFACE_ELEMENT_TYPE_MAP else boundary_elements
                        for row in connectivity:
                            try:
                                element_nodes = [nodes[tag_to_index[int(tag)]] for tag in row]
                            except KeyError as e:
                                raise MeshLoadError(
                                    f"Element of group '{name}' references unknown node tag {e}."
                                ) from e
                            target[name].append(
                                element_class(index=len(target[name]), tag=name, nodes=element_nodes)
                            )
        finally:
            gmsh.finalize()

        mesh = cls(nodes=nodes, elements=surface_elements, boundary_elements=boundary_elements, filename=filename)
        logger.info(f"Loaded {mesh!r}")
        return mesh

    @property
    def vertices(self) -> npt.NDArray[np.float64]:
        """(N, 3) read-only array of vertex coordinates."""
        return self._vertices

    @property
    def number_of_vertices(self) -> int:
        """Number of mesh vertices."""
        return len(self.nodes)

    @property
    def group_names(self) -> list[str]:
        """Names of all regions and curves."""
        return sorted({*self.elements, *self.boundary_elements})

    def has_group(self, name: str) -> bool:
        """Whether a region or curve of that name exists."""
        return name in self.elements or name in self.boundary_elements

    def group(self, name: str) -> list[FiniteElement] | list[LineElement]:
        """
        Elements of a named region or curve.

        Raises:
            MeshLoadError: If no group of that name exists.
        """
        if name in self.elements:
            return self.elements[name]
        if name in self.boundary_elements:
            return self.boundary_elements[name]
        raise MeshLoadError(
            f"Required physical group '{name}' not found in mesh; available groups: {self.group_names}."
        )

    def connectivity(self, name: str) -> npt.NDArray[np.int64]:
        """
        Connectivity of a named group.

        Returns:
            (M, n) array of zero-based vertex indices, n = 3 for regions and 2 for curves.
        """
        elements = self.group(name)
        n = 3 if name in self.elements else 2
        if not elements:
            return np.empty((0, n), dtype=np.int64)
        return np.array([element.vertex_ids for element in elements], dtype=np.int64)

    def vertices_of(self, name: str) -> npt.NDArray[np.int64]:
        """Sorted, duplicate-free vertex indices used by a named group."""
        return np.unique(self.connectivity(name))

    def plot(self) -> None:
        """Plot the regions and curves of the mesh."""
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots()
        ax.set_aspect("equal")

        x, y = self._vertices[:, 0], self._vertices[:, 1]
        for name in self.elements:
            ax.triplot(x, y, self.connectivity(name), linewidth=0.3, label=name)
        for name in self.boundary_elements:
            segments = self.connectivity(name)
            xs = np.column_stack([x[segments[:, 0]], x[segments[:, 1]]]).T
            ys = np.column_stack([y[segments[:, 0]], y[segments[:, 1]]]).T
            lines = ax.plot(xs, ys, linewidth=1.5)
            if lines:
                lines[0].set_label(name)

        ax.legend()
        plt.show()
