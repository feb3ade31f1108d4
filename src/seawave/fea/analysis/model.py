from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from seawave.config import DomainExtents, SolverConfig
from seawave.exceptions import MeshLoadError, ResourceLimitError
from seawave.fea.analysis.local_to_global import ActiveVertexSet, LocalToGlobalMap
from seawave.fea.analysis.periodic import (
    PeriodicAliasTable,
    PeriodicBoundaryResolver,
    PeriodicResolution,
    SideClassification,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from seawave.fea.analysis.finite_elements.edges import LineElement
    from seawave.fea.analysis.finite_elements.finite_element import FiniteElement
    from seawave.fea.pre.mesh import Mesh

logger = logging.getLogger(__name__)


class Model:
    """
    Class representing the wave field model of one run.

    Holds the mesh, the active DOFs, the raw and the periodically wrapped
    local-to-global maps of the domain and of the absorbing curves.
    """
    def __init__(self, mesh: Mesh, config: SolverConfig | None = None) -> None:
        """
        Filter the active vertices, build the maps and resolve periodic sides.

        Args:
            mesh: The mesh.
            config: Run configuration, defaults to ``SolverConfig()``.

        Raises:
            MeshLoadError: If a required group is missing.
            ResourceLimitError: If the active DOFs exceed ``config.max_dofs``.
        """
        self.mesh = mesh
        self.config = config or SolverConfig()
        self.config.validate()
        config = self.config

        if config.domain_tag not in mesh.elements:
            raise MeshLoadError(
                f"Domain region '{config.domain_tag}' not found in mesh; available groups: {mesh.group_names}."
            )
        self.domain_elements: list[FiniteElement] = mesh.elements[config.domain_tag]

        # 1) Active vertices
        self.active = ActiveVertexSet.from_mesh(mesh, config.domain_tag, config.dirichlet_tags)
        if len(self.active) > config.max_dofs:
            raise ResourceLimitError(len(self.active), config.max_dofs)

        # 2) Raw local-to-global maps
        self.domain_map = LocalToGlobalMap.build(self.active, mesh.connectivity(config.domain_tag))

        self.absorbing_elements: dict[str, list[LineElement]] = {}
        self.absorbing_maps: dict[str, LocalToGlobalMap] = {}
        for name in config.absorbing_tags:
            if name not in mesh.boundary_elements:
                if config.absorbing:
                    raise MeshLoadError(f"Absorbing curve '{name}' not found in mesh.")
                logger.debug(f"Absorbing curve '{name}' not in mesh, skipped")
                continue
            self.absorbing_elements[name] = mesh.boundary_elements[name]
            self.absorbing_maps[name] = LocalToGlobalMap.build(self.active, mesh.connectivity(name))

        # 3) Periodic resolution
        self.resolution = self._resolve_boundary()

        # 4) Wrapped maps, the only ones used for accumulation
        aliases = self.resolution.aliases
        self.wrapped_domain_map = PeriodicBoundaryResolver.wrap(self.domain_map, aliases)
        self.wrapped_absorbing_maps = {
            name: PeriodicBoundaryResolver.wrap(gl, aliases) for name, gl in self.absorbing_maps.items()
        }

        logger.info(
            f"Model: {len(self.domain_elements)} triangles, {self.number_of_equations} active DOFs, "
            f"{self.number_of_retained_dofs} retained after periodic reduction"
        )

    def _resolve_boundary(self) -> PeriodicResolution:
        config = self.config
        mesh = self.mesh

        if config.boundary_tag not in mesh.boundary_elements:
            if config.periodic:
                raise MeshLoadError(
                    f"Periodic run needs the boundary curve '{config.boundary_tag}'; "
                    f"available groups: {mesh.group_names}."
                )
            logger.debug(f"Boundary curve '{config.boundary_tag}' not in mesh, sides not classified")
            return PeriodicResolution(
                periodic=False, extents=None, sides=SideClassification.empty(), aliases=PeriodicAliasTable()
            )

        extents = config.extents or DomainExtents.from_coordinates(
            mesh.vertices[mesh.vertices_of(config.domain_tag)]
        )
        resolver = PeriodicBoundaryResolver(
            active=self.active,
            vertices=mesh.vertices,
            extents=extents,
            tolerance=config.side_tolerance,
            periodic=config.periodic,
        )
        return resolver.resolve(mesh.boundary_elements[config.boundary_tag])

    @property
    def number_of_equations(self) -> int:
        """Number of active DOFs."""
        return len(self.active)

    @property
    def retained_dofs(self) -> npt.NDArray[np.int64]:
        """Active DOFs that are not periodic alias sources, ascending."""
        return np.setdiff1d(
            np.arange(self.number_of_equations, dtype=np.int64),
            self.resolution.aliases.sources,
            assume_unique=True,
        )

    @property
    def number_of_retained_dofs(self) -> int:
        return self.number_of_equations - len(self.resolution.aliases)
