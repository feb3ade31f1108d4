"""
Periodic Boundary Resolution
============================
Classifies the DOFs of the outer boundary into the four sides of the domain
rectangle and, for a periodic run, identifies opposite sides so that the two
physical copies of a wrapped vertex accumulate into one DOF.

Pairing directions are fixed: bottom -> top and right -> left (source ->
target). The source DOFs become redundant and are dropped from the solved
system; their values are mirrored back afterwards.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Iterator, Sequence

import numpy as np

from seawave.config import DomainExtents
from seawave.exceptions import DimensionMismatchError, UnmappedBoundaryVertexError
from seawave.fea.analysis.local_to_global import ActiveVertexSet, LocalToGlobalMap

if TYPE_CHECKING:
    import numpy.typing as npt
    from seawave.fea.analysis.finite_elements.edges import LineElement

logger = logging.getLogger(__name__)


class Side(StrEnum):
    LEFT = "left"
    RIGHT = "right"
    BOTTOM = "bottom"
    TOP = "top"


# (source, target)
PERIODIC_PAIRS: tuple[tuple[Side, Side], ...] = (
    (Side.BOTTOM, Side.TOP),
    (Side.RIGHT, Side.LEFT),
)

# axis the side is perpendicular to
SIDE_AXIS = {
    Side.LEFT: 0,
    Side.RIGHT: 0,
    Side.BOTTOM: 1,
    Side.TOP: 1,
}


@dataclass(frozen=True)
class SideClassification:
    """
    DOFs found on each side, sorted along the side.

    Attributes:
        dofs: Side -> DOF indices sorted by the coordinate along the side.
        coordinates: Side -> coordinate along the side of each DOF.
    """
    dofs: dict[Side, npt.NDArray[np.int64]]
    coordinates: dict[Side, npt.NDArray[np.float64]]

    def __getitem__(self, side: Side) -> npt.NDArray[np.int64]:
        return self.dofs[side]

    def counts(self) -> dict[str, int]:
        return {str(side): int(self.dofs[side].size) for side in Side}

    @classmethod
    def empty(cls) -> SideClassification:
        return cls(
            dofs={side: np.empty(0, dtype=np.int64) for side in Side},
            coordinates={side: np.empty(0, dtype=np.float64) for side in Side},
        )


@dataclass
class PeriodicAliasTable:
    """
    Source DOF -> target DOF of the periodic identification, per side pair.

    Each family maps its source side 1:1 onto its target side. The
    bottom-right corner is a source of both families and the top-right corner
    is the target of one and the source of the other, so ``resolve`` follows
    the union of both families until it reaches a DOF that is no source.
    """
    families: dict[tuple[Side, Side], dict[int, int]] = field(default_factory=dict)

    @classmethod
    def from_pairs(
        cls, pairs: dict[int, int], family: tuple[Side, Side] = (Side.BOTTOM, Side.TOP)
    ) -> PeriodicAliasTable:
        return cls({family: dict(pairs)})

    def add(self, family: tuple[Side, Side], source: int, target: int) -> None:
        self.families.setdefault(family, {})[source] = target

    def family(self, source: Side, target: Side) -> dict[int, int]:
        return self.families.get((source, target), {})

    def targets_of(self, dof: int) -> list[int]:
        return [pairs[dof] for pairs in self.families.values() if dof in pairs]

    def __len__(self) -> int:
        return self.sources.size

    def __contains__(self, dof: int) -> bool:
        return any(dof in pairs for pairs in self.families.values())

    def __iter__(self) -> Iterator[int]:
        return iter(self.sources.tolist())

    def items(self) -> Iterator[tuple[int, int]]:
        """All (source, target) pairs of all families."""
        for pairs in self.families.values():
            yield from pairs.items()

    @property
    def sources(self) -> npt.NDArray[np.int64]:
        """Sorted source DOFs, the ones dropped from the reduced system."""
        return np.array(sorted({dof for pairs in self.families.values() for dof in pairs}), dtype=np.int64)

    def resolve(self, dof: int) -> int:
        """
        Final DOF a DOF is merged into.

        Raises:
            ValueError: If the aliases of the DOF form a cycle or end in more than one DOF.
        """
        ends: set[int] = set()
        seen = {dof}
        stack = [dof]
        while stack:
            current = stack.pop()
            targets = self.targets_of(current)
            if not targets:
                ends.add(current)
                continue
            for target in targets:
                if target not in seen:
                    seen.add(target)
                    stack.append(target)

        if not ends:
            raise ValueError(f"Periodic aliases form a cycle through DOF {dof}.")
        if len(ends) > 1:
            raise ValueError(f"Periodic aliases of DOF {dof} end in several DOFs {sorted(ends)}.")
        return ends.pop()

    def redirect(self, number_of_dofs: int) -> npt.NDArray[np.int64]:
        """
        Array form of ``resolve`` over the whole DOF space.

        Returns:
            (number_of_dofs,) array, identity outside the sources.
        """
        redirect = np.arange(number_of_dofs, dtype=np.int64)
        for source in self.sources.tolist():
            redirect[source] = self.resolve(source)
        return redirect


@dataclass(frozen=True)
class PeriodicResolution:
    """Result of the boundary resolution of one run."""
    periodic: bool
    extents: DomainExtents | None
    sides: SideClassification
    aliases: PeriodicAliasTable


class PeriodicBoundaryResolver:
    """
    Side classification and periodic pairing of the boundary DOFs.
    """
    def __init__(
        self,
        active: ActiveVertexSet,
        vertices: npt.NDArray[np.float64],
        extents: DomainExtents,
        tolerance: float = 1e-9,
        periodic: bool = True,
    ) -> None:
        """
        Args:
            active: Active vertex set.
            vertices: (N, 3) coordinates of all mesh vertices.
            extents: Domain rectangle.
            tolerance: Absolute tolerance of a coordinate match.
            periodic: Pair opposite sides; otherwise only classify.
        """
        self.active = active
        self.vertices = np.asarray(vertices, dtype=np.float64)
        self.extents = extents
        self.tolerance = tolerance
        self.periodic = periodic

    def _sides_of(self, xyz: npt.NDArray[np.float64]) -> list[Side]:
        x, y = xyz[0], xyz[1]
        matches = {
            Side.LEFT: np.isclose(x, self.extents.left, rtol=0.0, atol=self.tolerance),
            Side.RIGHT: np.isclose(x, self.extents.right, rtol=0.0, atol=self.tolerance),
            Side.BOTTOM: np.isclose(y, self.extents.bottom, rtol=0.0, atol=self.tolerance),
            Side.TOP: np.isclose(y, self.extents.top, rtol=0.0, atol=self.tolerance),
        }
        return [side for side, hit in matches.items() if hit]

    def classify(self, boundary_elements: Sequence[LineElement]) -> SideClassification:
        """
        Collect the DOFs of the boundary segments lying on each side.

        Args:
            boundary_elements: Segments of the outer boundary.

        Returns:
            Deduplicated DOFs per side, sorted along the side.

        Raises:
            UnmappedBoundaryVertexError: If a side vertex is inactive in a periodic run.
        """
        found: dict[Side, dict[int, float]] = {side: {} for side in Side}

        for element in boundary_elements:
            for vertex in element.vertex_ids.tolist():
                xyz = self.vertices[vertex]
                sides = self._sides_of(xyz)
                if not sides:
                    continue

                dof = int(self.active.lookup[vertex])
                if dof < 0:
                    if self.periodic:
                        raise UnmappedBoundaryVertexError(str(sides[0]), vertex, element.id)
                    logger.debug(f"Skipping inactive vertex {vertex} on sides {[str(s) for s in sides]}")
                    continue

                for side in sides:
                    # coordinate along the side: y for left/right, x for bottom/top
                    found[side][dof] = float(xyz[1 - SIDE_AXIS[side]])

        dofs: dict[Side, npt.NDArray[np.int64]] = {}
        coordinates: dict[Side, npt.NDArray[np.float64]] = {}
        for side in Side:
            side_dofs = np.fromiter(found[side].keys(), dtype=np.int64, count=len(found[side]))
            side_coords = np.fromiter(found[side].values(), dtype=np.float64, count=len(found[side]))
            # sort by coordinate, ties by DOF
            order = np.lexsort((side_dofs, side_coords))
            dofs[side] = side_dofs[order]
            coordinates[side] = side_coords[order]

        classification = SideClassification(dofs=dofs, coordinates=coordinates)
        logger.debug(f"Boundary DOFs per side: {classification.counts()}")
        return classification

    def pair(self, sides: SideClassification) -> PeriodicAliasTable:
        """
        Pair each source side with its target side 1:1 by rank along the side.

        Raises:
            DimensionMismatchError: If paired sides hold different numbers of DOFs.
        """
        table = PeriodicAliasTable()
        if not self.periodic:
            return table

        for source, target in PERIODIC_PAIRS:
            source_dofs, target_dofs = sides[source], sides[target]
            if source_dofs.size != target_dofs.size:
                raise DimensionMismatchError(str(source), str(target), source_dofs.size, target_dofs.size)

            offset = np.abs(sides.coordinates[source] - sides.coordinates[target])
            if offset.size and offset.max() > self.tolerance:
                logger.warning(
                    f"Periodic pair {source}->{target}: paired vertices differ by up to "
                    f"{offset.max():.3e} along the side."
                )

            for s, t in zip(source_dofs.tolist(), target_dofs.tolist()):
                if s != t:
                    table.add((source, target), s, t)

        # raises on cycles and on corners ending in different DOFs
        table.redirect(len(self.active))
        logger.info(f"Periodic aliases: {len(table)} source DOFs merged into their opposite side")
        return table

    def resolve(self, boundary_elements: Sequence[LineElement]) -> PeriodicResolution:
        """Classify the sides and, for a periodic run, build the alias table."""
        sides = self.classify(boundary_elements)
        aliases = self.pair(sides)
        return PeriodicResolution(periodic=self.periodic, extents=self.extents, sides=sides, aliases=aliases)

    @staticmethod
    def wrap(gl: LocalToGlobalMap, aliases: PeriodicAliasTable) -> LocalToGlobalMap:
        """
        Map whose lookups landing on a source DOF return the merged target DOF.

        The identity when the table is empty.
        """
        if len(aliases) == 0:
            return gl
        return gl.redirected(aliases.redirect(gl.number_of_dofs))
