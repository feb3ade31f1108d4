"""
Error Kinds
===========
Every failure of the pipeline is fatal and deterministic, so nothing here is
retried. The classes also inherit the builtin exception that best describes
them, which keeps ``except ValueError`` style handlers working.
"""
from __future__ import annotations


class SeaWaveError(Exception):
    """Base class for all errors raised by the wave field pipeline."""


class MeshLoadError(SeaWaveError, ValueError):
    """The mesh or a required tagged sub-mesh is missing or malformed."""


class DegenerateElementError(SeaWaveError, ValueError):
    """An element has zero area (triangle) or zero length (segment)."""

    def __init__(self, element_id: int, kind: str, measure: float) -> None:
        self.element_id = element_id
        self.kind = kind
        self.measure = measure
        super().__init__(f"{kind} element {element_id} is degenerate (measure={measure:.3e}).")


class UnmappedBoundaryVertexError(SeaWaveError):
    """A vertex on a classified side does not carry an active DOF."""

    def __init__(self, side: str, vertex: int, element_id: int) -> None:
        self.side = side
        self.vertex = vertex
        self.element_id = element_id
        super().__init__(
            f"Vertex {vertex} of boundary element {element_id} lies on side '{side}' "
            "but is not an active vertex, so it cannot be paired periodically."
        )


class DimensionMismatchError(SeaWaveError, ValueError):
    """Paired periodic sides hold a different number of DOFs."""

    def __init__(self, source: str, target: str, n_source: int, n_target: int) -> None:
        self.source = source
        self.target = target
        self.n_source = n_source
        self.n_target = n_target
        super().__init__(
            f"Cannot pair side '{source}' ({n_source} DOFs) with side '{target}' "
            f"({n_target} DOFs) one to one."
        )


class SingularSystemError(SeaWaveError, RuntimeError):
    """The reduced linear system has no unique solution."""

    def __init__(self, dimension: int, periodic: bool, absorbing: bool, reason: str) -> None:
        self.dimension = dimension
        self.periodic = periodic
        self.absorbing = absorbing
        self.reason = reason
        hint = ""
        if not periodic and not absorbing:
            hint = " A non-periodic run without absorption is often under-constrained."
        super().__init__(
            f"Singular system of dimension {dimension} "
            f"(periodic={periodic}, absorbing={absorbing}): {reason}.{hint}"
        )


class ResourceLimitError(SeaWaveError, MemoryError):
    """The system is larger than the configured DOF limit."""

    def __init__(self, n_dofs: int, max_dofs: int) -> None:
        self.n_dofs = n_dofs
        self.max_dofs = max_dofs
        super().__init__(f"System with {n_dofs} DOFs exceeds the limit of {max_dofs} DOFs.")


class ConfigurationError(SeaWaveError, ValueError):
    """A run parameter or a source parameter is out of range."""
