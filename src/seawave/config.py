"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths, reference
constants and the run configuration of the wave field solver.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_MESH_PATH (str): Absolute path to the reference sea mesh.
    DomainExtents: Rectangle used to classify periodic sides.
    SolverConfig: Options of a single run.
"""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from seawave.exceptions import ConfigurationError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to a resource relative to the project root.
    """
    # config.py is in src/seawave/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_MESH_PATH: str = os.path.join(ASSETS_PATH, "sea.msh")

# Reference scenario
DEFAULT_WAVELENGTH = 50.0
DEFAULT_SOURCE_CENTER = (800.0, -300.0, 0.0)
DEFAULT_SOURCE_AMPLITUDE = 1.0
DEFAULT_SOURCE_SIGMA_SQUARED = 5.0

SUPPORTED_COMBINATIONS = {
    # (periodic, absorbing)
    (False, False),
    (True, False),
    (True, True),
}


@dataclass(frozen=True)
class DomainExtents:
    """Axis-aligned rectangle bounding the periodic domain."""
    left: float
    right: float
    bottom: float
    top: float

    def __post_init__(self) -> None:
        if not (self.left < self.right and self.bottom < self.top):
            raise ConfigurationError(f"Degenerate domain extents: {self}.")

    @classmethod
    def from_coordinates(cls, coords: npt.ArrayLike) -> DomainExtents:
        """Bounding box of a set of points (x in column 0, y in column 1)."""
        coords = np.asarray(coords, dtype=np.float64)
        return cls(
            left=float(coords[:, 0].min()),
            right=float(coords[:, 0].max()),
            bottom=float(coords[:, 1].min()),
            top=float(coords[:, 1].max()),
        )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom


REFERENCE_EXTENTS = DomainExtents(left=0.0, right=1000.0, bottom=-570.0, top=0.0)


@dataclass
class SolverConfig:
    """
    Options of one wave field computation.

    Attributes:
        wavelength: Wavelength λ, the wave number is k = 2π / λ.
        periodic: Merge the DOFs of opposite sides of the domain rectangle.
        absorbing: Add the first-order absorbing term on ``absorbing_tags``.
        domain_tag: Region carrying the field.
        boundary_tag: Curve whose vertices are classified into sides.
        dirichlet_tags: Groups whose vertices are held at zero.
        absorbing_tags: Curves carrying the absorbing term.
        extents: Domain rectangle; the bounding box of the domain when None.
        side_tolerance: Absolute tolerance of the side classification.
        singular_tolerance: Smallest accepted ratio of LU pivots.
        max_dofs: Largest accepted number of active DOFs.
    """
    wavelength: float = DEFAULT_WAVELENGTH
    periodic: bool = True
    absorbing: bool = False
    domain_tag: str = "Sea"
    boundary_tag: str = "Border"
    dirichlet_tags: tuple[str, ...] = ("Coast",)
    absorbing_tags: tuple[str, ...] = ("Border",)
    extents: DomainExtents | None = None
    side_tolerance: float = 1e-9
    singular_tolerance: float = 1e-12
    max_dofs: int = 500_000

    def __post_init__(self) -> None:
        self.dirichlet_tags = tuple(self.dirichlet_tags)
        self.absorbing_tags = tuple(self.absorbing_tags)
        if isinstance(self.extents, dict):
            self.extents = DomainExtents(**self.extents)

    @property
    def wave_number(self) -> float:
        """k = 2π / λ, zero for an infinite wavelength."""
        if math.isinf(self.wavelength):
            return 0.0
        return 2 * math.pi / self.wavelength

    @property
    def absorption(self) -> float:
        """Absorption toggle as a factor of the boundary term."""
        return 1.0 if self.absorbing else 0.0

    def validate(self) -> None:
        """
        Check the configuration.

        Raises:
            ValueError: On non-physical values.
        """
        if not self.wavelength > 0:
            raise ConfigurationError(f"Wavelength must be positive, got {self.wavelength}.")
        if self.side_tolerance < 0:
            raise ConfigurationError(f"side_tolerance must be non-negative, got {self.side_tolerance}.")
        if self.singular_tolerance < 0:
            raise ConfigurationError(f"singular_tolerance must be non-negative, got {self.singular_tolerance}.")
        if self.max_dofs <= 0:
            raise ConfigurationError(f"max_dofs must be positive, got {self.max_dofs}.")
        if self.domain_tag in self.dirichlet_tags:
            raise ConfigurationError(f"Domain '{self.domain_tag}' cannot be a Dirichlet group.")
        if (self.periodic, self.absorbing) not in SUPPORTED_COMBINATIONS:
            logger.warning(
                f"Configuration periodic={self.periodic}, absorbing={self.absorbing} "
                "is not one of the supported combinations."
            )

    def to_dict(self) -> dict[str, Any]:
        """Plain representation, e.g. for file attributes."""
        data = asdict(self)
        data["wave_number"] = self.wave_number
        return data
