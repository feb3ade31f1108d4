from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


class Node:
    """
    Represents a mesh vertex of the wave field analysis.
    """
    def __init__(
        self,
        index: int,
        coords: list[float] | npt.NDArray[np.float64],
    ) -> None:
        """
        Initialize the node with coordinates.

        Args:
            index: Zero-based position of the node in the mesh vertex list.
            coords: Coordinates of the node in the global system [X, Y, Z].
                Two-dimensional input is padded with Z = 0.
        """
        coords = np.asarray(coords, dtype=np.float64).ravel()
        if coords.size == 2:
            coords = np.append(coords, 0.0)
        if coords.size != 3:
            raise ValueError(f"Node {index} needs 2 or 3 coordinates, got {coords.size}.")
        self.coords = coords
        self.uid = index

    def __repr__(self) -> str:
        """String representation of the node."""
        return f"{self.__class__.__name__}(id={self.uid}, coords={self.coords})"

    @property
    def x(self) -> float:
        """X-coordinate of the node."""
        return self.coords[0]

    @property
    def y(self) -> float:
        """Y-coordinate of the node."""
        return self.coords[1]

    @property
    def z(self) -> float:
        """Z-coordinate of the node."""
        return self.coords[2]
