from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from seawave.exceptions import ConfigurationError

if TYPE_CHECKING:
    import numpy.typing as npt


class SourceFunction(ABC):
    """
    Abstract base class for scalar source terms f(x, y, z) of the Helmholtz equation.
    """
    NAME: str = "Source"

    @abstractmethod
    def __call__(self, x: float, y: float, z: float) -> complex:
        """
        Evaluate the source at a point.

        Args:
            x, y, z: Coordinates of the point.

        Returns:
            Source value.
        """
        pass

    def evaluate(self, points: npt.ArrayLike) -> npt.NDArray[np.complex128]:
        """
        Evaluate the source at many points.

        Args:
            points: (N, 3) array of coordinates.

        Returns:
            (N,) array of source values.
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return np.array([self(*p) for p in points], dtype=np.complex128)


class ZeroSource(SourceFunction):
    """
    Source identically equal to zero.
    """
    NAME = "Zero"

    def __call__(self, x: float, y: float, z: float) -> complex:
        return 0.0


class GaussianPulse(SourceFunction):
    """
    Gaussian pulse a * exp(-|p - p₀|² / (2σ²)).
    """
    NAME = "Gaussian pulse"

    def __init__(
        self,
        amplitude: complex = 1.0,
        sigma_squared: float = 5.0,
        center: tuple[float, float, float] = (800.0, -300.0, 0.0),
    ) -> None:
        """
        Initialize the pulse.

        Args:
            amplitude: Peak value a.
            sigma_squared: Variance σ².
            center: Centre p₀ of the pulse.

        Raises:
            ValueError: If the variance is not positive or the centre is not 3D.
        """
        if sigma_squared <= 0:
            raise ConfigurationError(f"sigma_squared must be positive, got {sigma_squared}.")
        center = np.asarray(center, dtype=np.float64)
        if center.shape != (3,):
            raise ConfigurationError(f"center must have three coordinates, got {center.tolist()}.")

        self.amplitude = amplitude
        self.sigma_squared = float(sigma_squared)
        self.center = center

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(amplitude={self.amplitude}, "
                f"sigma_squared={self.sigma_squared}, center={self.center.tolist()})")

    def __call__(self, x: float, y: float, z: float) -> complex:
        dx = np.array([x, y, z], dtype=np.float64) - self.center
        return self.amplitude * np.exp(-np.dot(dx, dx) / (2 * self.sigma_squared))

    def evaluate(self, points: npt.ArrayLike) -> npt.NDArray[np.complex128]:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        r2 = np.sum((points - self.center) ** 2, axis=1)
        return (self.amplitude * np.exp(-r2 / (2 * self.sigma_squared))).astype(np.complex128)
