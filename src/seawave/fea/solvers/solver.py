from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

import numpy as np
import scipy as sp
import scipy.sparse.linalg

from seawave.exceptions import SingularSystemError
from seawave.fea.post.reconstruct import FieldReconstructor
from seawave.fea.solvers.assembler import GlobalSystemBuilder

if TYPE_CHECKING:
    import numpy.typing as npt

    from seawave.fea.analysis.model import Model
    from seawave.fea.post.reconstruct import Solution
    from seawave.fea.solvers.assembler import GlobalSystem, ReducedSystem

logger = logging.getLogger(__name__)


class LinearSolver:
    """
    Direct sparse LU solver for the reduced complex system.
    """

    def __init__(self, singular_tolerance: float = 1e-12, periodic: bool = False, absorbing: bool = False) -> None:
        """
        Args:
            singular_tolerance: Smallest accepted ratio min|U_ii| / max|U_ii|.
            periodic: Periodic flag of the run, reported on failure.
            absorbing: Absorbing flag of the run, reported on failure.
        """
        self.singular_tolerance = singular_tolerance
        self.periodic = periodic
        self.absorbing = absorbing

    def _singular(self, dimension: int, reason: str) -> SingularSystemError:
        return SingularSystemError(dimension, self.periodic, self.absorbing, reason)

    def solve(self, matrix: sp.sparse.spmatrix, vector: npt.ArrayLike) -> npt.NDArray[np.complex128]:
        """
        Solve matrix · u = vector.

        Args:
            matrix: (n, n) sparse system matrix.
            vector: (n,) right-hand side.

        Returns:
            Solution vector.

        Raises:
            SingularSystemError: If the matrix has no usable LU factorization.
        """
        n = matrix.shape[0]
        vector = np.asarray(vector, dtype=np.complex128)
        if matrix.shape != (n, n) or vector.shape != (n,):
            raise ValueError(f"Incompatible system: matrix {matrix.shape}, vector {vector.shape}.")
        if n == 0:
            return np.zeros((0,), dtype=np.complex128)

        try:
            lu = sp.sparse.linalg.splu(sp.sparse.csc_matrix(matrix, dtype=np.complex128))
        except RuntimeError as e:
            raise self._singular(n, f"LU factorization failed ({e})") from e

        pivots = np.abs(lu.U.diagonal())
        largest = pivots.max()
        if largest == 0.0:
            raise self._singular(n, "all pivots are zero")
        ratio = pivots.min() / largest
        if ratio < self.singular_tolerance:
            raise self._singular(n, f"pivot ratio {ratio:.3e} below tolerance {self.singular_tolerance:.1e}")

        u = lu.solve(vector)
        if not np.all(np.isfinite(u)):
            raise self._singular(n, "solution contains non-finite values")

        logger.debug(f"LU solve of dimension {n}, pivot ratio {ratio:.3e}")
        return u


class Solver:
    """
    Class for the wave field FEM solver.

    Runs the pipeline assemble -> reduce -> solve -> expand on a model.
    """

    def __init__(self, model: Model) -> None:
        """
        Initialize the solver with a model.

        Args:
            model: The model to be solved.
        """
        self.model = model
        self.builder = GlobalSystemBuilder(model)
        self.linear_solver = LinearSolver(
            singular_tolerance=model.config.singular_tolerance,
            periodic=model.config.periodic,
            absorbing=model.config.absorbing,
        )
        self.reconstructor = FieldReconstructor.from_model(model)

        self.system: GlobalSystem | None = None
        self.reduced: ReducedSystem | None = None

    def solve(self, source: Callable[[float, float, float], complex]) -> Solution:
        """
        Compute the wave field for a source term.

        Args:
            source: Scalar source function f(x, y, z).

        Returns:
            The reconstructed solution.

        Raises:
            SingularSystemError: If the reduced system has no unique solution.
        """
        start = time.perf_counter()

        self.system = self.builder.build(source)
        self.reduced = self.builder.reduce(self.system)
        u = self.linear_solver.solve(self.reduced.matrix, self.reduced.vector)
        solution = self.reconstructor.reconstruct(u)

        logger.info(
            f"Solved {self.reduced.dimension} DOFs in {time.perf_counter() - start:.2f} s, "
            f"max |u| = {np.abs(solution.u_mesh).max(initial=0.0):.4e}"
        )
        return solution
