"""
Global System Assembly
======================
Accumulates the element contributions of a model into the global complex
system ``S_eff u = F`` and reduces it to the DOFs that are actually solved.

All element contributions are routed through the periodically wrapped
local-to-global maps, so two physical copies of a periodic vertex land in one
row. Triplets of every element are collected first and summed on conversion
to CSR (COO tolerates duplicates).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Sequence

import numpy as np
import scipy as sp

from seawave.fea.analysis.local_to_global import INACTIVE_INDEX

if TYPE_CHECKING:
    import numpy.typing as npt

    from seawave.fea.analysis.local_to_global import LocalToGlobalMap
    from seawave.fea.analysis.model import Model
    from seawave.fea.analysis.finite_elements.edges import LineElement
    from seawave.fea.analysis.finite_elements.finite_element import FiniteElement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssemblyContext:
    """
    Everything an assembly pass reads besides the elements themselves.

    Attributes:
        wave_number: Wave number k.
        absorption: Factor of the absorbing term, 0.0 (off) or 1.0 (on).
        number_of_dofs: Size of the active DOF space.
        domain_map: Wrapped map of the domain triangles.
        boundary_maps: Wrapped map of each absorbing curve.
    """
    wave_number: float
    absorption: float
    number_of_dofs: int
    domain_map: LocalToGlobalMap
    boundary_maps: dict[str, LocalToGlobalMap] = field(default_factory=dict)

    @classmethod
    def from_model(cls, model: Model) -> AssemblyContext:
        return cls(
            wave_number=model.config.wave_number,
            absorption=model.config.absorption,
            number_of_dofs=model.number_of_equations,
            domain_map=model.wrapped_domain_map,
            boundary_maps=dict(model.wrapped_absorbing_maps),
        )


@dataclass(frozen=True)
class ReducedSystem:
    """The system actually solved, over the retained DOFs only."""
    matrix: sp.sparse.csc_matrix
    vector: npt.NDArray[np.complex128]
    retained: npt.NDArray[np.int64]

    @property
    def dimension(self) -> int:
        return int(self.retained.size)


@dataclass(frozen=True)
class GlobalSystem:
    """
    Assembled global system over all active DOFs.

    Attributes:
        S: Stiffness plus mass part, ∫∇φᵢ·∇φⱼ - k²∫φᵢφⱼ.
        T: Absorbing boundary part, i·k·absorption·∫φᵢφⱼ ds.
        F: Load vector.
    """
    S: sp.sparse.csr_matrix
    T: sp.sparse.csr_matrix
    F: npt.NDArray[np.complex128]

    @property
    def S_eff(self) -> sp.sparse.csr_matrix:
        return (self.S + self.T).tocsr()

    @property
    def number_of_dofs(self) -> int:
        return self.F.size

    def reduce(self, retained: npt.ArrayLike) -> ReducedSystem:
        """
        Drop the rows and columns of the periodic alias sources.

        Args:
            retained: Ascending DOFs kept in the solved system.

        Returns:
            The reduced system.
        """
        retained = np.asarray(retained, dtype=np.int64)
        matrix = self.S_eff[retained][:, retained].tocsc()
        return ReducedSystem(matrix=matrix, vector=self.F[retained].copy(), retained=retained)


class GlobalSystemBuilder:
    """
    Assembles the global matrices and the load vector of a model.
    """

    def __init__(self, model: Model) -> None:
        """
        Initialize the builder with a model.

        Args:
            model: The model to be assembled.
        """
        self.model = model
        self.context = AssemblyContext.from_model(model)

    @staticmethod
    def _accumulate_matrix(
        elements: Sequence[FiniteElement] | Sequence[LineElement],
        gl: LocalToGlobalMap,
        number_of_dofs: int,
        get_local_matrix: Callable[[FiniteElement | LineElement], npt.NDArray[np.complex128]],
    ) -> sp.sparse.csr_matrix:
        """
        Assemble a global matrix in CSR form using a provided function to get the element matrix.

        Inactive slots are skipped.

        Args:
            elements: Elements in the order of the rows of ``gl``.
            gl: Wrapped local-to-global map of the elements.
            number_of_dofs: Dimension of the global matrix.
            get_local_matrix: Element -> local matrix.

        Returns:
            Global matrix.
        """
        row_parts: list[npt.NDArray[np.int64]] = []
        col_parts: list[npt.NDArray[np.int64]] = []
        data_parts: list[npt.NDArray[np.complex128]] = []

        for k, element in enumerate(elements):
            dofs = gl.dofs(k)
            active = dofs != INACTIVE_INDEX
            if not active.any():
                continue

            dofs = dofs[active]
            n_dofs = dofs.size
            m_el = np.asarray(get_local_matrix(element), dtype=np.complex128)[np.ix_(active, active)]

            row_parts.append(np.repeat(dofs, n_dofs))
            col_parts.append(np.tile(dofs, n_dofs))
            data_parts.append(m_el.ravel(order="C"))

        if not data_parts:
            return sp.sparse.csr_matrix((number_of_dofs, number_of_dofs), dtype=np.complex128)

        return sp.sparse.coo_matrix(
            (np.concatenate(data_parts), (np.concatenate(row_parts), np.concatenate(col_parts))),
            shape=(number_of_dofs, number_of_dofs),
            dtype=np.complex128,
        ).tocsr()

    def assemble_matrix(self, context: AssemblyContext | None = None) -> sp.sparse.csr_matrix:
        """
        Assemble the global Helmholtz matrix [S] = [K] - k²[M] of the domain triangles.
        """
        context = context or self.context
        return self._accumulate_matrix(
            elements=self.model.domain_elements,
            gl=context.domain_map,
            number_of_dofs=context.number_of_dofs,
            get_local_matrix=lambda element: element.get_helmholtz_matrix(context.wave_number),
        )

    def assemble_boundary(self, context: AssemblyContext | None = None) -> sp.sparse.csr_matrix:
        """
        Assemble the global absorbing matrix [T] of all absorbing curves.

        With the absorption switched off the matrix is assembled with a zero
        factor, so all of its values are zero.
        """
        context = context or self.context
        n = context.number_of_dofs
        T = sp.sparse.csr_matrix((n, n), dtype=np.complex128)
        for name, gl in context.boundary_maps.items():
            T = T + self._accumulate_matrix(
                elements=self.model.absorbing_elements[name],
                gl=gl,
                number_of_dofs=n,
                get_local_matrix=lambda element: element.get_absorbing_matrix(
                    context.wave_number, context.absorption
                ),
            )
        return T.tocsr()

    def assemble_vector(
        self,
        source: Callable[[float, float, float], complex],
        context: AssemblyContext | None = None,
    ) -> npt.NDArray[np.complex128]:
        """
        Assemble the global load vector {F} of the domain triangles.

        Args:
            source: Scalar source function f(x, y, z).
            context: Assembly context, the builder's own when None.

        Returns:
            Load vector over the active DOFs.
        """
        context = context or self.context
        F = np.zeros((context.number_of_dofs,), dtype=np.complex128)
        gl = context.domain_map

        for k, element in enumerate(self.model.domain_elements):
            dofs = gl.dofs(k)
            active = dofs != INACTIVE_INDEX
            if not active.any():
                continue
            # np.add.at: two slots may share a DOF once wrapped
            np.add.at(F, dofs[active], element.get_load_vector(source)[active])

        return F

    def build(self, source: Callable[[float, float, float], complex]) -> GlobalSystem:
        """
        Assemble S, T and F of the model.

        Args:
            source: Scalar source function f(x, y, z).

        Returns:
            The global system.
        """
        S = self.assemble_matrix()
        T = self.assemble_boundary()
        F = self.assemble_vector(source)
        logger.info(
            f"Assembled global system: {F.size} DOFs, nnz(S)={S.nnz}, nnz(T)={T.nnz}, "
            f"k={self.context.wave_number:.6g}, absorption={self.context.absorption}"
        )
        return GlobalSystem(S=S, T=T, F=F)

    def reduce(self, system: GlobalSystem) -> ReducedSystem:
        """Reduce a system to the retained DOFs of the model."""
        reduced = system.reduce(self.model.retained_dofs)
        logger.info(f"Reduced system: {system.number_of_dofs} -> {reduced.dimension} DOFs")
        return reduced
