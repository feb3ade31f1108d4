"""
Field Reconstruction
====================
Expansion of the solved vector back to the full DOF space and to the mesh.

``u`` (retained DOFs) -> ``u_full`` (all active DOFs, alias sources mirrored
from their targets) -> ``u_mesh`` (all mesh vertices, zero off the active
set).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

    from seawave.fea.analysis.local_to_global import ActiveVertexSet
    from seawave.fea.analysis.model import Model
    from seawave.fea.analysis.periodic import PeriodicAliasTable


@dataclass(frozen=True)
class Solution:
    """
    Wave field of one run.

    Attributes:
        u: Values of the retained DOFs.
        u_full: Values of all active DOFs.
        u_mesh: Values of all mesh vertices.
    """
    u: npt.NDArray[np.complex128]
    u_full: npt.NDArray[np.complex128]
    u_mesh: npt.NDArray[np.complex128]

    @property
    def real(self) -> npt.NDArray[np.float64]:
        return self.u_mesh.real

    @property
    def magnitude(self) -> npt.NDArray[np.float64]:
        return np.abs(self.u_mesh)


class FieldReconstructor:
    """
    Expands a reduced solution vector.
    """
    def __init__(
        self,
        active: ActiveVertexSet,
        aliases: PeriodicAliasTable,
        retained: npt.ArrayLike,
    ) -> None:
        """
        Args:
            active: Active vertex set of the run.
            aliases: Periodic alias table of the run.
            retained: Ascending DOFs of the reduced system.
        """
        self.active = active
        self.aliases = aliases
        self.retained = np.asarray(retained, dtype=np.int64)

    @classmethod
    def from_model(cls, model: Model) -> FieldReconstructor:
        return cls(active=model.active, aliases=model.resolution.aliases, retained=model.retained_dofs)

    def expand_to_active(self, u: npt.ArrayLike) -> npt.NDArray[np.complex128]:
        """
        Copy the retained values and mirror every alias source from its target.

        Raises:
            ValueError: If ``u`` does not match the retained DOFs.
        """
        u = np.asarray(u, dtype=np.complex128)
        if u.shape != self.retained.shape:
            raise ValueError(f"Expected {self.retained.size} retained values, got shape {u.shape}.")

        u_full = np.zeros((len(self.active),), dtype=np.complex128)
        u_full[self.retained] = u
        # targets are never sources after resolve, so one pass suffices
        for source in self.aliases:
            u_full[source] = u_full[self.aliases.resolve(source)]
        return u_full

    def expand_to_mesh(self, u_full: npt.ArrayLike) -> npt.NDArray[np.complex128]:
        """Scatter the active values to the mesh vertices, zero elsewhere."""
        u_full = np.asarray(u_full, dtype=np.complex128)
        if u_full.shape != (len(self.active),):
            raise ValueError(f"Expected {len(self.active)} active values, got shape {u_full.shape}.")

        u_mesh = np.zeros((self.active.number_of_mesh_vertices,), dtype=np.complex128)
        u_mesh[self.active.vertices] = u_full
        return u_mesh

    def reconstruct(self, u: npt.ArrayLike) -> Solution:
        u = np.asarray(u, dtype=np.complex128)
        u_full = self.expand_to_active(u)
        return Solution(u=u, u_full=u_full, u_mesh=self.expand_to_mesh(u_full))
