from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.tri as mtri

if TYPE_CHECKING:
    import numpy.typing as npt
    from matplotlib.axes import Axes

logger = logging.getLogger(__name__)

PARTS = {
    "real": (np.real, "Re u"),
    "imag": (np.imag, "Im u"),
    "abs": (np.abs, "|u|"),
}


def plot_field(
    vertices: npt.ArrayLike,
    triangles: npt.ArrayLike,
    u_mesh: npt.ArrayLike,
    part: Literal["real", "imag", "abs"] = "real",
    ax: Axes | None = None,
    cmap: str = "viridis",
    show: bool = False,
) -> Axes:
    """
    Draw a per-vertex complex field on the triangles of the domain.

    Args:
        vertices: (N, 3) or (N, 2) vertex coordinates.
        triangles: (M, 3) vertex indices of the domain triangles.
        u_mesh: (N,) complex value per vertex.
        part: Which real quantity of the field to draw.
        ax: Axes to draw into, a new figure when None.
        cmap: Matplotlib colormap name.
        show: Call ``plt.show()`` after drawing.

    Returns:
        The axes drawn into.
    """
    if part not in PARTS:
        raise ValueError(f"Unknown field part '{part}', expected one of {list(PARTS)}.")
    func, label = PARTS[part]

    vertices = np.asarray(vertices, dtype=np.float64)
    triangulation = mtri.Triangulation(vertices[:, 0], vertices[:, 1], np.asarray(triangles, dtype=np.int64))
    values = func(np.asarray(u_mesh, dtype=np.complex128))

    if ax is None:
        _, ax = plt.subplots()
    ax.set_aspect("equal")

    collection = ax.tripcolor(triangulation, values, shading="gouraud", cmap=cmap)
    ax.figure.colorbar(collection, ax=ax, label=label)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    logger.debug(f"Plotted {label} on {triangulation.triangles.shape[0]} triangles")

    if show:
        plt.show()
    return ax
