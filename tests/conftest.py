"""Shared fixtures: structured rectangle meshes built without gmsh files."""

import numpy as np
import pytest

from seawave.config import SolverConfig
from seawave.fea.pre.mesh import Mesh


def grid_index(i: int, j: int, nx: int) -> int:
    """Vertex index of grid point (i, j) of an ``(nx + 1) x (ny + 1)`` grid."""
    return j * (nx + 1) + i


def union_jack(
    nx: int,
    ny: int,
    left: float = 0.0,
    right: float = 1.0,
    bottom: float = 0.0,
    top: float = 1.0,
    coast_cell: tuple[int, int] | None = None,
) -> Mesh:
    """
    Rectangle split into ``nx x ny`` cells, two triangles per cell with
    alternating diagonals.

    Groups:
        Sea     all triangles.
        Border  the outer boundary segments.
        Coast   the four edges of ``coast_cell`` when given.
    """
    xs = np.linspace(left, right, nx + 1)
    ys = np.linspace(bottom, top, ny + 1)
    vertices = np.array([(x, y, 0.0) for y in ys for x in xs])

    triangles = []
    for j in range(ny):
        for i in range(nx):
            a = grid_index(i, j, nx)
            b = grid_index(i + 1, j, nx)
            c = grid_index(i + 1, j + 1, nx)
            d = grid_index(i, j + 1, nx)
            if (i + j) % 2 == 0:
                triangles += [(a, b, c), (a, c, d)]
            else:
                triangles += [(a, b, d), (b, c, d)]

    border = []
    for i in range(nx):
        border.append((grid_index(i, 0, nx), grid_index(i + 1, 0, nx)))
        border.append((grid_index(i + 1, ny, nx), grid_index(i, ny, nx)))
    for j in range(ny):
        border.append((grid_index(nx, j, nx), grid_index(nx, j + 1, nx)))
        border.append((grid_index(0, j + 1, nx), grid_index(0, j, nx)))

    groups = {"Sea": np.array(triangles), "Border": np.array(border)}

    if coast_cell is not None:
        i, j = coast_cell
        a, b = grid_index(i, j, nx), grid_index(i + 1, j, nx)
        c, d = grid_index(i + 1, j + 1, nx), grid_index(i, j + 1, nx)
        groups["Coast"] = np.array([(a, b), (b, c), (c, d), (d, a)])

    return Mesh.from_arrays(vertices, groups)


@pytest.fixture
def square_mesh():
    """4 x 3 cells on the unit square."""
    return union_jack(4, 3)


@pytest.fixture
def island_mesh():
    """6 x 6 cells on the unit square with a Dirichlet cell in the middle."""
    return union_jack(6, 6, coast_cell=(2, 2))


@pytest.fixture
def periodic_config():
    return SolverConfig(wavelength=2 * np.pi / 3.0, periodic=True, absorbing=False, dirichlet_tags=())
