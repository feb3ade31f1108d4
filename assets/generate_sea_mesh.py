"""
Generates the reference sea mesh: a rectangle with a circular island.

Physical groups:
    Sea     2D region carrying the wave field.
    Border  outer rectangle, identified periodically left/right and bottom/top.
    Coast   island shoreline, homogeneous Dirichlet boundary.

Opposite sides of the rectangle are meshed periodically, so every vertex on
the bottom (right) has a partner on the top (left) with identical x (y).

Usage:
    $ python assets/generate_sea_mesh.py
"""
import os

import gmsh

LEFT, RIGHT = 0.0, 1000.0
BOTTOM, TOP = -570.0, 0.0

ISLAND_CENTER = (300.0, -280.0)
ISLAND_RADIUS = 100.0

LC = 10.0

N_X = 101
N_Y = 58


def translation(dx: float, dy: float) -> list[float]:
    """Affine 4x4 transform, row-major, as gmsh expects it."""
    return [
        1, 0, 0, dx,
        0, 1, 0, dy,
        0, 0, 1, 0,
        0, 0, 0, 1,
    ]


def generate(filename: str, lc: float = LC, n_x: int = N_X, n_y: int = N_Y, island: bool = True) -> None:
    gmsh.initialize()
    gmsh.option.set_number("General.Terminal", 0)
    gmsh.model.add("sea")

    gmsh.model.geo.add_point(LEFT, BOTTOM, 0, lc, 1)
    gmsh.model.geo.add_point(RIGHT, BOTTOM, 0, lc, 2)
    gmsh.model.geo.add_point(RIGHT, TOP, 0, lc, 3)
    gmsh.model.geo.add_point(LEFT, TOP, 0, lc, 4)

    bottom = gmsh.model.geo.add_line(1, 2, 1)
    right = gmsh.model.geo.add_line(2, 3, 2)
    top = gmsh.model.geo.add_line(4, 3, 3)
    left = gmsh.model.geo.add_line(1, 4, 4)

    gmsh.model.geo.mesh.set_transfinite_curve(bottom, n_x)
    gmsh.model.geo.mesh.set_transfinite_curve(top, n_x)
    gmsh.model.geo.mesh.set_transfinite_curve(right, n_y)
    gmsh.model.geo.mesh.set_transfinite_curve(left, n_y)

    outer = gmsh.model.geo.add_curve_loop([bottom, right, -top, -left], 1)
    loops = [outer]

    coast: list[int] = []
    if island:
        cx, cy = ISLAND_CENTER
        r = ISLAND_RADIUS
        center = gmsh.model.geo.add_point(cx, cy, 0, lc, 10)
        rim = [
            gmsh.model.geo.add_point(cx + r, cy, 0, lc, 11),
            gmsh.model.geo.add_point(cx, cy + r, 0, lc, 12),
            gmsh.model.geo.add_point(cx - r, cy, 0, lc, 13),
            gmsh.model.geo.add_point(cx, cy - r, 0, lc, 14),
        ]
        for i in range(4):
            coast.append(gmsh.model.geo.add_circle_arc(rim[i], center, rim[(i + 1) % 4], 10 + i))
        loops.append(gmsh.model.geo.add_curve_loop(coast, 2))

    gmsh.model.geo.add_plane_surface(loops, 1)
    gmsh.model.geo.synchronize()

    # top copies bottom, left copies right
    gmsh.model.mesh.set_periodic(1, [top], [bottom], translation(0.0, TOP - BOTTOM))
    gmsh.model.mesh.set_periodic(1, [left], [right], translation(LEFT - RIGHT, 0.0))

    gmsh.model.add_physical_group(1, [bottom, right, top, left], name="Border")
    if coast:
        gmsh.model.add_physical_group(1, coast, name="Coast")
    gmsh.model.add_physical_group(2, [1], name="Sea")

    gmsh.model.mesh.generate(2)

    gmsh.option.set_number("Mesh.MshFileVersion", 2.2)
    gmsh.write(filename)
    gmsh.finalize()


if __name__ == "__main__":
    generate(os.path.join(os.path.dirname(os.path.abspath(__file__)), "sea.msh"))
