"""
Command-Line Entry Point
========================
Loads a mesh, computes the wave field of a Gaussian pulse and optionally saves
and plots it.

Usage:
    $ seawave assets/sea.msh --wavelength 50 --absorbing --output field.h5 --plot
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from seawave.config import (
    DEFAULT_MESH_PATH,
    DEFAULT_SOURCE_AMPLITUDE,
    DEFAULT_SOURCE_CENTER,
    DEFAULT_SOURCE_SIGMA_SQUARED,
    DEFAULT_WAVELENGTH,
    DomainExtents,
    SolverConfig,
)
from seawave.exceptions import MeshLoadError, SeaWaveError
from seawave.logging_config import setup_logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="seawave",
        description="Steady-state 2D Helmholtz wave field on a triangulated sea mesh.",
    )
    ap.add_argument(
        "mesh",
        nargs="?",
        default=DEFAULT_MESH_PATH,
        help="gmsh .msh file (default: assets/sea.msh, written by running assets/generate_sea_mesh.py)",
    )
    ap.add_argument("--wavelength", type=float, default=DEFAULT_WAVELENGTH)
    ap.add_argument(
        "--periodic",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="identify opposite sides of the domain rectangle",
    )
    ap.add_argument("--absorbing", action="store_true", help="add the absorbing boundary term")
    ap.add_argument("--center", type=float, nargs=3, metavar=("X", "Y", "Z"), default=list(DEFAULT_SOURCE_CENTER))
    ap.add_argument("--amplitude", type=float, default=DEFAULT_SOURCE_AMPLITUDE)
    ap.add_argument("--sigma-squared", type=float, default=DEFAULT_SOURCE_SIGMA_SQUARED)
    ap.add_argument(
        "--extents",
        type=float,
        nargs=4,
        metavar=("LEFT", "RIGHT", "BOTTOM", "TOP"),
        default=None,
        help="domain rectangle, the bounding box of the domain by default",
    )
    ap.add_argument("--output", type=str, default=None, help="write the field to this .h5 file")
    ap.add_argument("--plot", action="store_true", help="show the real part of the field")
    ap.add_argument("--log-level", type=str.upper, default="INFO", choices=LOG_LEVELS)
    ap.add_argument("--log-file", type=str, default=None)
    return ap


def run(args: argparse.Namespace) -> None:
    """Execute one computation described by parsed arguments."""
    from seawave.fea.analysis.model import Model
    from seawave.fea.pre.mesh import Mesh
    from seawave.fea.pre.source import GaussianPulse
    from seawave.fea.solvers.solver import Solver

    config = SolverConfig(
        wavelength=args.wavelength,
        periodic=args.periodic,
        absorbing=args.absorbing,
        extents=DomainExtents(*args.extents) if args.extents else None,
    )
    source = GaussianPulse(amplitude=args.amplitude, sigma_squared=args.sigma_squared, center=tuple(args.center))
    logger.info(f"Run: {config.to_dict()}, source={source!r}")

    if args.mesh == DEFAULT_MESH_PATH and not os.path.isfile(args.mesh):
        raise MeshLoadError(
            f"Default mesh {args.mesh} not found. Generate it with assets/generate_sea_mesh.py "
            "or pass a mesh file."
        )
    mesh = Mesh.from_file(args.mesh)
    model = Model(mesh=mesh, config=config)
    solution = Solver(model).solve(source)

    if args.output:
        from seawave.io import save_solution
        save_solution(args.output, mesh, solution, config)

    if args.plot:
        from seawave.fea.post.plot import plot_field
        plot_field(mesh.vertices, mesh.connectivity(config.domain_tag), solution.u_mesh, show=True)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        run(args)
    except SeaWaveError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
