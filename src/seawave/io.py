"""
Input/Output (HDF5)
Saves and loads computed wave fields to .h5 files.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from typing import TYPE_CHECKING, Any

import h5py
import numpy as np

from seawave.fea.post.reconstruct import Solution

if TYPE_CHECKING:
    import numpy.typing as npt

    from seawave.config import SolverConfig
    from seawave.fea.pre.mesh import Mesh

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("seawave")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


@dataclass(frozen=True)
class StoredField:
    """Content of a saved result file."""
    vertices: npt.NDArray[np.float64]
    triangles: npt.NDArray[np.int64]
    solution: Solution
    config: dict[str, Any]
    version: str


def save_solution(
    filepath: str,
    mesh: Mesh,
    solution: Solution,
    config: SolverConfig,
) -> None:
    """
    Write the mesh geometry, the field and the run configuration to an HDF5 file.

    Args:
        filepath: Target ``.h5`` file, overwritten if it exists.
        mesh: Mesh the field lives on.
        solution: Computed field.
        config: Configuration of the run.
    """
    logger.info(f"Saving solution to: {filepath}")
    with h5py.File(filepath, "w") as f:
        f.attrs["version"] = APP_VERSION
        f.attrs["config"] = json.dumps(config.to_dict())

        grp_geo = f.create_group("geometry")
        grp_geo.create_dataset("vertices", data=mesh.vertices, compression="gzip")
        grp_geo.create_dataset("triangles", data=mesh.connectivity(config.domain_tag), compression="gzip")
        grp_geo.attrs["domain_tag"] = config.domain_tag

        grp_res = f.create_group("results")
        grp_res.create_dataset("u", data=solution.u)
        grp_res.create_dataset("u_full", data=solution.u_full)
        grp_res.create_dataset("u_mesh", data=solution.u_mesh, compression="gzip")

    logger.debug(f"Saved {solution.u_mesh.size} vertex values ({os.path.getsize(filepath)} bytes)")


def load_solution(filepath: str) -> StoredField:
    """
    Read a file written by ``save_solution``.

    Raises:
        ValueError: If the file does not exist or lacks a required dataset.
    """
    logger.info(f"Loading solution from: {filepath}")
    if not os.path.exists(filepath):
        raise ValueError(f"File not found: {filepath}")

    with h5py.File(filepath, "r") as f:
        try:
            grp_geo = f["geometry"]
            grp_res = f["results"]
            vertices = np.asarray(grp_geo["vertices"][()], dtype=np.float64)
            triangles = np.asarray(grp_geo["triangles"][()], dtype=np.int64)
            solution = Solution(
                u=np.asarray(grp_res["u"][()], dtype=np.complex128),
                u_full=np.asarray(grp_res["u_full"][()], dtype=np.complex128),
                u_mesh=np.asarray(grp_res["u_mesh"][()], dtype=np.complex128),
            )
        except KeyError as e:
            raise ValueError(f"'{filepath}' is not a wave field file: {e}") from e

        config = json.loads(f.attrs.get("config", "{}"))
        file_version = str(f.attrs.get("version", "unknown"))

    return StoredField(
        vertices=vertices,
        triangles=triangles,
        solution=solution,
        config=config,
        version=file_version,
    )
