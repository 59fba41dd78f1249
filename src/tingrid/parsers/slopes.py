"""Slope grid input for the uncertainty model."""

from pathlib import Path

import numpy as np
import rasterio
from rasterio.errors import RasterioIOError

from tingrid.exceptions import GridError
from tingrid.geometry.grid import OutputGrid
from tingrid.utils.logging import get_logger

logger = get_logger(__name__)


def read_slope_grid(path: Path, grid: OutputGrid) -> np.ndarray:
    """Read slope angles (radians) aligned node-for-node with ``grid``.

    Nodata nodes become NaN so the sigma written there is NaN as well.

    Raises:
        GridError: If the file cannot be read or its shape differs from the grid.
    """
    path = Path(path)
    logger.info(f"Reading slope grid: {path}")

    try:
        with rasterio.open(path) as src:
            slopes = src.read(1, masked=True)
    except RasterioIOError as e:
        raise GridError(f"Error reading slope grid {path}: {e}") from e

    slopes = slopes.astype(np.float64).filled(np.nan)

    if slopes.shape != grid.shape:
        raise GridError(
            f"Slope grid {path} is {slopes.shape[1]}x{slopes.shape[0]}, "
            f"expected {grid.n_columns}x{grid.n_rows}"
        )
    return slopes
