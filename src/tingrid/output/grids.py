"""GeoTIFF output of rasterized grids."""

from pathlib import Path
from typing import Optional

import numpy as np
import rasterio
from rasterio.errors import RasterioError

from tingrid.exceptions import GridError
from tingrid.geometry.grid import OutputGrid
from tingrid.utils.logging import get_logger


class GridWriter:
    """Writes an OutputGrid as a single-band GeoTIFF."""

    def __init__(self, epsg_code: Optional[int] = None):
        """Initialize the writer.

        Args:
            epsg_code: EPSG code for the coordinate reference system.
        """
        self.epsg_code = epsg_code
        self.logger = get_logger(__name__)

    def write(self, grid: OutputGrid, output_path: Path, tags: Optional[dict[str, str]] = None) -> None:
        """Write the grid.

        Args:
            grid: Grid to write; uncovered nodes keep the fill value, which is
                also recorded as the nodata value.
            output_path: Path for the output GeoTIFF.
            tags: Extra metadata tags (e.g. the command line).
        """
        # Set up CRS
        if self.epsg_code and self.epsg_code > 0:
            crs = f"EPSG:{self.epsg_code}"
        else:
            crs = None

        self.logger.info(f"Writing grid to: {output_path}")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with rasterio.open(
                output_path,
                "w",
                driver="GTiff",
                height=grid.n_rows,
                width=grid.n_columns,
                count=1,
                dtype=grid.data.dtype,
                crs=crs,
                transform=grid.transform,
                nodata=grid.fill_value,
            ) as dst:
                dst.write(grid.data, 1)
                dst.update_tags(registration=grid.registration.value, **(tags or {}))
        except RasterioError as e:
            raise GridError(f"Error writing grid {output_path}: {e}") from e

        covered = int(np.count_nonzero(grid.covered()))
        self.logger.info(f"Grid created: {output_path} ({covered} of {grid.data.size} nodes set)")
