"""Regular output grid and its coordinate/index mapping."""

import math
from typing import Optional

import numpy as np
from rasterio.transform import Affine, from_origin

from tingrid.config import Region, Registration
from tingrid.exceptions import GridError
from tingrid.utils.logging import get_logger

logger = get_logger(__name__)


class OutputGrid:
    """A rectangular raster covering a region at fixed spacing.

    Row 0 is the northern edge. With gridline registration values sit on
    nodes that include the region boundary; with pixel registration they sit
    at cell centers half a spacing inside it.
    """

    def __init__(
        self,
        region: Region,
        spacing: tuple[float, float],
        registration: Registration = Registration.GRIDLINE,
        fill_value: float = math.nan,
        dtype=np.float32,
    ):
        """Allocate the grid and set every node to the fill value.

        Args:
            region: Grid extent.
            spacing: Node spacing (dx, dy).
            registration: Node (gridline) or cell-center (pixel) registration.
            fill_value: Value for nodes no triangle covers.
            dtype: Storage type of the node values.
        """
        self.region = region
        self.dx, self.dy = float(spacing[0]), float(spacing[1])
        self.registration = Registration(registration)
        self.fill_value = float(fill_value)

        if self.dx <= 0 or self.dy <= 0:
            raise GridError(f"Grid spacing must be positive, got: {self.dx}/{self.dy}")

        x_steps = int(round(region.width / self.dx))
        y_steps = int(round(region.height / self.dy))
        if x_steps <= 0 or y_steps <= 0:
            raise GridError(
                f"Grid spacing {self.dx}/{self.dy} is too large for region "
                f"{region.west}/{region.east}/{region.south}/{region.north}"
            )

        # East and north must lie a whole number of spacings from west and south
        east, north = region.east, region.north
        snapped_east = region.west + x_steps * self.dx
        snapped_north = region.south + y_steps * self.dy
        if not math.isclose(snapped_east, east, rel_tol=0.0, abs_tol=1e-4 * self.dx):
            logger.warning(f"Region east adjusted from {east} to {snapped_east} to fit spacing {self.dx}")
            east = snapped_east
        if not math.isclose(snapped_north, north, rel_tol=0.0, abs_tol=1e-4 * self.dy):
            logger.warning(f"Region north adjusted from {north} to {snapped_north} to fit spacing {self.dy}")
            north = snapped_north
        if (east, north) != (region.east, region.north):
            self.region = Region(region.west, east, region.south, north)

        one = 0 if self.registration == Registration.PIXEL else 1
        self.n_columns = x_steps + one
        self.n_rows = y_steps + one

        self.data = np.full((self.n_rows, self.n_columns), self.fill_value, dtype=dtype)
        self._x_coords: Optional[np.ndarray] = None
        self._y_coords: Optional[np.ndarray] = None

    @property
    def xy_off(self) -> float:
        """Offset of nodes from the region edge, in units of spacing."""
        return 0.5 if self.registration == Registration.PIXEL else 0.0

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n_rows, self.n_columns)

    def x_to_col(self, x: float) -> int:
        """Column of the node nearest to x (may fall outside the grid)."""
        return int(np.rint((x - self.region.west) / self.dx - self.xy_off))

    def y_to_row(self, y: float) -> int:
        """Row of the node nearest to y (may fall outside the grid)."""
        return self.n_rows - 1 - int(np.rint((y - self.region.south) / self.dy - self.xy_off))

    def col_to_x(self, col: int) -> float:
        if col == self.n_columns - 1:
            return self.region.east - self.xy_off * self.dx
        return self.region.west + (col + self.xy_off) * self.dx

    def row_to_y(self, row: int) -> float:
        if row == self.n_rows - 1:
            return self.region.south + self.xy_off * self.dy
        return self.region.north - (row + self.xy_off) * self.dy

    @property
    def x_coords(self) -> np.ndarray:
        """x coordinate of every column."""
        if self._x_coords is None:
            xs = self.region.west + (np.arange(self.n_columns) + self.xy_off) * self.dx
            xs[-1] = self.col_to_x(self.n_columns - 1)
            self._x_coords = xs
        return self._x_coords

    @property
    def y_coords(self) -> np.ndarray:
        """y coordinate of every row (north to south)."""
        if self._y_coords is None:
            ys = self.region.north - (np.arange(self.n_rows) + self.xy_off) * self.dy
            ys[-1] = self.row_to_y(self.n_rows - 1)
            self._y_coords = ys
        return self._y_coords

    @property
    def transform(self) -> Affine:
        """Affine transform of the raster cells, pixel-is-area."""
        half_x = 0.0 if self.registration == Registration.PIXEL else self.dx / 2
        half_y = 0.0 if self.registration == Registration.PIXEL else self.dy / 2
        return from_origin(
            self.region.west - half_x, self.region.north + half_y, self.dx, self.dy
        )

    def cell_value(self, x: float, y: float) -> float:
        """Value of the node nearest to (x, y)."""
        col, row = self.x_to_col(x), self.y_to_row(y)
        if not (0 <= col < self.n_columns and 0 <= row < self.n_rows):
            raise GridError(f"Point ({x}, {y}) lies outside the grid")
        return float(self.data[row, col])

    def covered(self) -> np.ndarray:
        """Boolean mask of nodes that differ from the fill value."""
        if math.isnan(self.fill_value):
            return ~np.isnan(self.data)
        return self.data != self.data.dtype.type(self.fill_value)

    def __repr__(self) -> str:
        r = self.region
        return (
            f"OutputGrid({r.west}/{r.east}/{r.south}/{r.north}, "
            f"{self.dx}/{self.dy}, {self.registration.value}, {self.n_columns}x{self.n_rows})"
        )
