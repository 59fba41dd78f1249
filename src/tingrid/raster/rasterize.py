"""Scan conversion of planar triangles onto a regular grid."""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from tingrid.config import DerivativeDirection
from tingrid.exceptions import DegenerateTriangleError, GridError, RasterizationError
from tingrid.geometry.grid import OutputGrid
from tingrid.geometry.plane import OUTSIDE, Plane, fit_plane, non_zero_winding
from tingrid.geometry.points import PointStore
from tingrid.raster.uncertainty import UncertaintyModel
from tingrid.utils.logging import get_logger

# Cell writes of one triangle: rows, columns, values
CellWrites = tuple[np.ndarray, np.ndarray, np.ndarray]


class TriangleRasterizer:
    """Rasterizes triangles of a point store into an OutputGrid."""

    def __init__(
        self,
        points: PointStore,
        grid: OutputGrid,
        derivative: Optional[DerivativeDirection] = None,
        uncertainty: Optional[UncertaintyModel] = None,
        slopes: Optional[np.ndarray] = None,
        workers: int = 1,
    ):
        """Initialize the rasterizer.

        Args:
            points: Point store supplying the triangle vertices.
            grid: Grid receiving the values; written in place.
            derivative: Write this partial derivative instead of the value.
            uncertainty: Write the propagated sigma instead of the value.
            slopes: Slope angles (radians) aligned node-for-node with the grid;
                required with ``uncertainty``.
            workers: Threads used to scan-convert batches of triangles. Only
                the numpy work inside each triangle runs outside the GIL, so
                extra threads help when triangles cover many grid nodes.
        """
        self.points = points
        self.grid = grid
        self.derivative = DerivativeDirection(derivative) if derivative is not None else None
        self.uncertainty = uncertainty
        self.slopes = slopes
        self.workers = max(1, int(workers))
        self.logger = get_logger(__name__)

        self._check_inputs()

    def _check_inputs(self) -> None:
        if self.needs_plane and not self.points.has_elevation:
            raise RasterizationError("Gridding values or derivatives requires z on input")

        if self.uncertainty is not None and self.derivative is None:
            if not self.points.has_uncertainty:
                raise RasterizationError("Uncertainty propagation requires (h, v) on input")
            if self.slopes is None:
                raise RasterizationError("Uncertainty propagation requires a slope grid")
            if self.slopes.shape != self.grid.shape:
                raise GridError(
                    f"Slope grid is {self.slopes.shape[1]}x{self.slopes.shape[0]}, "
                    f"output grid is {self.grid.n_columns}x{self.grid.n_rows}"
                )

    @property
    def needs_plane(self) -> bool:
        """Whether written values depend on the triangle plane."""
        return self.derivative is not None or self.uncertainty is None

    def covering_window(self, vx: np.ndarray, vy: np.ndarray) -> Optional[tuple[int, int, int, int]]:
        """Grid index window covering a triangle, clamped to the grid.

        Returns:
            (col_min, col_max, row_min, row_max), or None when the triangle's
            bounding box lies entirely outside the grid.
        """
        grid = self.grid
        col_min = grid.x_to_col(min(vx))
        col_max = grid.x_to_col(max(vx))
        # Rows count from the north
        row_min = grid.y_to_row(max(vy))
        row_max = grid.y_to_row(min(vy))

        if col_max < 0 or col_min >= grid.n_columns:
            return None
        if row_max < 0 or row_min >= grid.n_rows:
            return None

        return (
            max(col_min, 0),
            min(col_max, grid.n_columns - 1),
            max(row_min, 0),
            min(row_max, grid.n_rows - 1),
        )

    def scan_triangle(self, triangle) -> Optional[CellWrites]:
        """Compute the cell writes of a single triangle.

        Returns:
            (rows, cols, values) of the covered cells, or None if no cell is covered.
        """
        index = np.asarray(triangle, dtype=np.int64)
        vx = self.points.x[index]
        vy = self.points.y[index]

        plane: Optional[Plane] = None
        if self.needs_plane:
            try:
                plane = fit_plane(vx, vy, self.points.z[index])
            except DegenerateTriangleError as e:
                self.logger.warning(f"Skipping triangle {index.tolist()}: {e}")
                return None

        window = self.covering_window(vx, vy)
        if window is None:
            return None
        col_min, col_max, row_min, row_max = window

        rows = np.arange(row_min, row_max + 1)
        cols = np.arange(col_min, col_max + 1)
        xx, yy = np.meshgrid(self.grid.x_coords[cols], self.grid.y_coords[rows])

        inside = non_zero_winding(xx, yy, vx, vy) != OUTSIDE
        if not inside.any():
            return None

        rr, cc = np.meshgrid(rows, cols, indexing="ij")
        rr, cc = rr[inside], cc[inside]
        xp, yp = xx[inside], yy[inside]

        if self.derivative == DerivativeDirection.X:
            values = np.full(xp.shape, plane.a)
        elif self.derivative == DerivativeDirection.Y:
            values = np.full(xp.shape, plane.b)
        elif self.uncertainty is not None:
            values = self.uncertainty.sigma(
                xp,
                yp,
                self.slopes[rr, cc],
                vx,
                vy,
                self.points.h[index],
                self.points.v[index],
            )
        else:
            values = plane.evaluate(xp, yp)

        return rr, cc, values

    def _scan_batch(self, triangles: np.ndarray) -> list[CellWrites]:
        writes = []
        for triangle in triangles:
            result = self.scan_triangle(triangle)
            if result is not None:
                writes.append(result)
        return writes

    def rasterize(self, triangles: np.ndarray) -> int:
        """Scan-convert all triangles into the grid.

        Cells on an edge shared by two triangles are written by both; the
        later triangle in list order wins.

        Args:
            triangles: ``(n, 3)`` array of point indices.

        Returns:
            Number of triangles that wrote at least one cell.
        """
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        self.logger.info(
            f"Rasterizing {len(triangles)} triangles onto {self.grid.n_columns}x{self.grid.n_rows} grid"
        )

        if self.workers == 1 or len(triangles) <= self.workers:
            batches = [self._scan_batch(triangles)]
        else:
            chunks = np.array_split(triangles, self.workers * 4)
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                # map() yields in submission order, keeping last-write-wins stable
                batches = list(executor.map(self._scan_batch, chunks))

        n_written = 0
        for writes in batches:
            for rows, cols, values in writes:
                self.grid.data[rows, cols] = values
                n_written += 1

        self.logger.info(f"{n_written} triangles covered grid nodes")
        return n_written
