"""Index-aligned point storage."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from tingrid.exceptions import CapacityExceededError, InputExhaustedError, ValidationError

# Triangle indices must fit a signed 32-bit integer
MAX_POINTS = 2**31 - 1


@dataclass(frozen=True)
class Point:
    """A single input point; z, h and v depend on the active input mode."""

    x: float  # Easting
    y: float  # Northing
    z: Optional[float] = None  # Elevation
    h: Optional[float] = None  # Horizontal uncertainty proxy
    v: Optional[float] = None  # Vertical uncertainty proxy


@dataclass(eq=False)
class PointStore:
    """Arena of points held as parallel numpy arrays.

    Points are addressed by their index ``i`` in ``[0, n)``; triangles and
    edges refer to points only through these indices.
    """

    x: np.ndarray
    y: np.ndarray
    z: Optional[np.ndarray] = None
    h: Optional[np.ndarray] = None
    v: Optional[np.ndarray] = None
    name: str = "points"
    _bounds: Optional[tuple[float, float, float, float]] = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.x = np.asarray(self.x, dtype=np.float64)
        self.y = np.asarray(self.y, dtype=np.float64)
        n = self.x.shape[0]

        if self.x.ndim != 1 or self.y.shape != (n,):
            raise ValidationError("x and y must be one-dimensional arrays of equal length")

        if n >= MAX_POINTS:
            raise CapacityExceededError(f"Cannot triangulate more than {MAX_POINTS - 1} points")

        if self.z is not None:
            self.z = self._aligned(self.z, "z", n)

        if (self.h is None) != (self.v is None):
            raise ValidationError("Uncertainty fields h and v must be given together")
        if self.h is not None:
            # Only magnitudes matter for the uncertainty proxies
            self.h = np.abs(self._aligned(self.h, "h", n))
            self.v = np.abs(self._aligned(self.v, "v", n))

        for arr in (self.x, self.y, self.z, self.h, self.v):
            if arr is not None:
                arr.setflags(write=False)

    @staticmethod
    def _aligned(values, label: str, n: int) -> np.ndarray:
        arr = np.asarray(values, dtype=np.float64)
        if arr.shape != (n,):
            raise ValidationError(f"Field {label} has {arr.size} values, expected {n}")
        return arr

    @classmethod
    def from_columns(
        cls,
        data: np.ndarray,
        elevation: bool = False,
        uncertainty: bool = False,
        name: str = "points",
    ) -> "PointStore":
        """Build a store from a table of records.

        Columns are interpreted positionally as ``(x,y)``, ``(x,y,z)``,
        ``(x,y,h,v)`` or ``(x,y,z,h,v)``.

        Raises:
            InputExhaustedError: If the table has no rows.
        """
        data = np.asarray(data, dtype=np.float64)
        if data.size == 0:
            raise InputExhaustedError("No data points given - so no triangulation can take effect")

        needed = (3 if elevation else 2) + (2 if uncertainty else 0)
        if data.ndim != 2 or data.shape[1] < needed:
            raise ValidationError(
                f"Expected at least {needed} columns per record, got shape {data.shape}"
            )

        z = data[:, 2] if elevation else None
        h = v = None
        if uncertainty:
            col = 3 if elevation else 2
            h = data[:, col]
            v = data[:, col + 1]

        return cls(x=data[:, 0], y=data[:, 1], z=z, h=h, v=v, name=name)

    @classmethod
    def from_points(cls, points: Iterable[Point], name: str = "points") -> "PointStore":
        """Build a store from Point records; optional fields must be all-or-none."""
        points = list(points)
        if not points:
            raise InputExhaustedError("No data points given - so no triangulation can take effect")

        def column(attr: str) -> Optional[list[float]]:
            values = [getattr(p, attr) for p in points]
            if all(val is None for val in values):
                return None
            if any(val is None for val in values):
                raise ValidationError(f"Field {attr} is missing on some points")
            return values

        return cls(
            x=[p.x for p in points],
            y=[p.y for p in points],
            z=column("z"),
            h=column("h"),
            v=column("v"),
            name=name,
        )

    def __len__(self) -> int:
        return self.x.shape[0]

    @property
    def num_points(self) -> int:
        """Number of points in the store."""
        return len(self)

    @property
    def has_elevation(self) -> bool:
        return self.z is not None

    @property
    def has_uncertainty(self) -> bool:
        return self.h is not None

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Get the bounding box (min_x, min_y, max_x, max_y)."""
        if len(self) == 0:
            raise InputExhaustedError("Point store is empty")
        if self._bounds is None:
            self._bounds = (
                float(self.x.min()),
                float(self.y.min()),
                float(self.x.max()),
                float(self.y.max()),
            )
        return self._bounds

    @property
    def elevation_range(self) -> tuple[float, float]:
        """Get the elevation range (min_z, max_z)."""
        if self.z is None:
            raise ValidationError("Point store has no elevations")
        return (float(self.z.min()), float(self.z.max()))

    def point(self, index: int) -> Point:
        """Return the point at ``index``."""

        def pick(arr: Optional[np.ndarray]) -> Optional[float]:
            return None if arr is None else float(arr[index])

        return Point(
            x=float(self.x[index]),
            y=float(self.y[index]),
            z=pick(self.z),
            h=pick(self.h),
            v=pick(self.v),
        )

    def check_triangles(self, triangles: np.ndarray) -> np.ndarray:
        """Validate an index-triple array against this store.

        Returns:
            The triangles as an ``(n, 3)`` int64 array.

        Raises:
            ValidationError: If an index is out of range or repeated in a triangle.
        """
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        if triangles.size == 0:
            return triangles

        if triangles.min() < 0 or triangles.max() >= len(self):
            raise ValidationError(
                f"Triangle indices must lie in [0, {len(self)}), got range "
                f"[{triangles.min()}, {triangles.max()}]"
            )

        repeated = (
            (triangles[:, 0] == triangles[:, 1])
            | (triangles[:, 1] == triangles[:, 2])
            | (triangles[:, 0] == triangles[:, 2])
        )
        if repeated.any():
            bad = int(np.flatnonzero(repeated)[0])
            raise ValidationError(f"Triangle {bad} repeats a vertex: {triangles[bad].tolist()}")

        return triangles
