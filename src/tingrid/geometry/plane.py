"""Pure geometry of a single triangle: plane fit and point-in-polygon."""

from dataclasses import dataclass
from typing import Union

import numpy as np

from tingrid.exceptions import DegenerateTriangleError

ArrayLike = Union[float, np.ndarray]

# Result codes of the winding-number test
OUTSIDE = 0
ON_BOUNDARY = 1
INSIDE = 2


@dataclass(frozen=True)
class Plane:
    """Plane z = a*x + b*y + c."""

    a: float
    b: float
    c: float

    def evaluate(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """Evaluate the plane at (x, y)."""
        return self.a * x + self.b * y + self.c


def fit_plane(vx, vy, vz) -> Plane:
    """Fit the plane through three vertices.

    Args:
        vx, vy, vz: Coordinates of vertices j, k, l (first three entries used).

    Returns:
        The plane, anchored so it passes exactly through vertex k.

    Raises:
        DegenerateTriangleError: If the vertices are collinear in (x, y).
    """
    xkj = vx[1] - vx[0]
    ykj = vy[1] - vy[0]
    zkj = vz[1] - vz[0]
    xlj = vx[2] - vx[0]
    ylj = vy[2] - vy[0]
    zlj = vz[2] - vz[0]

    det = xkj * ylj - ykj * xlj
    if det == 0.0:
        raise DegenerateTriangleError(
            f"Collinear vertices ({vx[0]}, {vy[0]}), ({vx[1]}, {vy[1]}), ({vx[2]}, {vy[2]})"
        )

    f = 1.0 / det
    a = -f * (ykj * zlj - zkj * ylj)
    b = -f * (zkj * xlj - xkj * zlj)
    c = -a * vx[1] - b * vy[1] + vz[1]
    return Plane(float(a), float(b), float(c))


def close_loop(vx, vy) -> tuple[np.ndarray, np.ndarray]:
    """Return the vertex loop with the first vertex repeated at the end."""
    vx = np.asarray(vx, dtype=np.float64)
    vy = np.asarray(vy, dtype=np.float64)
    if vx[0] != vx[-1] or vy[0] != vy[-1]:
        vx = np.append(vx, vx[0])
        vy = np.append(vy, vy[0])
    return vx, vy


def non_zero_winding(xp: ArrayLike, yp: ArrayLike, vx, vy) -> Union[int, np.ndarray]:
    """Classify points against a closed polygon using the non-zero winding rule.

    Works on scalars or on arrays of query points (broadcast together).

    Args:
        xp, yp: Query coordinates.
        vx, vy: Polygon vertices; the loop is closed if it is not already.

    Returns:
        INSIDE, ON_BOUNDARY or OUTSIDE for each query point.
    """
    xp = np.asarray(xp, dtype=np.float64)
    yp = np.asarray(yp, dtype=np.float64)
    shape = np.broadcast(xp, yp).shape

    if len(vx) < 2:
        result = np.full(shape, OUTSIDE, dtype=np.int8)
        return result if result.ndim else int(result)

    vx, vy = close_loop(vx, vy)
    winding = np.zeros(shape, dtype=np.int64)
    on_edge = np.zeros(shape, dtype=bool)

    for i in range(len(vx) - 1):
        x0, y0, x1, y1 = vx[i], vy[i], vx[i + 1], vy[i + 1]
        # > 0 when the query point is left of the directed edge
        side = (x1 - x0) * (yp - y0) - (xp - x0) * (y1 - y0)

        on_edge |= (
            (side == 0.0)
            & (xp >= min(x0, x1))
            & (xp <= max(x0, x1))
            & (yp >= min(y0, y1))
            & (yp <= max(y0, y1))
        )
        winding += (y0 <= yp) & (y1 > yp) & (side > 0.0)
        winding -= (y0 > yp) & (y1 <= yp) & (side < 0.0)

    result = np.where(on_edge, ON_BOUNDARY, np.where(winding != 0, INSIDE, OUTSIDE)).astype(np.int8)
    return result if result.ndim else int(result)
