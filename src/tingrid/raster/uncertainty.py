"""Propagated vertical uncertainty of an interpolated surface."""

from dataclasses import dataclass
from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

# Distances below this are treated as coinciding with a vertex
EPS_D = 2.220446e-16

DEFAULT_ALPHA = 2.0
DEFAULT_S_H = 1.0


@dataclass(frozen=True)
class UncertaintyModel:
    """Inverse-distance blend of per-vertex uncertainty terms.

    Each vertex i contributes

        uv_i = v_i**2 * (1 + ((dist_i + s_h*h_i) / delta_min)**alpha) + (tan(slope) * h_i)**2

    where ``v`` and ``h`` are the vertical and horizontal uncertainty proxies,
    ``dist_i`` the distance from the query point to the vertex and ``slope``
    the terrain slope angle (radians) at the query point. The query sigma is
    the square root of the inverse-distance-weighted mean of the three terms,
    or of the term of the first vertex (in j, k, l order) the point coincides
    with.

    Attributes:
        delta_min: Distance scale, the grid x-spacing.
        alpha: Shape exponent.
        s_h: Scale applied to the horizontal proxy.
    """

    delta_min: float
    alpha: float = DEFAULT_ALPHA
    s_h: float = DEFAULT_S_H

    def __post_init__(self) -> None:
        if not self.delta_min > 0:
            raise ValueError(f"delta_min must be positive, got: {self.delta_min}")

    def vertex_variance(self, dist: ArrayLike, h: float, v: float, slope: ArrayLike) -> ArrayLike:
        """Uncertainty term ``uv_i`` of one vertex."""
        return v**2 * (1.0 + ((dist + self.s_h * h) / self.delta_min) ** self.alpha) + (
            np.tan(slope) * h
        ) ** 2

    def sigma(self, xp: ArrayLike, yp: ArrayLike, slope: ArrayLike, vx, vy, h, v) -> ArrayLike:
        """Propagated standard deviation at the query point(s).

        Args:
            xp, yp: Query coordinates (scalars or arrays).
            slope: Slope angle at the query point(s), radians.
            vx, vy: Vertex coordinates in j, k, l order.
            h, v: Vertex uncertainty proxies in j, k, l order.

        Returns:
            sigma, a float for scalar input or an array shaped like the input.
        """
        xp, yp, slope = np.broadcast_arrays(
            np.asarray(xp, dtype=np.float64),
            np.asarray(yp, dtype=np.float64),
            np.asarray(slope, dtype=np.float64),
        )

        dists = [np.hypot(xp - vx[i], yp - vy[i]) for i in range(3)]
        terms = [self.vertex_variance(dists[i], h[i], v[i], slope) for i in range(3)]

        with np.errstate(divide="ignore", invalid="ignore"):
            weighted = sum(terms[i] / dists[i] for i in range(3))
            weights = sum(1.0 / dists[i] for i in range(3))
            sigma = np.sqrt(weighted / weights)

        # Reverse order so vertex j wins when several coincide
        for i in (2, 1, 0):
            sigma = np.where(np.abs(dists[i]) < EPS_D, np.sqrt(terms[i]), sigma)

        return sigma if sigma.ndim else float(sigma)
