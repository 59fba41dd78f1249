"""Triangulation engines producing index triples or Voronoi edges."""

from abc import ABC, abstractmethod

import numpy as np
import matplotlib.tri as mtri
from shapely.geometry import LineString, box

from tingrid.config import Region
from tingrid.exceptions import TriangulationError
from tingrid.utils.logging import get_logger


class TriangulationEngine(ABC):
    """Source of a triangulation over a point set."""

    @abstractmethod
    def triangulate(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Return an ``(n, 3)`` array of point-index triples."""

    def voronoi(self, x: np.ndarray, y: np.ndarray, region: Region) -> np.ndarray:
        """Return an ``(n, 2, 2)`` array of Voronoi edge end points."""
        raise TriangulationError(f"{type(self).__name__} cannot compute Voronoi edges")


class PrecomputedTriangulation(TriangulationEngine):
    """Engine that hands back a triangulation computed elsewhere."""

    def __init__(self, triangles: np.ndarray, source: str = "precomputed"):
        self.triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        self.source = source
        self.logger = get_logger(__name__)

    def triangulate(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        self.logger.info(f"Using {len(self.triangles)} triangles from {self.source}")
        return self.triangles


class DelaunayEngine(TriangulationEngine):
    """Delaunay triangulation and its Voronoi dual via matplotlib (qhull)."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def _triangulation(self, x: np.ndarray, y: np.ndarray) -> mtri.Triangulation:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if len(x) < 3:
            raise TriangulationError(
                f"At least 3 points are needed for a triangulation, got {len(x)}"
            )
        try:
            return mtri.Triangulation(x, y)
        except (ValueError, RuntimeError) as e:
            raise TriangulationError(f"Delaunay triangulation failed: {e}") from e

    def triangulate(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Compute the Delaunay triangles of the points.

        Raises:
            TriangulationError: If fewer than 3 points are given or all are collinear.
        """
        self.logger.debug("Do Delaunay optimal triangulation on given coordinates")
        triangulation = self._triangulation(x, y)
        triangles = triangulation.triangles.astype(np.int64)
        self.logger.info(f"{len(triangles)} Delaunay triangles found")
        return triangles

    def voronoi(self, x: np.ndarray, y: np.ndarray, region: Region) -> np.ndarray:
        """Compute Voronoi edges clipped to the region.

        Each Voronoi vertex is the circumcenter of a Delaunay triangle. Two
        triangles sharing an edge give a finite Voronoi edge; a triangle edge on
        the convex hull gives a ray leaving the circumcenter away from the
        opposite vertex. All edges are clipped to the region rectangle and
        edges falling outside it are dropped.
        """
        triangulation = self._triangulation(x, y)
        x = triangulation.x
        y = triangulation.y
        triangles = triangulation.triangles
        neighbors = triangulation.neighbors
        centers = circumcenters(x, y, triangles)

        frame = box(region.west, region.south, region.east, region.north)
        min_x = min(region.west, float(x.min()))
        max_x = max(region.east, float(x.max()))
        min_y = min(region.south, float(y.min()))
        max_y = max(region.north, float(y.max()))
        reach = 2.0 * np.hypot(max_x - min_x, max_y - min_y)

        segments = []
        for t in range(len(triangles)):
            start = centers[t]
            if not np.all(np.isfinite(start)):
                continue
            for e in range(3):
                other = neighbors[t, e]
                if other == -1:
                    p = triangles[t, e]
                    q = triangles[t, (e + 1) % 3]
                    r = triangles[t, (e + 2) % 3]
                    normal = np.array([y[q] - y[p], x[p] - x[q]])
                    # Point away from the opposite vertex
                    if normal @ np.array([x[r] - x[p], y[r] - y[p]]) > 0:
                        normal = -normal
                    end = start + normal / np.hypot(*normal) * reach
                elif other > t:
                    end = centers[other]
                    if not np.all(np.isfinite(end)):
                        continue
                else:
                    continue

                clipped = LineString([start, end]).intersection(frame)
                if clipped.is_empty or clipped.geom_type != "LineString":
                    continue
                coords = np.asarray(clipped.coords)
                segments.append(coords[[0, -1]])

        self.logger.info(f"{len(segments)} Voronoi edges found")
        if not segments:
            return np.empty((0, 2, 2), dtype=np.float64)
        return np.stack(segments)


def circumcenters(x: np.ndarray, y: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Circumcenter of each triangle as an ``(n, 2)`` array (NaN when degenerate)."""
    ax, ay = x[triangles[:, 0]], y[triangles[:, 0]]
    bx, by = x[triangles[:, 1]], y[triangles[:, 1]]
    cx, cy = x[triangles[:, 2]], y[triangles[:, 2]]

    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    a2 = ax**2 + ay**2
    b2 = bx**2 + by**2
    c2 = cx**2 + cy**2
    with np.errstate(divide="ignore", invalid="ignore"):
        ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
        uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return np.column_stack([ux, uy])
