"""Unique undirected edges of a triangle mesh."""

import numpy as np

from tingrid.geometry.points import PointStore
from tingrid.utils.logging import get_logger

logger = get_logger(__name__)


def directed_edges(triangles: np.ndarray) -> np.ndarray:
    """Decompose triangles (j, k, l) into edges (j, k), (k, l), (l, j)."""
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    return np.concatenate(
        [triangles[:, [0, 1]], triangles[:, [1, 2]], triangles[:, [2, 0]]]
    )


def extract_edges(triangles: np.ndarray) -> np.ndarray:
    """Return the sorted set of unique undirected mesh edges.

    Every edge is canonicalized to ``begin <= end``, the list is sorted by
    (begin, end) and adjacent repeats are dropped, so an edge shared by two
    triangles appears once.

    Args:
        triangles: ``(n, 3)`` array of point indices.

    Returns:
        ``(m, 2)`` int64 array of strictly increasing (begin, end) pairs.
    """
    edges = directed_edges(triangles)
    if len(edges) == 0:
        return np.empty((0, 2), dtype=np.int64)

    edges.sort(axis=1)
    edges = edges[np.lexsort((edges[:, 1], edges[:, 0]))]

    keep = np.ones(len(edges), dtype=bool)
    keep[1:] = np.any(edges[1:] != edges[:-1], axis=1)
    unique = edges[keep]

    logger.info(f"{len(unique)} unique triangle edges")
    return unique


def edge_segments(points: PointStore, edges: np.ndarray, with_z: bool = False) -> np.ndarray:
    """Coordinates of each edge as a two-vertex segment.

    Returns:
        ``(m, 2, 2)`` array of (x, y), or ``(m, 2, 3)`` with z when requested.
    """
    edges = np.asarray(edges, dtype=np.int64).reshape(-1, 2)
    columns = [points.x, points.y]
    if with_z:
        columns.append(points.z)
    return np.stack([col[edges] for col in columns], axis=-1)


def triangle_rings(points: PointStore, triangles: np.ndarray, with_z: bool = False) -> np.ndarray:
    """Coordinates of each triangle's three vertices.

    Returns:
        ``(n, 3, 2)`` array of (x, y), or ``(n, 3, 3)`` with z when requested.
    """
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    columns = [points.x, points.y]
    if with_z:
        columns.append(points.z)
    return np.stack([col[triangles] for col in columns], axis=-1)
