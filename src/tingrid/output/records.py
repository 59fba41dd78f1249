"""ASCII record output: index tables and multi-segment files."""

from typing import TextIO

import numpy as np

from tingrid.geometry.points import PointStore
from tingrid.mesh.edges import edge_segments, triangle_rings
from tingrid.utils.logging import get_logger


def format_value(value: float) -> str:
    """Format a number the way the tables are read back (%.12g)."""
    return f"{value:.12g}"


class RecordWriter:
    """Writes tab-separated records with ``>`` segment headers."""

    def __init__(self, stream: TextIO):
        """Initialize the writer.

        Args:
            stream: Open text stream receiving the records.
        """
        self.stream = stream
        self.logger = get_logger(__name__)

    def _header(self, label: str) -> None:
        self.stream.write(f"> {label}\n")

    def _record(self, values) -> None:
        self.stream.write("\t".join(format_value(v) for v in values) + "\n")

    def write_index_table(self, triangles: np.ndarray) -> None:
        """One record per triangle with its three vertex indices."""
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        for triangle in triangles:
            self._record(triangle)
        self.logger.debug(f"Wrote {len(triangles)} index records")

    def write_edges(self, points: PointStore, edges: np.ndarray, with_z: bool = False) -> None:
        """One two-point segment per unique edge, headed ``Edge begin-end``."""
        segments = edge_segments(points, edges, with_z=with_z)
        for (begin, end), segment in zip(edges, segments):
            self._header(f"Edge {begin}-{end}")
            for vertex in segment:
                self._record(vertex)
        self.logger.debug(f"Wrote {len(segments)} edge segments")

    def write_polygons(self, points: PointStore, triangles: np.ndarray, with_z: bool = False) -> None:
        """One three-vertex segment per triangle, headed ``Polygon j-k-l -Z<i>``."""
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        rings = triangle_rings(points, triangles, with_z=with_z)
        for i, (triangle, ring) in enumerate(zip(triangles, rings)):
            j, k, l = triangle
            self._header(f"Polygon {j}-{k}-{l} -Z{i}")
            for vertex in ring:
                self._record(vertex)
        self.logger.debug(f"Wrote {len(rings)} triangle polygons")

    def write_voronoi_edges(self, segments: np.ndarray) -> None:
        """One two-point segment per Voronoi edge, headed ``Edge <i>``."""
        for i, segment in enumerate(segments):
            self._header(f"Edge {i}")
            for vertex in segment:
                self._record(vertex)
        self.logger.debug(f"Wrote {len(segments)} Voronoi edges")
