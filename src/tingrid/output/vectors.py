"""Vector file output of mesh edges, triangles and Voronoi edges."""

from pathlib import Path
from typing import Optional

import ezdxf
import geopandas as gpd
import numpy as np
from shapely.geometry import LineString, Polygon

from tingrid.config import VectorFormat
from tingrid.exceptions import OutputError
from tingrid.geometry.points import PointStore
from tingrid.mesh.edges import edge_segments, triangle_rings
from tingrid.utils.logging import get_logger


class VectorWriter:
    """Saves segments and polygons as Shapefile, GeoJSON, GeoPackage or DXF."""

    def __init__(self, epsg_code: Optional[int] = None):
        """Initialize the vector writer.

        Args:
            epsg_code: EPSG code for the output CRS (0 or None for undefined).
        """
        self.crs = f"EPSG:{epsg_code}" if epsg_code else None
        self.logger = get_logger(__name__)

    def edges_frame(self, points: PointStore, edges: np.ndarray, with_z: bool = False) -> gpd.GeoDataFrame:
        """GeoDataFrame with one LineString per unique edge."""
        edges = np.asarray(edges, dtype=np.int64).reshape(-1, 2)
        segments = edge_segments(points, edges, with_z=with_z)
        return gpd.GeoDataFrame(
            {
                "edge_id": np.arange(len(edges)),
                "begin": edges[:, 0],
                "end": edges[:, 1],
                "geometry": [LineString(seg) for seg in segments],
            },
            crs=self.crs,
        )

    def polygons_frame(self, points: PointStore, triangles: np.ndarray, with_z: bool = False) -> gpd.GeoDataFrame:
        """GeoDataFrame with one Polygon per triangle."""
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        rings = triangle_rings(points, triangles, with_z=with_z)
        return gpd.GeoDataFrame(
            {
                "tri_id": np.arange(len(triangles)),
                "v1": triangles[:, 0],
                "v2": triangles[:, 1],
                "v3": triangles[:, 2],
                "geometry": [Polygon(ring) for ring in rings],
            },
            crs=self.crs,
        )

    def voronoi_frame(self, segments: np.ndarray) -> gpd.GeoDataFrame:
        """GeoDataFrame with one LineString per Voronoi edge."""
        return gpd.GeoDataFrame(
            {
                "edge_id": np.arange(len(segments)),
                "geometry": [LineString(seg) for seg in segments],
            },
            crs=self.crs,
        )

    def save(self, gdf: gpd.GeoDataFrame, output_path: Path, output_format: VectorFormat) -> None:
        """Save GeoDataFrame to specified format."""
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            if output_format == VectorFormat.SHAPEFILE:
                gdf.to_file(output_path, driver="ESRI Shapefile")
            elif output_format == VectorFormat.GEOJSON:
                gdf.to_file(output_path, driver="GeoJSON")
            elif output_format == VectorFormat.GEOPACKAGE:
                gdf.to_file(output_path, driver="GPKG")
            elif output_format == VectorFormat.DXF:
                self._save_dxf(gdf, output_path)
            else:
                raise OutputError(f"Unsupported output format: {output_format}")
        except OutputError:
            raise
        except Exception as e:
            raise OutputError(f"Error writing {output_path}: {e}") from e

        self.logger.info(f"Vector output saved to: {output_path}")

    def _save_dxf(self, gdf: gpd.GeoDataFrame, output_path: Path) -> None:
        """Save GeoDataFrame as DXF with one polyline per feature."""
        doc = ezdxf.new("R2010")
        msp = doc.modelspace()

        doc.layers.add("TIN_EDGES", color=7)
        doc.layers.add("TIN_TRIANGLES", color=3)

        for geom in gdf.geometry:
            if geom is None or geom.is_empty:
                continue

            if isinstance(geom, Polygon):
                coords = list(geom.exterior.coords)
                # Remove closing point (the polyline is closed instead)
                if coords[0] == coords[-1]:
                    coords = coords[:-1]
                layer = "TIN_TRIANGLES"
                close = True
            else:
                coords = list(geom.coords)
                layer = "TIN_EDGES"
                close = False

            if geom.has_z:
                msp.add_polyline3d(coords, dxfattribs={"layer": layer}, close=close)
            else:
                msp.add_lwpolyline(coords, dxfattribs={"layer": layer}, close=close)

        doc.saveas(output_path)
