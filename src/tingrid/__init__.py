"""Delaunay triangulation, planar gridding and edge extraction of irregular points."""

__version__ = "0.1.0"

from tingrid.config import (
    DerivativeDirection,
    RecordMode,
    Region,
    Registration,
    TriangulateConfig,
)
from tingrid.geometry.points import Point, PointStore
from tingrid.geometry.plane import Plane, fit_plane, non_zero_winding
from tingrid.geometry.grid import OutputGrid
from tingrid.mesh.edges import extract_edges
from tingrid.mesh.triangulation import DelaunayEngine, PrecomputedTriangulation
from tingrid.raster.uncertainty import UncertaintyModel
from tingrid.raster.rasterize import TriangleRasterizer
from tingrid.parsers.landxml import LandXMLParser
from tingrid.output.records import RecordWriter

__all__ = [
    "__version__",
    "DerivativeDirection",
    "RecordMode",
    "Region",
    "Registration",
    "TriangulateConfig",
    "Point",
    "PointStore",
    "Plane",
    "fit_plane",
    "non_zero_winding",
    "OutputGrid",
    "extract_edges",
    "DelaunayEngine",
    "PrecomputedTriangulation",
    "UncertaintyModel",
    "TriangleRasterizer",
    "LandXMLParser",
    "RecordWriter",
]
