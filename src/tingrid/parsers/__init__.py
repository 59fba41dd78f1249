"""Parsers for point tables, LandXML surfaces and slope grids."""

from tingrid.parsers.records import RecordReader, read_points, read_triangles
from tingrid.parsers.landxml import LandXMLParser, LandXMLSurface
from tingrid.parsers.slopes import read_slope_grid

__all__ = [
    "RecordReader",
    "read_points",
    "read_triangles",
    "LandXMLParser",
    "LandXMLSurface",
    "read_slope_grid",
]
