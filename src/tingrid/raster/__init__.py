"""Triangle rasterization and uncertainty propagation."""

from tingrid.raster.uncertainty import UncertaintyModel
from tingrid.raster.rasterize import TriangleRasterizer

__all__ = ["UncertaintyModel", "TriangleRasterizer"]
