"""Geometry data structures and per-triangle primitives."""

from tingrid.geometry.points import Point, PointStore
from tingrid.geometry.plane import Plane, fit_plane, non_zero_winding
from tingrid.geometry.grid import OutputGrid

__all__ = ["Point", "PointStore", "Plane", "fit_plane", "non_zero_winding", "OutputGrid"]
