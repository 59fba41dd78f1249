"""Mesh topology: triangulation engines and edge extraction."""

from tingrid.mesh.edges import extract_edges
from tingrid.mesh.triangulation import (
    DelaunayEngine,
    PrecomputedTriangulation,
    TriangulationEngine,
)

__all__ = ["extract_edges", "DelaunayEngine", "PrecomputedTriangulation", "TriangulationEngine"]
