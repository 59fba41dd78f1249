"""Output generation modules."""

from tingrid.output.records import RecordWriter
from tingrid.output.vectors import VectorWriter
from tingrid.output.grids import GridWriter

__all__ = ["RecordWriter", "VectorWriter", "GridWriter"]
