"""Reader for ASCII tables of numeric records."""

import math
import re
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

import numpy as np

from tingrid.exceptions import (
    CapacityExceededError,
    InputExhaustedError,
    RecordParseError,
    ValidationError,
)
from tingrid.geometry.points import MAX_POINTS, PointStore
from tingrid.utils.logging import get_logger

FIELD_SEPARATOR = re.compile(r"[\s,;]+")


class RecordReader:
    """Reads fixed-width numeric records from one or more tables.

    Lines that are blank, start with ``#`` (comments) or ``>`` (segment
    headers) are skipped, as are records whose x or y field is NaN. Fields
    may be separated by whitespace, commas or semicolons; only the leading
    ``n_columns`` fields of a record are used.
    """

    def __init__(
        self,
        sources: Optional[Iterable[Path]] = None,
        n_columns: int = 2,
        stream: Optional[TextIO] = None,
        max_records: int = MAX_POINTS,
    ):
        """Initialize the reader.

        Args:
            sources: Table files to read in order; stdin (or ``stream``) when empty.
            n_columns: Number of leading numeric fields per record.
            stream: Text stream used when no source files are given.
            max_records: Reading this many records is an error.
        """
        self.sources = [Path(p) for p in sources or []]
        self.n_columns = n_columns
        self.stream = stream
        self.max_records = max_records
        self.logger = get_logger(__name__)

        for path in self.sources:
            if not path.exists():
                raise RecordParseError(f"Input table not found: {path}")

    def read(self) -> np.ndarray:
        """Read all records.

        Returns:
            ``(n, n_columns)`` float64 array, possibly with zero rows.

        Raises:
            RecordParseError: On a non-numeric or short record.
            CapacityExceededError: If ``max_records`` records are reached.
        """
        rows: list[list[float]] = []

        if self.sources:
            for path in self.sources:
                self.logger.debug(f"Reading records from: {path}")
                with open(path, encoding="utf-8") as f:
                    self._read_stream(f, str(path), rows)
        else:
            stream = self.stream if self.stream is not None else sys.stdin
            self._read_stream(stream, "<stdin>", rows)

        self.logger.info(f"Read {len(rows)} records")
        if not rows:
            return np.empty((0, self.n_columns), dtype=np.float64)
        return np.asarray(rows, dtype=np.float64)

    def _read_stream(self, stream: TextIO, label: str, rows: list[list[float]]) -> None:
        for line_no, line in enumerate(stream, start=1):
            text = line.strip()
            if not text or text[0] in "#>":
                continue

            fields = FIELD_SEPARATOR.split(text)
            if len(fields) < self.n_columns:
                raise RecordParseError(
                    f"{label}:{line_no}: expected {self.n_columns} fields, got {len(fields)}"
                )
            try:
                values = [float(value) for value in fields[: self.n_columns]]
            except ValueError as e:
                raise RecordParseError(f"{label}:{line_no}: {e}") from e

            if math.isnan(values[0]) or math.isnan(values[1]):
                self.logger.debug(f"{label}:{line_no}: skipping record with NaN x or y")
                continue
            rows.append(values)

            if len(rows) >= self.max_records:
                raise CapacityExceededError(
                    f"Cannot triangulate more than {self.max_records - 1} points"
                )


def read_points(
    sources: Optional[Iterable[Path]] = None,
    elevation: bool = False,
    uncertainty: bool = False,
    stream: Optional[TextIO] = None,
) -> PointStore:
    """Read a point table into a PointStore.

    Raises:
        InputExhaustedError: If no records are found.
    """
    n_columns = (3 if elevation else 2) + (2 if uncertainty else 0)
    data = RecordReader(sources, n_columns=n_columns, stream=stream).read()
    if len(data) == 0:
        raise InputExhaustedError("No data points given - so no triangulation can take effect")
    return PointStore.from_columns(data, elevation=elevation, uncertainty=uncertainty)


def read_triangles(path: Path, n_points: Optional[int] = None) -> np.ndarray:
    """Read a table of vertex-index triples (one triangle per record).

    Raises:
        RecordParseError: If an index is not an integer.
        ValidationError: If an index is outside ``[0, n_points)``.
    """
    data = RecordReader([path], n_columns=3).read()
    if len(data) and not np.all(data == np.round(data)):
        raise RecordParseError(f"Triangle indices must be integers: {path}")

    triangles = data.astype(np.int64)
    if n_points is not None and len(triangles):
        if triangles.min() < 0 or triangles.max() >= n_points:
            raise ValidationError(
                f"Triangle table {path} references points outside [0, {n_points})"
            )
    return triangles
