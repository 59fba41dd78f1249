"""Configuration dataclasses for the tingrid package."""

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from tingrid.exceptions import ConfigurationError
from tingrid.utils.logging import get_logger
from tingrid.utils.validation import validate_epsg_code, validate_positive_float


class DerivativeDirection(str, Enum):
    """Partial derivative written instead of the interpolated value."""

    X = "x"
    Y = "y"


class Registration(str, Enum):
    """Whether grid values sit on nodes or at cell centers."""

    GRIDLINE = "gridline"
    PIXEL = "pixel"


class InputFormat(str, Enum):
    """Format of the point input."""

    TABLE = "table"
    LANDXML = "landxml"


class VectorFormat(str, Enum):
    """Vector file format for segment and polygon output."""

    SHAPEFILE = "shapefile"
    GEOJSON = "geojson"
    GEOPACKAGE = "geopackage"
    DXF = "dxf"


class RecordMode(str, Enum):
    """The single record output path active for a run."""

    NONE = "none"
    EDGES = "edges"
    VORONOI = "voronoi"
    POLYGONS = "polygons"
    INDEX_TABLE = "index-table"


VECTOR_EXTENSIONS = {
    ".shp": VectorFormat.SHAPEFILE,
    ".geojson": VectorFormat.GEOJSON,
    ".json": VectorFormat.GEOJSON,
    ".gpkg": VectorFormat.GEOPACKAGE,
    ".dxf": VectorFormat.DXF,
}


@dataclass(frozen=True)
class Region:
    """Rectangular region (west, east, south, north)."""

    west: float
    east: float
    south: float
    north: float

    def __post_init__(self) -> None:
        if not (self.west < self.east and self.south < self.north):
            raise ConfigurationError(
                f"Region must satisfy west < east and south < north, got: "
                f"{self.west}/{self.east}/{self.south}/{self.north}"
            )

    @classmethod
    def from_string(cls, text: str) -> "Region":
        """Parse a region given as ``west/east/south/north``."""
        parts = text.split("/")
        if len(parts) != 4:
            raise ConfigurationError(f"Region must be west/east/south/north, got: {text}")
        try:
            west, east, south, north = (float(p) for p in parts)
        except ValueError:
            raise ConfigurationError(f"Region values must be numeric, got: {text}")
        return cls(west, east, south, north)

    @property
    def width(self) -> float:
        return self.east - self.west

    @property
    def height(self) -> float:
        return self.north - self.south


def parse_spacing(text: str) -> tuple[float, float]:
    """Parse a grid spacing given as ``dx`` or ``dx/dy``."""
    parts = text.split("/")
    if len(parts) not in (1, 2):
        raise ConfigurationError(f"Grid spacing must be dx or dx/dy, got: {text}")
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise ConfigurationError(f"Grid spacing must be numeric, got: {text}")
    if len(values) == 1:
        values.append(values[0])
    return values[0], values[1]


def parse_empty_value(text: str) -> float:
    """Parse the empty-node value; anything starting with N means NaN."""
    if text[:1] in ("N", "n"):
        return math.nan
    try:
        return float(text)
    except ValueError:
        raise ConfigurationError(f"Empty value must be numeric or NaN, got: {text}")


@dataclass
class TriangulateConfig:
    """Configuration for a triangulation, gridding or edge extraction run."""

    input_files: list[Path] = field(default_factory=list)
    output_file: Optional[Path] = None
    input_format: InputFormat = InputFormat.TABLE
    triangles_file: Optional[Path] = None
    grid_file: Optional[Path] = None
    spacing: Optional[tuple[float, float]] = None
    region: Optional[Region] = None
    registration: Registration = Registration.GRIDLINE
    derivative: Optional[DerivativeDirection] = None
    empty_value: Optional[float] = None
    edges: bool = False
    index_table: bool = False
    polygons: bool = False
    voronoi: bool = False
    slope_file: Optional[Path] = None
    elevation: bool = False
    vector_output: Optional[Path] = None
    epsg_code: Optional[int] = None
    workers: int = 1
    verbose: bool = False

    def __post_init__(self) -> None:
        """Convert paths and validate configuration."""
        self.input_files = [Path(p) for p in self.input_files]
        for name in ("output_file", "triangles_file", "grid_file", "slope_file", "vector_output"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, Path(value))

        self._validate()
        self._warn_unused()

    def _validate(self) -> None:
        if self.spacing is not None:
            validate_positive_float(self.spacing[0], "Grid x-spacing")
            validate_positive_float(self.spacing[1], "Grid y-spacing")

        if self.grid:
            if self.region is None or self.spacing is None:
                raise ConfigurationError(
                    "Gridding requires a region and a grid spacing"
                )
            if self.voronoi:
                raise ConfigurationError("Gridding cannot be combined with Voronoi output")

        if self.polygons and self.voronoi:
            raise ConfigurationError("Polygon output cannot be combined with Voronoi output")

        if self.index_table and not self.grid:
            raise ConfigurationError(
                "Index-table output is only selected explicitly together with gridding"
            )

        if self.voronoi and self.region is None:
            raise ConfigurationError("Voronoi output requires a region")

        if self.voronoi and self.triangles_file is not None:
            raise ConfigurationError(
                "Voronoi edges are computed by the triangulation engine; "
                "a precomputed triangle file cannot be used"
            )

        if self.uncertainty and self.input_format == InputFormat.LANDXML:
            raise ConfigurationError(
                "LandXML surfaces carry no uncertainty fields; use a table input"
            )

        if self.vector_output is not None:
            if self.record_mode in (RecordMode.NONE, RecordMode.INDEX_TABLE):
                raise ConfigurationError(
                    "Vector output requires edge, polygon or Voronoi output"
                )
            if self.vector_output.suffix.lower() not in VECTOR_EXTENSIONS:
                raise ConfigurationError(
                    f"Unsupported vector output extension: {self.vector_output.suffix}. "
                    f"Supported: {', '.join(sorted(VECTOR_EXTENSIONS))}"
                )

        if self.epsg_code is not None:
            validate_epsg_code(self.epsg_code)

        if self.workers < 1:
            raise ConfigurationError(f"Worker count must be at least 1, got: {self.workers}")

    def _warn_unused(self) -> None:
        logger = get_logger(__name__)
        if self.spacing is not None and not self.grid:
            logger.warning("Grid spacing not needed when no grid file is given")
        if self.region is not None and not (self.grid or self.voronoi):
            logger.warning("Region not needed without gridding or Voronoi output")
        if self.voronoi and self.elevation:
            logger.warning("Reading (x,y,z) but only (x,y) is written for Voronoi edges")
        if self.derivative is not None and not self.grid:
            logger.warning("Derivative direction only applies when gridding")
        if self.uncertainty and not self.grid:
            logger.warning("Uncertainty fields are read but only used when gridding")

    @property
    def grid(self) -> bool:
        """True when a grid file is requested."""
        return self.grid_file is not None

    @property
    def uncertainty(self) -> bool:
        """True when the propagated uncertainty is written instead of values."""
        return self.slope_file is not None

    @property
    def elevation_mode(self) -> bool:
        """True when a z column is read (always the case when gridding)."""
        return self.elevation or self.grid

    @property
    def n_input_columns(self) -> int:
        """Number of leading columns consumed per input record."""
        n = 3 if self.elevation_mode else 2
        return n + 2 if self.uncertainty else n

    @property
    def fill_value(self) -> float:
        """Value for grid nodes not covered by any triangle."""
        return math.nan if self.empty_value is None else self.empty_value

    @property
    def record_mode(self) -> RecordMode:
        """Select the record output; the index table is the default without a grid."""
        if self.voronoi:
            return RecordMode.VORONOI
        if self.edges:
            return RecordMode.EDGES
        if self.polygons:
            return RecordMode.POLYGONS
        if self.index_table or not self.grid:
            return RecordMode.INDEX_TABLE
        return RecordMode.NONE

    @property
    def vector_format(self) -> Optional[VectorFormat]:
        """Vector format inferred from the vector output extension."""
        if self.vector_output is None:
            return None
        return VECTOR_EXTENSIONS[self.vector_output.suffix.lower()]
