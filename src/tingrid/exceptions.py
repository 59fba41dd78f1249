"""Custom exceptions for the tingrid package."""


class TinGridError(Exception):
    """Base exception for all tingrid errors."""

    pass


class ValidationError(TinGridError):
    """Input validation error."""

    pass


class ConfigurationError(ValidationError):
    """Conflicting or incomplete run options."""

    pass


class InputExhaustedError(TinGridError):
    """No data points were read."""

    pass


class CapacityExceededError(TinGridError):
    """More points than can be indexed."""

    pass


class RecordParseError(TinGridError):
    """Error parsing a data table."""

    pass


class LandXMLParseError(RecordParseError):
    """Error parsing LandXML file."""

    pass


class TriangulationError(TinGridError):
    """Error from the triangulation engine."""

    pass


class DegenerateTriangleError(TinGridError):
    """Triangle with collinear vertices has no unique plane."""

    pass


class GridError(TinGridError):
    """Error creating, reading or writing a grid."""

    pass


class RasterizationError(TinGridError):
    """Error during triangle rasterization."""

    pass


class OutputError(TinGridError):
    """Error generating output files."""

    pass
