"""Input validation utilities."""

from pathlib import Path

from tingrid.exceptions import ConfigurationError, ValidationError


def validate_input_file(file_path: Path, description: str = "Input") -> None:
    """Validate that an input file exists and is a regular file.

    Args:
        file_path: Path to the input file.
        description: Label used in error messages.

    Raises:
        ValidationError: If the file is invalid.
    """
    if not file_path.exists():
        raise ValidationError(f"{description} file not found: {file_path}")

    if not file_path.is_file():
        raise ValidationError(f"{description} path is not a file: {file_path}")


def validate_landxml_file(file_path: Path) -> None:
    """Validate that the input file exists and is a LandXML file.

    Raises:
        ValidationError: If the file is invalid.
    """
    validate_input_file(file_path)

    # Check for common LandXML extensions
    valid_extensions = {".xml", ".landxml"}
    if file_path.suffix.lower() not in valid_extensions:
        raise ValidationError(
            f"Input file must be a LandXML file (.xml or .landxml), "
            f"got: {file_path.suffix}"
        )


def validate_positive_float(value: float, name: str) -> None:
    """Validate that a value is a positive float.

    Args:
        value: The value to validate.
        name: Name of the parameter for error messages.

    Raises:
        ConfigurationError: If the value is not positive.
    """
    if not value > 0:
        raise ConfigurationError(f"{name} must be positive, got: {value}")


def validate_epsg_code(epsg_code: int) -> None:
    """Validate that an EPSG code is reasonable.

    Args:
        epsg_code: The EPSG code to validate.

    Raises:
        ConfigurationError: If the EPSG code is invalid.
    """
    if epsg_code < 0:
        raise ConfigurationError(f"EPSG code must be non-negative, got: {epsg_code}")

    # Common EPSG code ranges
    # 1-32767: Standard codes
    # 100000+: User-defined codes
    if epsg_code > 0 and epsg_code < 1000:
        raise ConfigurationError(
            f"EPSG code {epsg_code} seems unusually low. "
            "Common codes are typically 4-5 digits (e.g., 4326, 32618)."
        )
