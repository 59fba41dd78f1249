"""Utility modules."""

from tingrid.utils.validation import validate_input_file, validate_landxml_file
from tingrid.utils.logging import setup_logging, get_logger

__all__ = ["validate_input_file", "validate_landxml_file", "setup_logging", "get_logger"]
