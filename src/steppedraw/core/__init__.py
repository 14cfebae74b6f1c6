"""
Core utilities package for steppedraw.

This package contains the constants and regex patterns shared by the raw file
decoder.
"""

from steppedraw.core.constants import (
    DATE_FORMATS,
    DEFAULT_LOG_LEVEL,
    PLOT_NAMES,
    Encodings,
    FileExtensions,
    RawFileConstants,
)
from steppedraw.core.patterns import (
    HEADER_FIELD_PATTERN,
    UNSIGNED_INT_PATTERN,
    VARIABLE_LINE_PATTERN,
    VARIABLE_NAME_PATTERN,
)

__all__ = [
    # Constants
    "DATE_FORMATS",
    "DEFAULT_LOG_LEVEL",
    "PLOT_NAMES",
    "Encodings",
    "FileExtensions",
    "RawFileConstants",
    # Patterns
    "HEADER_FIELD_PATTERN",
    "UNSIGNED_INT_PATTERN",
    "VARIABLE_LINE_PATTERN",
    "VARIABLE_NAME_PATTERN",
]
