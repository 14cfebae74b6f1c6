"""
Centralized constants for steppedraw.

This module contains the magic strings and default values used while decoding
SPICE raw files.
"""

from typing import Dict, List

# File extensions


class FileExtensions:
    """File extensions of simulator output files."""

    RAW = ".raw"  # Raw simulation output

    # Collections
    DEFAULT_RAW_EXTENSIONS = [RAW]


# Encoding constants


class Encodings:
    """Python codec names used for header decoding."""

    UTF8 = "utf-8"
    UTF16_LE = "utf_16_le"
    UTF32_LE = "utf_32_le"
    ASCII = "ascii"

    # Replacement policy for lossy decoding
    ERRORS = "replace"

    # Encoding detection order
    DETECTION_ORDER = [UTF8, UTF16_LE]


# Raw file constants


class RawFileConstants:
    """Constants for raw simulation output files."""

    # Markers that prove a candidate encoding decoded the header
    DATA_MARKERS = ["Values", "Binary"]

    # Header/payload separator
    BINARY_MARKER = "Binary:\n"

    # Reserved dataset key for the independent variable
    X_KEY = "x"

    # Header fields
    FIELD_TITLE = "Title"
    FIELD_DATE = "Date"
    FIELD_PLOTNAME = "Plotname"
    FIELD_FLAGS = "Flags"
    FIELD_POINTS = "No. Points"
    FIELD_VARIABLES_COUNT = "No. Variables"
    FIELD_VARIABLES = "Variables"
    FIELD_COMMAND = "Command"
    FIELD_BACKANNOTATION = "Backannotation"
    FIELD_OFFSET = "Offset"

    # Fields that are understood but carry nothing the decoder needs
    IGNORED_FIELDS = [FIELD_TITLE, FIELD_COMMAND, FIELD_BACKANNOTATION, FIELD_OFFSET]

    # Flags
    FLAG_STEPPED = "stepped"
    FLAG_REAL = "real"
    FLAG_DOUBLE = "double"


# Plot names as written by the simulators, mapped to analysis mode names
PLOT_NAMES: Dict[str, str] = {
    "Transient Analysis": "TRANSIENT",
    "AC Analysis": "AC",
    "DC Analysis": "DC",
    "DC transfer characteristic": "DC",
    "Noise Analysis": "NOISE",
    "Noise Spectral Density": "NOISE",
    "Operating Point": "OPERATING_POINT",
    "FFT": "FFT",
}

# Date formats tried in order before falling back to ISO 8601
DATE_FORMATS: List[str] = [
    "%a %b %d %H:%M:%S %Y",  # LTspice: Mon Jan 01 00:00:00 2024
    "%a, %d %b %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
]

# Default log level of the package logger
DEFAULT_LOG_LEVEL = "WARNING"
