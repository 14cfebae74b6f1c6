"""Raw waveform file handling modules.

This module provides functionality for reading SPICE raw waveform files,
including stepped (``.step``) runs whose sweeps are recovered from the
independent variable.
"""

from .raw_classes import (
    AnalysisMode,
    Dataset,
    Encoding,
    Sample,
    SampleDatatype,
    SimulationStats,
    StorageFlag,
    Variable,
    VariableClass,
)
from .raw_binary_parser import (
    BINARY_FORMATS,
    BinaryFormat,
    BinaryPayloadParser,
    expected_payload_length,
    select_datatypes,
    split_steps,
)
from .raw_read import SteppedRawRead, parse_date, tokenize_header

__all__ = [
    # Core classes
    "SteppedRawRead",
    "Dataset",
    "Sample",
    "Variable",
    "SimulationStats",
    # Format vocabulary
    "AnalysisMode",
    "Encoding",
    "SampleDatatype",
    "StorageFlag",
    "VariableClass",
    # Binary parsing
    "BINARY_FORMATS",
    "BinaryFormat",
    "BinaryPayloadParser",
    "expected_payload_length",
    "select_datatypes",
    "split_steps",
    # Header parsing
    "parse_date",
    "tokenize_header",
]
