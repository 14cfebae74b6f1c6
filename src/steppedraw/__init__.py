"""steppedraw - decoder for stepped SPICE raw waveform files.

This package reads the ``.raw`` files written by SPICE-family simulators into
typed, stepped series of samples, ready for analysis or plotting code.
"""

__version__ = "0.1.0"

from pathlib import Path
from typing import Optional, Union

from steppedraw.config import (
    RawReaderConfig,
    configure_logging,
    get_config,
    load_config,
    set_config,
)
from steppedraw.exceptions import (
    InvalidSourceError,
    LayoutMismatchError,
    MalformedNumericFieldError,
    MissingBoundaryMarkerError,
    RawFileError,
    SteppedRawError,
    UndecodableHeaderError,
)
from steppedraw.raw.raw_classes import (
    AnalysisMode,
    Encoding,
    Sample,
    SampleDatatype,
    SimulationStats,
    StorageFlag,
    Variable,
    VariableClass,
)
from steppedraw.raw.raw_read import SteppedRawRead

__all__ = [
    "SteppedRawRead",
    "Sample",
    "Variable",
    "VariableClass",
    "SimulationStats",
    "AnalysisMode",
    "Encoding",
    "SampleDatatype",
    "StorageFlag",
    "RawReaderConfig",
    "configure_logging",
    "get_config",
    "load_config",
    "set_config",
    "SteppedRawError",
    "RawFileError",
    "InvalidSourceError",
    "UndecodableHeaderError",
    "MissingBoundaryMarkerError",
    "MalformedNumericFieldError",
    "LayoutMismatchError",
]


def read_raw(
    raw_filename: Union[str, Path], config: Optional[RawReaderConfig] = None
) -> SteppedRawRead:
    """Create a reader for a raw file and parse it.

    :param raw_filename: Path to the ``.raw`` file.
    :param config: Optional reader configuration, the global one by default.
    :return: The parsed reader.
    """
    raw = SteppedRawRead(raw_filename, config)
    raw.reload()
    return raw


# Expose the high-level API
__all__.append("read_raw")
