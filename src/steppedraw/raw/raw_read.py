#!/usr/bin/env python
# coding=utf-8
"""Reader for stepped SPICE raw files.

A raw file starts with a text header made of ``Field: value`` entries::

    Title: * C:\\sim\\rc.asc
    Date: Mon Jan 01 00:00:00 2024
    Plotname: Transient Analysis
    Flags: real forward stepped
    No. Variables: 3
    No. Points: 6
    Offset: 0.0000000000000000e+000
    Command: Linear Technology Corporation LTspice XVII
    Variables:
    \t0\ttime\ttime
    \t1\tV(in)\tvoltage
    \t2\tI(R1)\tdevice_current
    Binary:

and continues, right after ``Binary:\\n``, with the binary payload. The header
may be written in UTF-8 or UTF-16 LE; the payload is never re-decoded.

Stepped runs (``.step``) simply append one sweep after another. Nothing in the
file marks where a step ends, so steps are recovered from the independent
variable: each time it comes back to exactly the value it started the current
step with, a new step begins.

Example::

    raw = SteppedRawRead("rc.raw")
    raw.reload()
    for step in raw.get_steps():
        vin = raw.get_wave("V(in)", step)
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from ..config import RawReaderConfig, get_config
from ..core.constants import PLOT_NAMES, RawFileConstants
from ..core.patterns import (
    HEADER_FIELD_PATTERN,
    UNSIGNED_INT_PATTERN,
    VARIABLE_LINE_PATTERN,
    VARIABLE_NAME_PATTERN,
    WHITESPACE_PATTERN,
)
from ..exceptions import InvalidSourceError, MalformedNumericFieldError
from ..utils.detect_encoding import detect_encoding, split_header_payload
from .raw_binary_parser import BinaryPayloadParser, select_datatypes
from .raw_classes import (
    AnalysisMode,
    Dataset,
    Encoding,
    SampleSequence,
    SimulationStats,
    StorageFlag,
    Variable,
    VariableClass,
)

_logger = logging.getLogger("steppedraw.RawRead")


def parse_date(text: str, formats: Sequence[str]) -> datetime:
    """Parse a header date.

    Tries each strptime format, then ISO 8601. Naive results are taken as UTC.

    :raises ValueError: when no format matches
    """
    text = text.strip()
    for fmt in formats:
        try:
            date = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return date.replace(tzinfo=timezone.utc)
    date = datetime.fromisoformat(text)
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date


def tokenize_header(header: str) -> Dict[str, str]:
    """Split header text into a field name -> raw value mapping.

    Values are kept verbatim: the Variables value spans several lines and
    keeps the trailing data marker.
    """
    fields: Dict[str, str] = {}
    for match in HEADER_FIELD_PATTERN.finditer(header):
        fields[match.group("name")] = match.group("value")
    return fields


def parse_unsigned(field_name: str, value: str) -> int:
    """Parse No. Points / No. Variables."""
    text = value.strip()
    if not UNSIGNED_INT_PATTERN.match(text):
        _logger.error("Header field '%s' is not an unsigned integer: %r", field_name, text)
        raise MalformedNumericFieldError(field_name, text)
    return int(text)


def parse_variables(value: str) -> Tuple[Optional[str], List[Variable]]:
    """Parse the Variables field.

    Index 0 is the independent variable. The others become :class:`Variable`
    entries in declaration order, which is the order of their samples in the
    payload.

    Returns:
        Tuple of (independent variable name, dependent variables)
    """
    x_name = None
    variables = []
    for match in VARIABLE_LINE_PATTERN.finditer(value):
        name = match.group("name")
        if int(match.group("index")) == 0:
            x_name = name
            continue
        name_match = VARIABLE_NAME_PATTERN.match(name)
        var_class = (
            VariableClass.from_prefix(name_match.group("cls"))
            if name_match
            else VariableClass.UNKNOWN
        )
        variables.append(Variable(var_class, name))
    return x_name, variables


class SteppedRawRead:
    """Decoded contents of a raw file.

    The object is created empty and filled by :meth:`reload`. Afterwards it is
    only read through the accessors. :meth:`reload` replaces everything; when
    it fails the previous contents are left untouched.
    """

    def __init__(
        self, raw_filename: Union[str, Path], config: Optional[RawReaderConfig] = None
    ) -> None:
        self.path = Path(raw_filename)
        self.config = config
        self.encoding = Encoding.UTF8
        self.mode = AnalysisMode.TRANSIENT
        self.flags: Set[StorageFlag] = set()
        self.date = datetime.now(timezone.utc)
        self.x_name: Optional[str] = None
        self._raw_params: Dict[str, str] = {}
        self._stats = SimulationStats()
        self._variables: List[Variable] = []
        self._dataset = Dataset()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self.path)!r}, mode={self.mode.name}, "
            f"variables={len(self._variables)}, steps={self._dataset.step_count})"
        )

    def reload(self) -> None:
        """Parse the file, replacing any previous contents.

        Raises:
            InvalidSourceError: Missing file, not a file, or wrong extension
            UndecodableHeaderError: No encoding exposes the header
            MissingBoundaryMarkerError: No ``Binary:`` separator
            MalformedNumericFieldError: Bad ``No. Points``/``No. Variables``
            LayoutMismatchError: Payload size differs from the header's
        """
        config = self.config or get_config()
        self._check_source(config)

        with open(self.path, "rb") as f:
            data = f.read()

        codec, text = detect_encoding(data)
        encoding = Encoding(codec)
        header, payload = split_header_payload(data, text, codec)
        if text:
            _logger.debug("Binary Size: %.2f%%", len(payload) / len(text) * 100.0)

        fields = tokenize_header(header)
        mode = AnalysisMode.TRANSIENT
        flags: Set[StorageFlag] = set()
        date = datetime.now(timezone.utc)
        point_count = 0
        variable_count = 0
        x_name: Optional[str] = None
        variables: List[Variable] = []

        for key, value in fields.items():
            if key in RawFileConstants.IGNORED_FIELDS:
                continue
            if key == RawFileConstants.FIELD_DATE:
                try:
                    date = parse_date(value, config.date_formats)
                except ValueError:
                    _logger.debug("Unparsable date %r, using current time", value.strip())
            elif key == RawFileConstants.FIELD_PLOTNAME:
                mode_name = PLOT_NAMES.get(value.strip())
                if mode_name is not None:
                    mode = AnalysisMode[mode_name]
            elif key == RawFileConstants.FIELD_FLAGS:
                for token in WHITESPACE_PATTERN.split(value.strip()):
                    try:
                        flags.add(StorageFlag(token.lower()))
                    except ValueError:
                        pass  # forward, log, linear, complex, FastAccess...
            elif key == RawFileConstants.FIELD_POINTS:
                point_count = parse_unsigned(key, value)
            elif key == RawFileConstants.FIELD_VARIABLES_COUNT:
                variable_count = parse_unsigned(key, value)
            elif key == RawFileConstants.FIELD_VARIABLES:
                x_name, variables = parse_variables(value)
            else:
                _logger.warning("Unknown raw file header field: %s", key)

        x_type, y_type = select_datatypes(mode, flags)
        parser = BinaryPayloadParser(x_type, y_type, variable_count - 1)
        stats = SimulationStats(variable_count=variable_count, point_count=point_count)
        dataset, stats = parser.decode(payload, variables, stats)

        _logger.debug("Loaded %d Variables.", len(dataset))
        _logger.debug("Detected %d Steps.", stats.step_count)
        _logger.debug("Loaded %d Steps.", dataset.step_count)

        self.encoding = encoding
        self.mode = mode
        self.flags = flags
        self.date = date
        self.x_name = x_name
        self._raw_params = fields
        self._stats = stats
        self._variables = variables
        self._dataset = dataset

    def _check_source(self, config: RawReaderConfig) -> None:
        if not self.path.exists():
            _logger.error("The specified file does not exist: %s", self.path)
            raise InvalidSourceError(self.path, "file does not exist")
        if not self.path.is_file():
            _logger.error("The specified path is not a file: %s", self.path)
            raise InvalidSourceError(self.path, "not a regular file")
        if not config.accepts_extension(self.path):
            _logger.error("The specified path is not a raw file: %s", self.path)
            raise InvalidSourceError(
                self.path,
                f"extension '{self.path.suffix}' is not a raw file extension",
                config.raw_extensions,
            )

    # Data interfaces

    def get(self, name: str, step: Optional[int] = None) -> Optional[SampleSequence]:
        """Samples of a variable for one step, the first step by default.

        Steps are tuples; the decoded data cannot be changed through them.

        Returns None for an unknown name or a step out of range.
        """
        steps = self._dataset.steps(name)
        if steps is None:
            return None
        index = 0 if step is None else step
        if not 0 <= index < len(steps):
            return None
        return steps[index]

    def get_x(self) -> Optional[SampleSequence]:
        """Samples of the independent variable, first step."""
        return self.get(RawFileConstants.X_KEY, None)

    def get_stats(self) -> SimulationStats:
        return self._stats

    def get_variables(self) -> Tuple[Variable, ...]:
        return tuple(self._variables)

    def get_trace_names(self) -> List[str]:
        """Dataset keys: ``x`` first, then the variables in declaration order."""
        return list(self._dataset)

    def get_steps(self) -> range:
        return range(self._dataset.step_count)

    def get_wave(self, name: str, step: int = 0) -> Optional[NDArray[Any]]:
        """Samples of one step as a numpy array.

        complex128 for AC/FFT data, float64 otherwise.
        """
        samples = self.get(name, step)
        if samples is None:
            return None
        if self.mode.is_complex:
            return np.array([complex(sample) for sample in samples], dtype=np.complex128)
        return np.array([sample.real for sample in samples], dtype=np.float64)

    @property
    def raw_params(self) -> Mapping[str, str]:
        """Header fields as read, values stripped."""
        return MappingProxyType({key: value.strip() for key, value in self._raw_params.items()})
