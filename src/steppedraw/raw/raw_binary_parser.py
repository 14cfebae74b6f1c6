#!/usr/bin/env python
# coding=utf-8
"""Binary payload layout and decoding for raw files.

The payload is a flat sequence of records, one per point: the X sample
followed by one Y sample per dependent variable, in declaration order, in
native byte order and without padding. Records are reinterpreted in bulk with
a numpy structured dtype and then walked once to find step boundaries.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Sequence, Set, Tuple

import numpy as np
from numpy.typing import NDArray

from ..core.constants import RawFileConstants
from ..exceptions import LayoutMismatchError
from .raw_classes import (
    AnalysisMode,
    Dataset,
    Sample,
    SampleDatatype,
    SampleSequence,
    SimulationStats,
    StorageFlag,
    Variable,
)

_logger = logging.getLogger("steppedraw.RawBinaryParser")


@dataclass(frozen=True)
class BinaryFormat:
    """Description of binary data format."""

    format: SampleDatatype
    bytes_per_value: int
    numpy_dtype: np.dtype[Any]


# Format definitions, native byte order
BINARY_FORMATS = {
    SampleDatatype.FLOAT32: BinaryFormat(
        format=SampleDatatype.FLOAT32,
        bytes_per_value=4,
        numpy_dtype=np.dtype("=f4"),
    ),
    SampleDatatype.FLOAT64: BinaryFormat(
        format=SampleDatatype.FLOAT64,
        bytes_per_value=8,
        numpy_dtype=np.dtype("=f8"),
    ),
    SampleDatatype.COMPLEX128: BinaryFormat(
        format=SampleDatatype.COMPLEX128,
        bytes_per_value=16,
        numpy_dtype=np.dtype("=c16"),
    ),
}


def select_datatypes(
    mode: AnalysisMode, flags: Set[StorageFlag]
) -> Tuple[SampleDatatype, SampleDatatype]:
    """Pick the X and Y sample datatypes.

    Y is float32, float64 with the double flag, complex in AC/FFT mode (which
    wins over the flag). X is float64, complex in AC/FFT mode.

    Returns:
        Tuple of (x_datatype, y_datatype)
    """
    if mode.is_complex:
        return SampleDatatype.COMPLEX128, SampleDatatype.COMPLEX128
    if StorageFlag.DOUBLE in flags:
        return SampleDatatype.FLOAT64, SampleDatatype.FLOAT64
    return SampleDatatype.FLOAT64, SampleDatatype.FLOAT32


def expected_payload_length(
    point_count: int, variable_count: int, x_width: int, y_width: int
) -> int:
    """Payload size implied by the header.

    ``variable_count`` includes the independent variable, hence the minus one.
    """
    return point_count * x_width + point_count * (variable_count - 1) * y_width


def split_steps(
    samples: Sequence[Sample],
) -> Tuple[List[SampleSequence], List[int]]:
    """Split the X series into steps.

    A sample exactly equal to the first sample of the step being built starts
    a new step. This assumes the swept independent variable restarts from the
    same value on every step, which holds for stepped SPICE runs but is not
    guaranteed by the file format. The last step is flushed after the loop,
    even when empty.

    Returns:
        Tuple of (steps, boundaries) where boundaries are the indices at
        which each step after the first one starts
    """
    steps: List[SampleSequence] = []
    boundaries: List[int] = []
    buffer: List[Sample] = []
    for index, sample in enumerate(samples):
        if buffer and sample == buffer[0]:
            steps.append(tuple(buffer))
            boundaries.append(index)
            buffer = []
        buffer.append(sample)
    steps.append(tuple(buffer))
    return steps, boundaries


def split_at(
    values: Sequence[Sample], boundaries: Iterable[int]
) -> List[SampleSequence]:
    """Cut a series at the given boundaries into immutable steps."""
    steps = []
    start = 0
    for boundary in boundaries:
        steps.append(tuple(values[start:boundary]))
        start = boundary
    steps.append(tuple(values[start:]))
    return steps


def to_samples(column: NDArray[Any]) -> SampleSequence:
    """Convert one decoded column to samples; real datatypes get imaginary 0.0."""
    if np.iscomplexobj(column):
        return tuple(Sample(value.real, value.imag) for value in column.tolist())
    return tuple(Sample(value) for value in column.tolist())


def check_names(variables: Sequence[Variable]) -> None:
    """Reject dependent variables that would share a dataset key.

    Each name keys one payload column, and ``x`` is reserved for the
    independent variable.

    Raises:
        LayoutMismatchError: On a repeated name or a variable named ``x``
    """
    seen: Set[str] = {RawFileConstants.X_KEY}
    for index, variable in enumerate(variables, start=1):
        if variable.name in seen:
            _logger.error(
                "Variable %d reuses the name %r, its samples would be lost",
                index,
                variable.name,
            )
            raise LayoutMismatchError(
                f"Variable {index} reuses the name {variable.name!r}"
            )
        seen.add(variable.name)


class BinaryPayloadParser:
    """Decoder for the binary payload of a raw file.

    The parser knows the record layout (X datatype, Y datatype, number of
    dependent variables); it checks a payload against it and decodes it into
    a stepped :class:`Dataset`.
    """

    def __init__(
        self,
        x_type: SampleDatatype,
        y_type: SampleDatatype,
        dependent_count: int,
    ) -> None:
        """Initialize binary parser.

        Args:
            x_type: Datatype of the independent variable
            y_type: Datatype of each dependent variable
            dependent_count: Number of dependent variables per record
        """
        if dependent_count < 0:
            _logger.error("No independent variable declared")
            raise LayoutMismatchError(
                "A raw file declares at least the independent variable",
                expected=1,
                actual=dependent_count + 1,
            )
        self.x_type = x_type
        self.y_type = y_type
        self.dependent_count = dependent_count
        self.record_dtype = np.dtype(
            [("x", BINARY_FORMATS[x_type].numpy_dtype)]
            + [
                (f"y{index}", BINARY_FORMATS[y_type].numpy_dtype)
                for index in range(dependent_count)
            ]
        )

        _logger.debug(
            "BinaryPayloadParser layout: x=%s y=%s x %d (%d bytes per point)",
            x_type.value,
            y_type.value,
            dependent_count,
            self.record_dtype.itemsize,
        )

    @property
    def record_size(self) -> int:
        """Bytes per point."""
        return self.record_dtype.itemsize

    def expected_length(self, point_count: int) -> int:
        return expected_payload_length(
            point_count, self.dependent_count + 1, self.x_type.width, self.y_type.width
        )

    def check_layout(self, payload: bytes, point_count: int) -> int:
        """Verify the payload size against the header.

        Returns:
            The expected (and observed) payload length

        Raises:
            LayoutMismatchError: If sizes differ; the payload is never
                truncated or padded
        """
        expected = self.expected_length(point_count)
        if expected != len(payload):
            _logger.error(
                "Mismatch between the expected (%d) and actual (%d) payload length",
                expected,
                len(payload),
            )
            _logger.error(
                "The file is corrupted or written by an unsupported simulator variant"
            )
            raise LayoutMismatchError(
                f"Expected {expected} payload bytes, found {len(payload)}",
                expected=expected,
                actual=len(payload),
            )
        return expected

    def read_records(self, payload: bytes) -> NDArray[Any]:
        """Reinterpret the payload as an array of records."""
        return np.frombuffer(payload, dtype=self.record_dtype)

    def decode(
        self,
        payload: bytes,
        variables: Sequence[Variable],
        stats: SimulationStats,
    ) -> Tuple[Dataset, SimulationStats]:
        """Decode the payload into steps.

        Args:
            payload: Binary payload, right after the header separator
            variables: Dependent variables, in declaration order
            stats: Counts from the header

        Returns:
            Tuple of (dataset, stats with step geometry)

        Raises:
            LayoutMismatchError: If the payload does not fit the layout or
                two variables share a name
        """
        if len(variables) != self.dependent_count:
            _logger.error(
                "Declared %d dependent variables, expected %d",
                len(variables),
                self.dependent_count,
            )
            raise LayoutMismatchError(
                f"Header declares {len(variables)} dependent variables, "
                f"layout expects {self.dependent_count}",
                expected=self.dependent_count,
                actual=len(variables),
            )
        check_names(variables)
        step_size = self.check_layout(payload, stats.point_count)
        records = self.read_records(payload)

        x_steps, boundaries = split_steps(to_samples(records["x"]))
        step_count = stats.step_count
        if boundaries:
            step_size = len(x_steps[-2])
            step_count = stats.point_count // step_size

        dataset = Dataset.for_variables(variables)
        dataset.x = x_steps
        for index, variable in enumerate(variables):
            column = to_samples(records[f"y{index}"])
            dataset.series[variable.name] = split_at(column, boundaries)

        _logger.debug("Detected %d step boundaries", len(boundaries))
        return dataset, replace(stats, step_count=step_count, step_size=step_size)
