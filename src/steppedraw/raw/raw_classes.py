#!/usr/bin/env python
# coding=utf-8
"""Vocabulary of the raw file format.

Enumerations and plain data types shared by the decoder: header encoding,
analysis mode, storage flags, sample datatypes, variables, statistics and the
decoded dataset itself.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..core.constants import RawFileConstants


class Encoding(Enum):
    """Text encoding of the header. The value is the Python codec name."""

    UTF8 = "utf-8"
    UTF16 = "utf_16_le"
    UTF32 = "utf_32_le"
    ASCII = "ascii"

    @property
    def code_unit_width(self) -> int:
        """Bytes per code unit, used to turn character offsets into byte offsets."""
        return _CODE_UNIT_WIDTHS[self]


_CODE_UNIT_WIDTHS = {
    Encoding.UTF8: 1,
    Encoding.UTF16: 2,
    Encoding.UTF32: 4,
    Encoding.ASCII: 1,
}


class AnalysisMode(Enum):
    """Simulation analysis, taken from the Plotname field."""

    TRANSIENT = "transient"
    FFT = "fft"
    AC = "ac"
    DC = "dc"
    NOISE = "noise"
    OPERATING_POINT = "operating_point"

    @property
    def is_complex(self) -> bool:
        """AC and FFT data is stored as complex numbers."""
        return self in (AnalysisMode.AC, AnalysisMode.FFT)


class StorageFlag(Enum):
    """Storage modifiers listed in the Flags field."""

    STEPPED = RawFileConstants.FLAG_STEPPED
    REAL = RawFileConstants.FLAG_REAL
    DOUBLE = RawFileConstants.FLAG_DOUBLE


class SampleDatatype(Enum):
    """Binary datatypes of a single sample."""

    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX128 = "complex128"  # 2 x float64, real part first

    @property
    def width(self) -> int:
        """Size in bytes of one encoded sample."""
        return _DATATYPE_WIDTHS[self]

    @property
    def is_complex(self) -> bool:
        return self is SampleDatatype.COMPLEX128


_DATATYPE_WIDTHS = {
    SampleDatatype.FLOAT32: 4,
    SampleDatatype.FLOAT64: 8,
    SampleDatatype.COMPLEX128: 16,
}


class VariableClass(Enum):
    """Kind of a dependent variable, from the letters before its parenthesis."""

    VOLTAGE = "voltage"
    CURRENT = "current"
    UNKNOWN = "unknown"

    @classmethod
    def from_prefix(cls, prefix: str) -> "VariableClass":
        if prefix == "V":
            return cls.VOLTAGE
        if prefix == "I":
            return cls.CURRENT
        return cls.UNKNOWN


@dataclass(frozen=True, eq=False)
class Sample:
    """One decoded value.

    Equality is exact on both components. Step detection depends on the first
    X value of a sweep recurring bit for bit, so no tolerance is applied.
    """

    real: float
    imaginary: float = 0.0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sample):
            return NotImplemented
        return self.real == other.real and self.imaginary == other.imaginary

    def __hash__(self) -> int:
        return hash((self.real, self.imaginary))

    def __complex__(self) -> complex:
        return complex(self.real, self.imaginary)


@dataclass(frozen=True)
class Variable:
    """A dependent variable declared in the header."""

    var_class: VariableClass
    name: str


@dataclass(frozen=True)
class SimulationStats:
    """Counts from the header plus the step geometry found while decoding.

    ``step_size`` holds the expected payload length until a step boundary is
    detected, then the length of the last completed step.
    """

    variable_count: int = 0
    point_count: int = 0
    step_count: int = 0
    step_size: int = 0


SampleSequence = Tuple[Sample, ...]


@dataclass
class Dataset:
    """Decoded series: the X axis plus one series per declared variable.

    Every series is a list of steps and every step a tuple of samples. Once
    decoding finishes all series share the same step count and step lengths.
    """

    x: List[SampleSequence] = field(default_factory=list)
    series: Dict[str, List[SampleSequence]] = field(default_factory=dict)

    @classmethod
    def for_variables(cls, variables: Iterable[Variable]) -> "Dataset":
        return cls(series={variable.name: [] for variable in variables})

    def __contains__(self, name: object) -> bool:
        return name == RawFileConstants.X_KEY or name in self.series

    def __iter__(self) -> Iterator[str]:
        yield RawFileConstants.X_KEY
        yield from self.series

    def __len__(self) -> int:
        return 1 + len(self.series)

    def steps(self, name: str) -> Optional[List[SampleSequence]]:
        """All steps of a series, or None for an unknown name."""
        if name == RawFileConstants.X_KEY:
            return self.x
        return self.series.get(name)

    @property
    def step_count(self) -> int:
        return len(self.x)
