"""Pytest configuration and shared fixtures for steppedraw tests."""

import logging
import sys
from pathlib import Path
from typing import Callable, Iterator, Sequence

import numpy as np
import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from steppedraw.config import RawReaderConfig, set_config  # noqa: E402


def build_header(
    plotname: str = "Transient Analysis",
    flags: str = "real forward",
    variables: Sequence[str] = ("time", "V(out)"),
    points: int = 0,
    extra: str = "",
) -> str:
    """Return the text header of a raw file, separator included."""
    lines = [
        "Title: * C:\\sim\\test.asc",
        "Date: Mon Jan 01 12:00:00 2024",
        f"Plotname: {plotname}",
        f"Flags: {flags}",
        f"No. Variables: {len(variables)}",
        f"No. Points: {points}",
        "Offset:   0.0000000000000000e+000",
        "Command: Linear Technology Corporation LTspice XVII",
    ]
    if extra:
        lines.append(extra)
    lines.append("Variables:")
    for index, name in enumerate(variables):
        kind = "time" if index == 0 else "voltage"
        lines.append(f"\t{index}\t{name}\t{kind}")
    lines.append("Binary:")
    return "\n".join(lines) + "\n"


def pack_records(
    x: Sequence[float], ys: Sequence[Sequence[float]], x_dtype: str, y_dtype: str
) -> bytes:
    """Interleave X and Y columns into a native byte order payload."""
    dtype = np.dtype(
        [("x", x_dtype)] + [(f"y{index}", y_dtype) for index in range(len(ys))]
    )
    records = np.zeros(len(x), dtype=dtype)
    records["x"] = x
    for index, column in enumerate(ys):
        records[f"y{index}"] = column
    return records.tobytes()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Return a temporary directory for test output."""
    return tmp_path


@pytest.fixture(autouse=True)
def default_config() -> Iterator[None]:
    """Keep tests independent of STEPPEDRAW_* variables and config files."""
    set_config(RawReaderConfig())
    yield
    set_config(None)
    logging.getLogger("steppedraw").setLevel(logging.NOTSET)


@pytest.fixture
def write_raw(temp_dir: Path) -> Callable[..., Path]:
    """Return a helper writing a raw file from a header and a payload."""

    def _write(
        header: str,
        payload: bytes = b"",
        name: str = "test.raw",
        encoding: str = "utf-8",
    ) -> Path:
        raw_file = temp_dir / name
        raw_file.write_bytes(header.encode(encoding) + payload)
        return raw_file

    return _write


@pytest.fixture
def stepped_transient(write_raw: Callable[..., Path]) -> Path:
    """Two steps of three points, one float32 dependent variable."""
    x = [0.0, 1.0, 2.0, 0.0, 1.0, 2.0]
    y = [10.0, 11.0, 12.0, 20.0, 21.0, 22.0]
    header = build_header(flags="real forward stepped", points=6)
    return write_raw(header, pack_records(x, [y], "=f8", "=f4"))


@pytest.fixture
def header_builder() -> Callable[..., str]:
    """Return the raw header builder."""
    return build_header


@pytest.fixture
def record_packer() -> Callable[..., bytes]:
    """Return the payload packer."""
    return pack_records
