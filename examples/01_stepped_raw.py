#!/usr/bin/env python3
# pylint: disable=invalid-name
"""
Stepped Raw File Example

This example writes a small stepped transient raw file, the way LTspice does
for a ``.step param R 1k 2k 3k`` run, then reads it back step by step.
"""

import logging
import sys
import tempfile
from pathlib import Path

import numpy as np

# Add the steppedraw package to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from steppedraw import configure_logging, read_raw
from steppedraw.config import RawReaderConfig

HEADER = """Title: * rc_step.asc
Date: Mon Jan 01 12:00:00 2024
Plotname: Transient Analysis
Flags: real forward stepped
No. Variables: 3
No. Points: {points}
Offset:   0.0000000000000000e+000
Command: Linear Technology Corporation LTspice XVII
Variables:
\t0\ttime\ttime
\t1\tV(out)\tvoltage
\t2\tI(R1)\tdevice_current
Binary:
"""


def create_stepped_raw(folder: Path) -> Path:
    """Write an RC charge curve for three resistor values."""
    time_points = np.linspace(0, 5e-3, 50)
    records = []
    for resistance in (1e3, 2e3, 3e3):
        vout = 1 - np.exp(-time_points / (resistance * 1e-6))
        current = (1 - vout) / resistance
        records.append(np.column_stack([time_points, vout, current]))
    data = np.vstack(records)

    payload = np.zeros(
        len(data), dtype=[("time", "=f8"), ("vout", "=f4"), ("i", "=f4")]
    )
    payload["time"] = data[:, 0]
    payload["vout"] = data[:, 1]
    payload["i"] = data[:, 2]

    raw_file = folder / "rc_step.raw"
    raw_file.write_bytes(HEADER.format(points=len(data)).encode("utf-8") + payload.tobytes())
    return raw_file


def example_read_steps(raw_file: Path) -> None:
    """Print one line per detected step."""
    raw = read_raw(raw_file)
    stats = raw.get_stats()
    print(f"{raw_file.name}: {stats.point_count} points, {stats.step_count} steps")
    for variable in raw.get_variables():
        print(f"  {variable.name} ({variable.var_class.value})")

    for step in raw.get_steps():
        time_axis = raw.get_wave("x", step)
        vout = raw.get_wave("V(out)", step)
        print(
            f"  step {step}: {len(time_axis)} points, "
            f"V(out) at {time_axis[-1] * 1e3:.1f} ms = {vout[-1]:.4f} V"
        )


def main() -> None:
    logging.basicConfig(format="%(name)s: %(message)s")
    configure_logging(RawReaderConfig(log_level="DEBUG"))
    with tempfile.TemporaryDirectory() as folder:
        example_read_steps(create_stepped_raw(Path(folder)))


if __name__ == "__main__":
    main()
