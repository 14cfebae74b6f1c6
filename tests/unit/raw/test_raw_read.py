"""Unit tests for raw file reading functionality."""

import logging
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from steppedraw import read_raw
from steppedraw.config import RawReaderConfig
from steppedraw.exceptions import (
    InvalidSourceError,
    LayoutMismatchError,
    MalformedNumericFieldError,
    MissingBoundaryMarkerError,
    UndecodableHeaderError,
)
from steppedraw.raw.raw_classes import (
    AnalysisMode,
    Encoding,
    Sample,
    SimulationStats,
    StorageFlag,
    Variable,
    VariableClass,
)
from steppedraw.raw.raw_read import SteppedRawRead


class TestSourceValidation:
    """Test the checks done before any byte is read."""

    def test_missing_file(self, temp_dir: Path) -> None:
        raw = SteppedRawRead(temp_dir / "missing.raw")
        with pytest.raises(InvalidSourceError) as excinfo:
            raw.reload()
        assert excinfo.value.details["reason"] == "file does not exist"

    def test_directory_is_not_a_file(self, temp_dir: Path) -> None:
        folder = temp_dir / "folder.raw"
        folder.mkdir()
        with pytest.raises(InvalidSourceError) as excinfo:
            SteppedRawRead(folder).reload()
        assert excinfo.value.details["reason"] == "not a regular file"

    def test_wrong_extension(self, write_raw, header_builder, record_packer) -> None:
        """A well formed file is still rejected when its extension is wrong."""
        payload = record_packer([0.0], [[1.0]], "=f8", "=f4")
        raw_file = write_raw(header_builder(points=1), payload, name="test.txt")
        with pytest.raises(InvalidSourceError) as excinfo:
            SteppedRawRead(raw_file).reload()
        assert excinfo.value.details["allowed_extensions"] == [".raw"]

    def test_configured_extension(self, write_raw, header_builder, record_packer) -> None:
        payload = record_packer([0.0], [[1.0]], "=f8", "=f4")
        raw_file = write_raw(header_builder(points=1), payload, name="test.qraw")
        raw = SteppedRawRead(raw_file, RawReaderConfig(raw_extensions=[".raw", "qraw"]))
        raw.reload()
        assert raw.get_stats().point_count == 1


class TestSteppedTransient:
    """Test decoding of a stepped transient run."""

    def test_two_steps_of_three(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)

        stats = raw.get_stats()
        assert stats == SimulationStats(
            variable_count=2, point_count=6, step_count=2, step_size=3
        )
        assert list(raw.get_steps()) == [0, 1]
        for step in (0, 1):
            assert [s.real for s in raw.get("x", step)] == [0.0, 1.0, 2.0]
        assert [s.real for s in raw.get("V(out)", 0)] == [10.0, 11.0, 12.0]
        assert [s.real for s in raw.get("V(out)", 1)] == [20.0, 21.0, 22.0]

    def test_header_fields(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)

        assert raw.encoding is Encoding.UTF8
        assert raw.mode is AnalysisMode.TRANSIENT
        assert raw.flags == {StorageFlag.REAL, StorageFlag.STEPPED}
        assert raw.date == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert raw.x_name == "time"
        assert raw.raw_params["Plotname"] == "Transient Analysis"
        assert raw.get_variables() == (Variable(VariableClass.VOLTAGE, "V(out)"),)

    def test_real_samples_have_no_imaginary_part(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)
        assert all(s.imaginary == 0.0 for s in raw.get("V(out)", 1))

    def test_get_x_is_first_step(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)
        assert raw.get_x() == raw.get("x", 0)
        assert raw.get_x() == (Sample(0.0), Sample(1.0), Sample(2.0))

    def test_returned_steps_cannot_change_decoded_data(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)
        first = raw.get("x")
        assert isinstance(first, tuple)
        with pytest.raises(AttributeError):
            first.clear()
        with pytest.raises(AttributeError):
            raw.get("V(out)", 1).append(None)
        with pytest.raises(TypeError):
            raw.get_x()[0] = Sample(99.0)
        assert len(raw.get("x")) == 3
        assert [s.real for s in raw.get("V(out)", 1)] == [20.0, 21.0, 22.0]

    def test_get_wave(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)
        wave = raw.get_wave("V(out)", 1)
        assert wave.dtype == np.float64
        assert np.array_equal(wave, [20.0, 21.0, 22.0])
        assert raw.get_wave("V(nope)") is None

    def test_trace_names(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)
        assert raw.get_trace_names() == ["x", "V(out)"]

    def test_not_found(self, stepped_transient: Path) -> None:
        raw = read_raw(stepped_transient)
        assert raw.get("V(nope)") is None
        assert raw.get("V(out)", 2) is None
        assert raw.get("x", -1) is None


class TestDatasetShape:
    """Test the shape invariants of the decoded dataset."""

    @pytest.mark.parametrize(
        "x",
        [
            [0.0, 1.0, 2.0, 3.0],
            [0.0, 1.0, 0.0, 1.0, 0.0, 1.0],
            [0.0, 0.5, 1.0, 0.0, 0.5, 1.0, 1.5],
        ],
    )
    def test_all_series_share_step_geometry(
        self, write_raw, header_builder, record_packer, x
    ) -> None:
        ys = [[10.0 + i for i in range(len(x))], [-float(i) for i in range(len(x))]]
        header = header_builder(variables=("time", "V(a)", "I(R1)"), points=len(x))
        raw = read_raw(write_raw(header, record_packer(x, ys, "=f8", "=f4")))

        x_lengths = [len(raw.get("x", step)) for step in raw.get_steps()]
        assert sum(x_lengths) == raw.get_stats().point_count
        for name in ("V(a)", "I(R1)"):
            lengths = [len(raw.get(name, step)) for step in raw.get_steps()]
            assert lengths == x_lengths
            assert raw.get(name, len(x_lengths)) is None

    def test_uneven_last_step(self, write_raw, header_builder, record_packer) -> None:
        """The last step is flushed whatever its length."""
        x = [0.0, 1.0, 2.0, 0.0, 1.0, 2.0, 3.0]
        y = [float(i) for i in range(7)]
        raw = read_raw(write_raw(header_builder(points=7), record_packer(x, [y], "=f8", "=f4")))

        stats = raw.get_stats()
        assert stats.step_size == 3
        assert stats.step_count == 7 // 3
        assert [s.real for s in raw.get("V(out)", 1)] == [3.0, 4.0, 5.0, 6.0]

    def test_single_step_keeps_initial_step_size(
        self, write_raw, header_builder, record_packer
    ) -> None:
        """Without a boundary step_size stays at the expected payload length."""
        x = [0.0, 1.0, 2.0]
        raw = read_raw(write_raw(header_builder(points=3), record_packer(x, [x], "=f8", "=f4")))

        stats = raw.get_stats()
        assert stats.step_count == 0
        assert stats.step_size == 3 * 8 + 3 * 4
        assert list(raw.get_steps()) == [0]
        assert len(raw.get_x()) == 3


class TestLayout:
    """Test the binary layout rules."""

    def test_double_flag_widens_y(self, write_raw, header_builder, record_packer) -> None:
        y = [0.1, 0.2]
        header = header_builder(flags="real forward double", points=2)
        raw = read_raw(write_raw(header, record_packer([0.0, 1.0], [y], "=f8", "=f8")))
        assert [s.real for s in raw.get("V(out)")] == y

    def test_ac_complex_pairs_are_bit_exact(
        self, write_raw, header_builder, record_packer
    ) -> None:
        x = [complex(1.0, 0.0), complex(10.0, 0.0), complex(100.0, 0.0)]
        y = [complex(0.1, -0.3), complex(1e-9, 2.5e12), complex(-0.0, 7.7)]
        header = header_builder(
            plotname="AC Analysis",
            flags="complex forward log",
            variables=("frequency", "V(out)"),
            points=3,
        )
        raw = read_raw(write_raw(header, record_packer(x, [y], "=c16", "=c16")))

        assert raw.mode is AnalysisMode.AC
        assert raw.x_name == "frequency"
        assert [complex(s) for s in raw.get_x()] == x
        wave = raw.get_wave("V(out)")
        assert wave.dtype == np.complex128
        assert wave.tobytes() == np.array(y, dtype=np.complex128).tobytes()

    def test_short_payload(self, write_raw, header_builder, record_packer) -> None:
        payload = record_packer([0.0, 1.0], [[1.0, 2.0]], "=f8", "=f4")
        raw_file = write_raw(header_builder(points=2), payload[:-1])
        with pytest.raises(LayoutMismatchError) as excinfo:
            SteppedRawRead(raw_file).reload()
        assert excinfo.value.details == {"expected": 24, "actual": 23}

    def test_long_payload(self, write_raw, header_builder, record_packer) -> None:
        payload = record_packer([0.0, 1.0], [[1.0, 2.0]], "=f8", "=f4")
        raw_file = write_raw(header_builder(points=2), payload + b"\x00" * 4)
        with pytest.raises(LayoutMismatchError):
            SteppedRawRead(raw_file).reload()

    def test_declared_variables_must_match_count(
        self, write_raw, header_builder, record_packer
    ) -> None:
        header = header_builder(points=1).replace("No. Variables: 2", "No. Variables: 3")
        payload = record_packer([0.0], [[1.0], [2.0]], "=f8", "=f4")
        with pytest.raises(LayoutMismatchError):
            SteppedRawRead(write_raw(header, payload)).reload()

    def test_repeated_variable_name(self, write_raw, header_builder, record_packer) -> None:
        header = header_builder(variables=("time", "V(a)", "V(a)"), points=1)
        payload = record_packer([0.0], [[1.0], [2.0]], "=f8", "=f4")
        with pytest.raises(LayoutMismatchError):
            SteppedRawRead(write_raw(header, payload)).reload()

    def test_variable_named_like_x_key(self, write_raw, header_builder, record_packer) -> None:
        header = header_builder(variables=("time", "x"), points=1)
        payload = record_packer([0.0], [[1.0]], "=f8", "=f4")
        with pytest.raises(LayoutMismatchError):
            SteppedRawRead(write_raw(header, payload)).reload()


class TestHeaderErrors:
    """Test failures caused by the header."""

    def test_malformed_point_count(self, write_raw, header_builder) -> None:
        header = header_builder(points=1).replace("No. Points: 1", "No. Points: 1.5")
        with pytest.raises(MalformedNumericFieldError) as excinfo:
            SteppedRawRead(write_raw(header)).reload()
        assert excinfo.value.details["field"] == "No. Points"

    def test_malformed_variable_count(self, write_raw, header_builder) -> None:
        header = header_builder().replace("No. Variables: 2", "No. Variables: -2")
        with pytest.raises(MalformedNumericFieldError):
            SteppedRawRead(write_raw(header)).reload()

    def test_undecodable(self, write_raw) -> None:
        raw_file = write_raw("Title: nothing to see\n", b"\x00\x01\x02")
        with pytest.raises(UndecodableHeaderError):
            SteppedRawRead(raw_file).reload()

    def test_ascii_values_file_has_no_binary_separator(self, write_raw) -> None:
        raw_file = write_raw("Title: ascii\nNo. Points: 0\nValues:\n0\t0.0\n")
        with pytest.raises(MissingBoundaryMarkerError):
            SteppedRawRead(raw_file).reload()

    def test_unknown_field_is_only_logged(
        self, write_raw, header_builder, record_packer, caplog
    ) -> None:
        header = header_builder(points=1, extra="Solver: Normal")
        payload = record_packer([0.0], [[1.0]], "=f8", "=f4")
        with caplog.at_level(logging.WARNING, logger="steppedraw"):
            raw = read_raw(write_raw(header, payload))
        assert "Unknown raw file header field: Solver" in caplog.text
        assert raw.raw_params["Solver"] == "Normal"

    def test_unparsable_date_falls_back_to_now(
        self, write_raw, header_builder, record_packer
    ) -> None:
        header = header_builder(points=1).replace(
            "Mon Jan 01 12:00:00 2024", "the day after tomorrow"
        )
        before = datetime.now(timezone.utc)
        raw = read_raw(write_raw(header, record_packer([0.0], [[1.0]], "=f8", "=f4")))
        assert before <= raw.date <= datetime.now(timezone.utc)

    def test_unknown_plotname_keeps_default_mode(
        self, write_raw, header_builder, record_packer
    ) -> None:
        header = header_builder(plotname="Transfer Function", points=1)
        raw = read_raw(write_raw(header, record_packer([0.0], [[1.0]], "=f8", "=f4")))
        assert raw.mode is AnalysisMode.TRANSIENT


class TestEncoding:
    """Test header encodings."""

    def test_utf16_header(self, write_raw, header_builder, record_packer) -> None:
        x = [0.0, 1e-3, 0.0, 1e-3]
        y = [1.0, 2.0, 3.0, 4.0]
        raw_file = write_raw(
            header_builder(points=4),
            record_packer(x, [y], "=f8", "=f4"),
            encoding="utf_16_le",
        )
        raw = read_raw(raw_file)

        assert raw.encoding is Encoding.UTF16
        assert raw.get_stats().step_count == 2
        assert [s.real for s in raw.get("V(out)", 1)] == [3.0, 4.0]

    def test_non_ascii_utf8_title(self, write_raw, header_builder, record_packer) -> None:
        header = header_builder(points=1).replace("test.asc", "résumé.asc")
        raw = read_raw(write_raw(header, record_packer([0.0], [[1.5]], "=f8", "=f4")))
        assert raw.raw_params["Title"].endswith("résumé.asc")
        assert raw.get("V(out)") == (Sample(1.5),)


class TestReload:
    """Test the reload lifecycle."""

    def test_new_reader_is_empty(self, temp_dir: Path) -> None:
        raw = SteppedRawRead(temp_dir / "later.raw")
        assert raw.get_x() is None
        assert raw.get_variables() == ()
        assert raw.get_stats() == SimulationStats()

    def test_reload_replaces_contents(
        self, write_raw, header_builder, record_packer
    ) -> None:
        raw_file = write_raw(header_builder(points=1), record_packer([0.0], [[1.0]], "=f8", "=f4"))
        raw = read_raw(raw_file)

        header = header_builder(variables=("time", "I(R1)"), points=2)
        write_raw(header, record_packer([0.0, 1.0], [[5.0, 6.0]], "=f8", "=f4"))
        raw.reload()

        assert raw.get("V(out)") is None
        assert [s.real for s in raw.get("I(R1)")] == [5.0, 6.0]
        assert raw.get_variables() == (Variable(VariableClass.CURRENT, "I(R1)"),)

    def test_failed_reload_keeps_previous_contents(
        self, write_raw, header_builder, record_packer
    ) -> None:
        raw_file = write_raw(header_builder(points=1), record_packer([0.0], [[1.0]], "=f8", "=f4"))
        raw = read_raw(raw_file)

        write_raw(header_builder(points=1), b"\x00")
        with pytest.raises(LayoutMismatchError):
            raw.reload()
        assert raw.get("V(out)") == (Sample(1.0),)
