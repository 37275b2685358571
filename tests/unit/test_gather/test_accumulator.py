"""Unit tests for metric sinks."""

import io

import pytest

from mgd_monitor.gather.accumulator import (
    Accumulator,
    LineProtocolAccumulator,
    MemoryAccumulator,
    escape_key,
    escape_measurement,
    format_field_value,
    format_line,
)


class TestMemoryAccumulator:
    """Tests for MemoryAccumulator."""

    def test_records_in_order(self) -> None:
        """Emissions are kept in call order."""
        acc = MemoryAccumulator()

        acc.add_fields("upstream", {"ok": True}, {"server": "a:1"})
        acc.add_fields("dsc", {"count": 3}, {"server": "a:1", "code": "404"})

        assert [e.name for e in acc.emissions] == ["upstream", "dsc"]
        assert acc.emissions[1].tags == {"server": "a:1", "code": "404"}

    def test_duplicates_kept(self) -> None:
        """Identical calls are each recorded."""
        acc = MemoryAccumulator()

        for _ in range(3):
            acc.add_fields("frontstream", {"jobs": 1}, {"server": "a:1"})

        assert len(acc) == 3

    def test_copies_inputs(self) -> None:
        """Later mutation of caller dicts does not leak in."""
        acc = MemoryAccumulator()
        tags = {"server": "a:1"}

        acc.add_fields("upstream", {"ok": True}, tags)
        tags["server"] = "b:2"

        assert acc.emissions[0].tags == {"server": "a:1"}

    def test_by_name_and_clear(self) -> None:
        """Emissions can be filtered and dropped."""
        acc = MemoryAccumulator()
        acc.add_fields("dsc", {"count": 1}, {})
        acc.add_fields("fbs", {"hits": 1}, {})

        assert len(acc.by_name("dsc")) == 1

        acc.clear()

        assert len(acc) == 0

    def test_satisfies_protocol(self) -> None:
        """Both sinks are accumulators."""
        assert isinstance(MemoryAccumulator(), Accumulator)
        assert isinstance(LineProtocolAccumulator(io.StringIO()), Accumulator)


class TestEscaping:
    """Tests for line protocol escaping."""

    def test_measurement(self) -> None:
        """Commas and spaces are escaped in measurement names."""
        assert escape_measurement("a b,c=d") == "a\\ b\\,c=d"

    def test_key(self) -> None:
        """Commas, equals signs and spaces are escaped in keys."""
        assert escape_key("a b,c=d") == "a\\ b\\,c\\=d"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("a\nb", "a\\nb"), ("a\rb", "a\\rb"), ("a\tb", "a\\tb")],
    )
    def test_line_breaks(self, raw: str, expected: str) -> None:
        """Control characters are written as backslash sequences."""
        assert escape_key(raw) == expected
        assert escape_measurement(raw) == expected


class TestFormatFieldValue:
    """Tests for format_field_value."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, "true"),
            (False, "false"),
            (7, "7i"),
            (-3, "-3i"),
            (1.5, "1.5"),
            (120.0, "120.0"),
            ("billing", '"billing"'),
            ('say "hi"', '"say \\"hi\\""'),
            ("a\\b", '"a\\\\b"'),
            ("two\nlines", '"two\\nlines"'),
        ],
    )
    def test_values(self, value: bool | int | float | str, expected: str) -> None:
        """Each field type renders in its line protocol syntax."""
        assert format_field_value(value) == expected


class TestFormatLine:
    """Tests for format_line."""

    def test_sorted_tags_and_fields(self) -> None:
        """Tags and fields appear in key order."""
        line = format_line(
            "dsc",
            {"rate": 1.5, "count": 120},
            {"server": "a:1", "code": "200", "name": "down-a"},
            1_700_000_000_000_000_000,
        )

        assert line == (
            "dsc,code=200,name=down-a,server=a:1 "
            "count=120i,rate=1.5 1700000000000000000"
        )

    def test_empty_tag_values_skipped(self) -> None:
        """Tags with empty values are left out."""
        line = format_line("fbs", {"hits": 7}, {"fbs": "", "server": "a:1"}, 1)

        assert line == "fbs,server=a:1 hits=7i 1"

    def test_tag_value_cannot_split_line(self) -> None:
        """A newline in a document value stays inside one line."""
        line = format_line(
            "upstream", {"jobs": 1, "note": "x\ny"}, {"name": "a\nevil x=9i"}, 1
        )

        assert line is not None
        assert "\n" not in line
        assert line == 'upstream,name=a\\nevil\\ x\\=9i jobs=1i,note="x\\ny" 1'

    def test_no_fields(self) -> None:
        """An emission without fields has no line."""
        assert format_line("dsc", {}, {"server": "a:1"}, 1) is None


class TestLineProtocolAccumulator:
    """Tests for LineProtocolAccumulator."""

    def test_writes_lines(self) -> None:
        """Each emission becomes one line stamped by the clock."""
        output = io.StringIO()
        acc = LineProtocolAccumulator(output, clock=lambda: 42)

        acc.add_fields("frontstream", {"ok": True}, {"server": ":50000"})
        acc.add_fields("frontstream", {"ok": True}, {"server": ":50000"})
        acc.flush()

        assert output.getvalue() == (
            "frontstream,server=:50000 ok=true 42\n"
            "frontstream,server=:50000 ok=true 42\n"
        )
        assert acc.lines_written == 2

    def test_skips_empty_emissions(self) -> None:
        """Emissions without fields produce no output."""
        output = io.StringIO()
        acc = LineProtocolAccumulator(output, clock=lambda: 1)

        acc.add_fields("dsc", {}, {"server": "a:1"})

        assert output.getvalue() == ""
        assert acc.lines_written == 0
