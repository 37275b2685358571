"""Metric sinks that receive emissions from a gather pass."""

import time
from collections.abc import Callable, Mapping
from typing import Protocol, TextIO, runtime_checkable

import structlog

from mgd_monitor.status.models import FieldValue, MetricEmission


logger = structlog.get_logger()


@runtime_checkable
class Accumulator(Protocol):
    """Protocol for metric sinks.

    Called once per emission; must record every call, including calls
    that are structurally identical to earlier ones.
    """

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, FieldValue],
        tags: Mapping[str, str],
    ) -> None:
        """Record one metric.

        Args:
            measurement: Measurement name.
            fields: Field key to value.
            tags: Tag key to value.
        """
        ...


class MemoryAccumulator:
    """Keeps every emission in memory, in call order."""

    def __init__(self) -> None:
        self._emissions: list[MetricEmission] = []

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, FieldValue],
        tags: Mapping[str, str],
    ) -> None:
        self._emissions.append(
            MetricEmission(name=measurement, tags=dict(tags), fields=dict(fields))
        )

    @property
    def emissions(self) -> list[MetricEmission]:
        """Get a copy of the recorded emissions."""
        return list(self._emissions)

    def by_name(self, measurement: str) -> list[MetricEmission]:
        """Get the recorded emissions of one measurement."""
        return [e for e in self._emissions if e.name == measurement]

    def clear(self) -> None:
        """Drop all recorded emissions."""
        self._emissions.clear()

    def __len__(self) -> int:
        return len(self._emissions)


# Control characters that would otherwise end or split a line
LINE_BREAK_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _escape_line_breaks(value: str) -> str:
    for char, escaped in LINE_BREAK_ESCAPES.items():
        value = value.replace(char, escaped)
    return value


def _escape(value: str, special: str) -> str:
    for char in special:
        value = value.replace(char, f"\\{char}")
    return _escape_line_breaks(value)


def escape_measurement(name: str) -> str:
    """Escape a measurement name for line protocol."""
    return _escape(name, ", ")


def escape_key(key: str) -> str:
    """Escape a tag key, tag value or field key for line protocol."""
    return _escape(key, ",= ")


def format_field_value(value: FieldValue) -> str:
    """Render a field value in line protocol syntax.

    Booleans render as true/false, integers carry an ``i`` suffix and
    strings are double-quoted with line breaks escaped.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{_escape_line_breaks(escaped)}"'


def format_line(
    measurement: str,
    fields: Mapping[str, FieldValue],
    tags: Mapping[str, str],
    timestamp_ns: int,
) -> str | None:
    """Render one metric as an InfluxDB line protocol line.

    Tags and fields are sorted by key. Tags with empty values are left
    out.

    Returns:
        The line, or None when there are no fields to write.
    """
    if not fields:
        return None

    tag_part = "".join(
        f",{escape_key(key)}={escape_key(value)}"
        for key, value in sorted(tags.items())
        if value
    )
    field_part = ",".join(
        f"{escape_key(key)}={format_field_value(value)}"
        for key, value in sorted(fields.items())
    )
    return f"{escape_measurement(measurement)}{tag_part} {field_part} {timestamp_ns}"


class LineProtocolAccumulator:
    """Writes each emission as a line protocol line to a text stream."""

    def __init__(
        self,
        output: TextIO,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        """Initialize the accumulator.

        Args:
            output: Stream the lines are written to.
            clock: Source of nanosecond timestamps.
        """
        self._output = output
        self._clock = clock
        self._lines_written = 0

    @property
    def lines_written(self) -> int:
        """Number of lines written so far."""
        return self._lines_written

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, FieldValue],
        tags: Mapping[str, str],
    ) -> None:
        line = format_line(measurement, fields, tags, self._clock())
        if line is None:
            logger.debug(
                "emission_without_fields",
                component="accumulator",
                measurement=measurement,
            )
            return
        self._output.write(line + "\n")
        self._lines_written += 1

    def flush(self) -> None:
        """Flush the underlying stream."""
        self._output.flush()
