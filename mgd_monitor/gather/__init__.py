"""Gathering mgd status into metric sinks."""

from mgd_monitor.gather.accumulator import (
    Accumulator,
    LineProtocolAccumulator,
    MemoryAccumulator,
    format_line,
)
from mgd_monitor.gather.plugin import (
    DESCRIPTION,
    SAMPLE_CONFIG,
    GatherResult,
    MgdInput,
    ServerGatherResult,
    StatusSource,
)


__all__ = [
    "Accumulator",
    "LineProtocolAccumulator",
    "MemoryAccumulator",
    "format_line",
    "MgdInput",
    "GatherResult",
    "ServerGatherResult",
    "StatusSource",
    "SAMPLE_CONFIG",
    "DESCRIPTION",
]
