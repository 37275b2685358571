"""Observability module for logging and metrics."""

from mgd_monitor.observability.logging import (
    bind_pass_context,
    clear_pass_context,
    configure_logging,
    parse_log_level,
)
from mgd_monitor.observability.metrics import PollMetrics


__all__ = [
    "PollMetrics",
    "bind_pass_context",
    "clear_pass_context",
    "configure_logging",
    "parse_log_level",
]
