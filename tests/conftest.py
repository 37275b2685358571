"""Shared pytest fixtures."""

from collections.abc import Generator

import pytest
import structlog

from mgd_monitor.observability.metrics import PollMetrics


@pytest.fixture(autouse=True)
def reset_observability() -> Generator[None, None, None]:
    """Give every test fresh metrics and default logging."""
    PollMetrics.reset()
    yield
    PollMetrics.reset()
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
