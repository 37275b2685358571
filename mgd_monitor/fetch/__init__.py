"""HTTP fetch layer for mgd status documents.

This module provides one blocking GET per server with:
- Default port applied to addresses without one
- A single fixed deadline for the whole request
- Maximum response size enforcement
- Transport failures surfaced as TransportError
"""

from mgd_monitor.fetch.address import (
    build_status_url,
    normalize_address,
    split_host_port,
)
from mgd_monitor.fetch.client import StatusFetcher
from mgd_monitor.fetch.config import FetchConfig
from mgd_monitor.fetch.constants import (
    DEFAULT_ADDRESS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
)
from mgd_monitor.fetch.models import (
    FetchDeadlineExceededError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
)


__all__ = [
    # Client
    "StatusFetcher",
    # Config
    "FetchConfig",
    # Address
    "build_status_url",
    "normalize_address",
    "split_host_port",
    # Models
    "FetchDeadlineExceededError",
    "FetchErrorClass",
    "FetchResult",
    "ResponseSizeExceededError",
    # Constants
    "DEFAULT_ADDRESS",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT_SECONDS",
]
