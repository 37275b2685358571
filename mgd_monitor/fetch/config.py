"""Configuration model for the fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from mgd_monitor.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
)


class FetchConfig(BaseModel):
    """Configuration for status fetches.

    One timeout bounds every fetch; there is no per-call override and no
    retry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "mgd-monitor/0.1.0"
    )
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
