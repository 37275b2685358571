"""Data models for the fetch layer."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from mgd_monitor.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class FetchErrorClass(str, Enum):
    """Classification of fetch failures for metrics and logs.

    - NETWORK_TIMEOUT: Request timed out or ran past its deadline
    - CONNECTION_ERROR: Could not establish connection (refused, DNS)
    - RESPONSE_SIZE_EXCEEDED: Response exceeded max size limit
    - INVALID_ADDRESS: Address could not be turned into a URL
    - UNKNOWN: Any other transport failure
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    UNKNOWN = "UNKNOWN"


class FetchResult(BaseModel):
    """A received HTTP response.

    Failures never produce a FetchResult; they raise TransportError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: Annotated[str, Field(min_length=1, description="Server address")]
    url: Annotated[str, Field(min_length=1, description="Requested URL")]
    status_code: int = Field(ge=100, le=599, description="HTTP status code")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")

    @property
    def is_success(self) -> bool:
        """Check if the response has a 2xx status."""
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body_bytes)


class ResponseSizeExceededError(Exception):
    """Raised when response size exceeds the configured limit."""


class FetchDeadlineExceededError(Exception):
    """Raised when a fetch runs past its overall deadline."""
