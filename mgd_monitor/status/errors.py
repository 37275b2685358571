"""Error types raised while gathering mgd status."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


ErrorDetails = dict[str, str | int | bool | None]


class GatherErrorClass(str, Enum):
    """Classification of gather errors.

    - TRANSPORT: HTTP/network errors while fetching the status document
    - DECODE: Body is not JSON or not shaped like a status document
    - SHAPE: An entry lacks an expected key or has the wrong type
    """

    TRANSPORT = "TRANSPORT"
    DECODE = "DECODE"
    SHAPE = "SHAPE"


class GatherError(Exception):
    """Base exception for gather errors.

    Every gather error aborts the pass it was raised in.
    """

    def __init__(
        self,
        error_class: GatherErrorClass,
        message: str,
        server: str | None = None,
        details: ErrorDetails | None = None,
    ) -> None:
        """Initialize the gather error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            server: Address of the server being gathered.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.server = server
        self.details = details or {}

    def to_dict(self) -> dict[str, str | None | ErrorDetails]:
        """Convert error to dictionary for logging."""
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "server": self.server,
            "details": self.details,
        }


class TransportError(GatherError):
    """Fetching the status document failed (DNS, refused, timeout, ...)."""

    def __init__(
        self,
        message: str,
        server: str | None = None,
        fetch_error_class: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize the transport error.

        Args:
            message: Human-readable error message.
            server: Address of the server being fetched.
            fetch_error_class: Fetch layer classification of the failure.
            status_code: HTTP status code if a response was received.
        """
        details: ErrorDetails = {}
        if fetch_error_class is not None:
            details["fetch_error_class"] = fetch_error_class
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            error_class=GatherErrorClass.TRANSPORT,
            message=message,
            server=server,
            details=details,
        )
        self.fetch_error_class = fetch_error_class
        self.status_code = status_code


class DecodeError(GatherError):
    """The response body is not a well-formed status document."""

    def __init__(
        self,
        message: str,
        server: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize the decode error.

        Args:
            message: Human-readable error message.
            server: Address of the server whose body failed to decode.
            line: Line number where JSON parsing failed.
            column: Column number where JSON parsing failed.
        """
        details: ErrorDetails = {}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column

        super().__init__(
            error_class=GatherErrorClass.DECODE,
            message=message,
            server=server,
            details=details,
        )
        self.line = line
        self.column = column


class ShapeError(GatherError):
    """A section entry is missing a key or holds a value of the wrong type."""

    def __init__(
        self,
        message: str,
        key: str,
        section: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
        server: str | None = None,
    ) -> None:
        """Initialize the shape error.

        Args:
            message: Human-readable error message.
            key: The offending entry key.
            section: Section the entry belongs to.
            expected: Expected type.
            actual: Actual type found ("missing" when absent).
            server: Address of the server whose document was mapped.
        """
        details: ErrorDetails = {"key": key}
        if section is not None:
            details["section"] = section
        if expected is not None:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual

        super().__init__(
            error_class=GatherErrorClass.SHAPE,
            message=message,
            server=server,
            details=details,
        )
        self.key = key
        self.section = section
        self.expected = expected
        self.actual = actual


class ErrorRecord(BaseModel):
    """Serializable error record for logs and status output."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: GatherErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    server: str | None = Field(default=None, description="Server address")
    details: ErrorDetails = Field(
        default_factory=dict, description="Additional error details"
    )

    @classmethod
    def from_exception(cls, error: GatherError) -> "ErrorRecord":
        """Create an ErrorRecord from a GatherError exception.

        Args:
            error: The exception to convert.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            error_class=error.error_class,
            message=error.message,
            server=error.server,
            details=error.details,
        )
