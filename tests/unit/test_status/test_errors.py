"""Unit tests for gather error types."""

import pytest
from pydantic import ValidationError

from mgd_monitor.status.errors import (
    DecodeError,
    ErrorRecord,
    GatherError,
    GatherErrorClass,
    ShapeError,
    TransportError,
)


class TestGatherErrorClass:
    """Tests for GatherErrorClass enum."""

    def test_all_classes_defined(self) -> None:
        """Verify all error classes are defined."""
        assert GatherErrorClass.TRANSPORT == "TRANSPORT"
        assert GatherErrorClass.DECODE == "DECODE"
        assert GatherErrorClass.SHAPE == "SHAPE"
        assert len(GatherErrorClass) == 3


class TestErrorKinds:
    """Tests for the error subclasses."""

    def test_transport_error(self) -> None:
        """Transport errors carry the fetch classification."""
        error = TransportError(
            "Connection failed",
            server="a:1",
            fetch_error_class="CONNECTION_ERROR",
        )

        assert isinstance(error, GatherError)
        assert error.error_class == GatherErrorClass.TRANSPORT
        assert error.details == {"fetch_error_class": "CONNECTION_ERROR"}
        assert str(error) == "Connection failed"

    def test_decode_error(self) -> None:
        """Decode errors carry line and column when known."""
        error = DecodeError("Invalid JSON", line=3, column=7)

        assert error.error_class == GatherErrorClass.DECODE
        assert error.details == {"line": 3, "column": 7}

    def test_shape_error(self) -> None:
        """Shape errors always name the key."""
        error = ShapeError(
            "bad",
            key="name",
            section="upstream",
            expected="string",
            actual="number",
        )

        assert error.error_class == GatherErrorClass.SHAPE
        assert error.details == {
            "key": "name",
            "section": "upstream",
            "expected": "string",
            "actual": "number",
        }

    def test_to_dict(self) -> None:
        """Errors serialize for logging."""
        error = DecodeError("Invalid JSON", server="b:50000")

        assert error.to_dict() == {
            "error_class": "DECODE",
            "message": "Invalid JSON",
            "server": "b:50000",
            "details": {},
        }


class TestErrorRecord:
    """Tests for ErrorRecord."""

    def test_from_exception(self) -> None:
        """Records mirror the exception."""
        error = ShapeError("bad", key="src", server="a:1")

        record = ErrorRecord.from_exception(error)

        assert record.error_class == GatherErrorClass.SHAPE
        assert record.server == "a:1"
        assert record.details == {"key": "src"}

    def test_empty_message_rejected(self) -> None:
        """A record needs a message."""
        with pytest.raises(ValidationError):
            ErrorRecord(error_class=GatherErrorClass.DECODE, message="")

    def test_frozen(self) -> None:
        """Records are immutable."""
        record = ErrorRecord(error_class=GatherErrorClass.DECODE, message="x")

        with pytest.raises(ValidationError):
            record.message = "y"  # type: ignore[misc]
