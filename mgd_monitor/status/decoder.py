"""Decode raw response bodies into status documents."""

import json
from collections.abc import Mapping
from typing import Any

from mgd_monitor.status.accessors import is_finite_number, json_type
from mgd_monitor.status.errors import DecodeError
from mgd_monitor.status.models import (
    Section,
    SectionEntry,
    ServerInfo,
    StatusDocument,
)


# JSON keys accepted for each section, in lookup order
SECTION_KEYS: dict[Section, tuple[str, ...]] = {
    Section.INVERSESTREAM: ("inversestream",),
    Section.UPSTREAM: ("upstream",),
    Section.DOWNSTREAM: ("downsteram", "downstream"),
    Section.FRONTSTREAM: ("frontstream",),
}


def decode_status(body: bytes) -> StatusDocument:
    """Decode a status document from a response body.

    Top-level keys are matched case-insensitively. Absent or null
    sections decode to empty lists.

    Args:
        body: Raw response body.

    Returns:
        The decoded StatusDocument.

    Raises:
        DecodeError: If the body is not valid JSON or not shaped like a
            status document.
    """
    try:
        raw = json.loads(body)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e.msg}"
        raise DecodeError(msg, line=e.lineno, column=e.colno) from e
    except UnicodeDecodeError as e:
        msg = f"Body is not valid UTF-8: {e.reason}"
        raise DecodeError(msg) from e

    if not isinstance(raw, dict):
        msg = f"Expected a JSON object, got {json_type(raw)}"
        raise DecodeError(msg)

    folded = {key.lower(): value for key, value in raw.items()}

    sections = {
        section: _decode_section(section, _lookup(folded, keys))
        for section, keys in SECTION_KEYS.items()
    }

    return StatusDocument(
        inversestream=sections[Section.INVERSESTREAM],
        upstream=sections[Section.UPSTREAM],
        downstream=sections[Section.DOWNSTREAM],
        frontstream=sections[Section.FRONTSTREAM],
        server=_decode_server(folded.get("server")),
    )


def _lookup(folded: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in folded:
            return folded[key]
    return None


def _decode_section(section: Section, value: Any) -> list[SectionEntry]:
    """Validate one section and return its entries.

    Args:
        section: Section being decoded.
        value: Raw JSON value of the section.

    Returns:
        List of entries in document order.

    Raises:
        DecodeError: If the section is not a list of objects.
    """
    if value is None:
        return []

    if not isinstance(value, list):
        msg = f"Section '{section.value}' must be a list, got {json_type(value)}"
        raise DecodeError(msg)

    for index, entry in enumerate(value):
        if not isinstance(entry, dict):
            msg = (
                f"Section '{section.value}' entry {index} must be an object, "
                f"got {json_type(entry)}"
            )
            raise DecodeError(msg)

    return list(value)


def _decode_server(value: Any) -> ServerInfo | None:
    if value is None:
        return None

    if not isinstance(value, dict):
        msg = f"'server' must be an object, got {json_type(value)}"
        raise DecodeError(msg)

    name = value.get("name")
    start_at = value.get("start-at")
    return ServerInfo(
        name=name if isinstance(name, str) else None,
        start_at=int(start_at) if is_finite_number(start_at) else None,
    )
