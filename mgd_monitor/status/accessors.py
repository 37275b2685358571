"""Checked accessors over loosely typed section entries.

Each ``require_*`` helper returns a typed value or raises a ShapeError
naming the offending key, so a malformed entry fails the whole pass
instead of being skipped.
"""

import math
from collections.abc import Mapping
from typing import Any

from mgd_monitor.status.errors import ShapeError
from mgd_monitor.status.models import FieldValue, Section, SectionEntry


def json_type(value: Any) -> str:
    """Name the JSON type of a decoded value.

    Args:
        value: A value produced by ``json.loads``.

    Returns:
        One of null, boolean, number, string, array, object.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def is_finite_number(value: Any) -> bool:
    """Check for a finite JSON number (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def is_field_value(value: Any) -> bool:
    """Check whether a value can be carried as a metric field."""
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, bool | int | str)


def _shape_error(
    entry: SectionEntry,
    key: str,
    expected: str,
    section: Section | None,
) -> ShapeError:
    actual = json_type(entry[key]) if key in entry else "missing"
    where = f" in {section.value} entry" if section is not None else ""
    msg = f"Key '{key}'{where} must be {expected}, got {actual}"
    return ShapeError(
        msg,
        key=key,
        section=section.value if section is not None else None,
        expected=expected,
        actual=actual,
    )


def require_str(
    entry: SectionEntry,
    key: str,
    section: Section | None = None,
) -> str:
    """Get a string value.

    Raises:
        ShapeError: If the key is absent or not a string.
    """
    value = entry.get(key)
    if not isinstance(value, str):
        raise _shape_error(entry, key, "string", section)
    return value


def require_mapping(
    entry: SectionEntry,
    key: str,
    section: Section | None = None,
) -> Mapping[str, Any]:
    """Get a nested object value.

    Raises:
        ShapeError: If the key is absent or not an object.
    """
    value = entry.get(key)
    if not isinstance(value, Mapping):
        raise _shape_error(entry, key, "object", section)
    return value


def require_minutes(
    entry: SectionEntry,
    key: str,
    section: Section | None = None,
) -> int:
    """Get a rate counter truncated to an integer.

    mgd encodes every number as a float; truncation toward zero is the
    coercion (12.9 becomes 12, -3.7 becomes -3).

    Raises:
        ShapeError: If the key is absent or not a finite number.
    """
    value = entry.get(key)
    if not is_finite_number(value):
        raise _shape_error(entry, key, "number", section)
    return int(value)


def optional_value(entry: Mapping[str, Any], key: str) -> FieldValue | None:
    """Get a pass-through field value.

    Returns:
        The value, or None when absent, null or not a primitive.
    """
    value = entry.get(key)
    if value is None or not is_field_value(value):
        return None
    return value  # type: ignore[no-any-return]


def primitive_fields(values: Mapping[str, Any]) -> dict[str, FieldValue]:
    """Copy the primitive members of a nested object into a field map.

    Null and nested values are dropped, matching what a metrics sink
    accepts.
    """
    return {key: value for key, value in values.items() if is_field_value(value)}
