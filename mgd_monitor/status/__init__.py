"""Status document decoding and mapping to metrics.

This module turns the JSON status document served by an mgd server into
metric emissions:
- Decoding with shape checks on the four stream sections
- Checked accessors that fail fast with a ShapeError naming the key
- Per-section extraction rules, including prefix-dispatched secondary
  emissions for downstream entries
"""

from mgd_monitor.status.decoder import decode_status
from mgd_monitor.status.errors import (
    DecodeError,
    ErrorRecord,
    GatherError,
    GatherErrorClass,
    ShapeError,
    TransportError,
)
from mgd_monitor.status.mapper import StatusMapper
from mgd_monitor.status.models import (
    FieldValue,
    MetricEmission,
    Section,
    SectionEntry,
    ServerInfo,
    StatusDocument,
)
from mgd_monitor.status.rules import (
    DOWNSTREAM_PREFIX_RULES,
    SECTION_RULES,
    PrefixRule,
    SectionRules,
)


__all__ = [
    # Decoder
    "decode_status",
    # Mapper
    "StatusMapper",
    "SectionRules",
    "PrefixRule",
    "SECTION_RULES",
    "DOWNSTREAM_PREFIX_RULES",
    # Models
    "FieldValue",
    "MetricEmission",
    "Section",
    "SectionEntry",
    "ServerInfo",
    "StatusDocument",
    # Errors
    "GatherError",
    "GatherErrorClass",
    "TransportError",
    "DecodeError",
    "ShapeError",
    "ErrorRecord",
]
