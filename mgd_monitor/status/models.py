"""Data models for mgd status documents and the metrics mapped from them."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# Primitive types accepted by an accumulator as field values
FieldValue = bool | int | float | str

# One record of a section, straight from the decoded JSON
SectionEntry = Mapping[str, Any]


class Section(str, Enum):
    """Top-level sections of a status document.

    Values are the JSON keys served by mgd. ``downsteram`` is misspelled
    upstream and doubles as the measurement name, so it is kept verbatim.
    """

    INVERSESTREAM = "inversestream"
    UPSTREAM = "upstream"
    DOWNSTREAM = "downsteram"
    FRONTSTREAM = "frontstream"


# Order in which sections are mapped
SECTION_ORDER: tuple[Section, ...] = (
    Section.INVERSESTREAM,
    Section.UPSTREAM,
    Section.DOWNSTREAM,
    Section.FRONTSTREAM,
)


@dataclass(frozen=True)
class ServerInfo:
    """The ``server`` block of a status document."""

    name: str | None = None
    start_at: int | None = None


@dataclass(frozen=True)
class StatusDocument:
    """A decoded mgd status document.

    Each section is an ordered list of entries; names may repeat.
    """

    inversestream: list[SectionEntry] = field(default_factory=list)
    upstream: list[SectionEntry] = field(default_factory=list)
    downstream: list[SectionEntry] = field(default_factory=list)
    frontstream: list[SectionEntry] = field(default_factory=list)
    server: ServerInfo | None = None

    def entries(self, section: Section) -> list[SectionEntry]:
        """Get the entries of a section.

        Args:
            section: Section to look up.

        Returns:
            Entries in document order.
        """
        by_section = {
            Section.INVERSESTREAM: self.inversestream,
            Section.UPSTREAM: self.upstream,
            Section.DOWNSTREAM: self.downstream,
            Section.FRONTSTREAM: self.frontstream,
        }
        return by_section[section]

    @property
    def entry_count(self) -> int:
        """Total number of entries across all sections."""
        return sum(len(self.entries(section)) for section in SECTION_ORDER)


@dataclass(frozen=True)
class MetricEmission:
    """A single metric record: measurement name, tags and fields."""

    name: str
    tags: dict[str, str]
    fields: dict[str, FieldValue]

    def __post_init__(self) -> None:
        # Own copies so no two emissions share a mutable map
        object.__setattr__(self, "tags", dict(self.tags))
        object.__setattr__(self, "fields", dict(self.fields))
