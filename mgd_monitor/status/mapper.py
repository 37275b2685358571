"""Map status documents to metric emissions."""

from collections.abc import Mapping

import structlog

from mgd_monitor.status.accessors import (
    optional_value,
    primitive_fields,
    require_mapping,
    require_minutes,
    require_str,
)
from mgd_monitor.status.errors import ShapeError
from mgd_monitor.status.models import (
    FieldValue,
    MetricEmission,
    SectionEntry,
    StatusDocument,
)
from mgd_monitor.status.rules import (
    PERCENTILE_KEYS,
    PERCENTILES_KEY,
    SECTION_RULES,
    SectionRules,
)


logger = structlog.get_logger()


class StatusMapper:
    """Flattens a status document into metric emissions.

    Every entry yields one primary emission under its section's
    measurement. Sections with prefix rules (downstream) also yield one
    secondary emission per matching key. The mapper holds no state
    between documents and never mutates its inputs.
    """

    def __init__(
        self,
        section_rules: tuple[SectionRules, ...] = SECTION_RULES,
    ) -> None:
        """Initialize the mapper.

        Args:
            section_rules: Rules for each section, in mapping order.
        """
        self._section_rules = section_rules

    def map(
        self,
        document: StatusDocument,
        base_tags: Mapping[str, str],
    ) -> list[MetricEmission]:
        """Map a document to emissions.

        Args:
            document: Decoded status document.
            base_tags: Tags attached to every emission (the server tag).

        Returns:
            Emissions in section order, then entry order.

        Raises:
            ShapeError: If any entry lacks an expected key or has the
                wrong type. Nothing is returned for the document.
        """
        emissions: list[MetricEmission] = []
        for rules in self._section_rules:
            for index, entry in enumerate(document.entries(rules.section)):
                try:
                    emissions.extend(self.map_entry(rules, entry, base_tags))
                except ShapeError as e:
                    e.details["entry_index"] = index
                    raise

        logger.debug(
            "status_mapped",
            component="mapper",
            entries=document.entry_count,
            emissions=len(emissions),
        )
        return emissions

    def map_entry(
        self,
        rules: SectionRules,
        entry: SectionEntry,
        base_tags: Mapping[str, str],
    ) -> list[MetricEmission]:
        """Map one entry to its primary and secondary emissions.

        Args:
            rules: Rules for the entry's section.
            entry: The raw entry.
            base_tags: Tags attached to every emission.

        Returns:
            Any secondary emissions, then the primary emission.
        """
        tags = dict(base_tags)
        for key in rules.tag_keys:
            tags[key] = require_str(entry, key, rules.section)

        fields = self._primary_fields(rules, entry)
        emissions = self._secondary_emissions(rules, entry, tags)
        emissions.append(
            MetricEmission(name=rules.measurement, tags=tags, fields=fields)
        )
        return emissions

    def _primary_fields(
        self,
        rules: SectionRules,
        entry: SectionEntry,
    ) -> dict[str, FieldValue]:
        """Build the field set of a primary emission.

        Args:
            rules: Rules for the entry's section.
            entry: The raw entry.

        Returns:
            Field map; absent pass-through values are omitted.
        """
        fields: dict[str, FieldValue] = {}

        for key in rules.value_keys:
            value = optional_value(entry, key)
            if value is not None:
                fields[key] = value

        for key in rules.minute_keys:
            fields[key] = require_minutes(entry, key, rules.section)

        for alias, source in rules.aliases:
            fields[alias] = require_minutes(entry, source, rules.section)

        if rules.percentiles:
            percentiles = require_mapping(entry, PERCENTILES_KEY, rules.section)
            for key in PERCENTILE_KEYS:
                value = optional_value(percentiles, key)
                if value is not None:
                    fields[f"tr-{key}"] = value

        return fields

    def _secondary_emissions(
        self,
        rules: SectionRules,
        entry: SectionEntry,
        tags: Mapping[str, str],
    ) -> list[MetricEmission]:
        """Build emissions for dynamically named keys.

        Args:
            rules: Rules for the entry's section.
            entry: The raw entry.
            tags: Tags of the primary emission.

        Returns:
            One emission per key matching a prefix rule, in key order.
        """
        emissions: list[MetricEmission] = []
        for key in entry:
            for rule in rules.prefix_rules:
                tag_value = rule.match(key)
                if tag_value is None:
                    continue
                values = require_mapping(entry, key, rules.section)
                emissions.append(
                    MetricEmission(
                        name=rule.measurement,
                        tags={**tags, rule.tag: tag_value},
                        fields=primitive_fields(values),
                    )
                )
                break
        return emissions
