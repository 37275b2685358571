"""Extraction rules for each section of a status document."""

from dataclasses import dataclass

from mgd_monitor.status.models import Section


# Nested object holding transaction time percentiles
PERCENTILES_KEY = "tr-percentiles"

# Percentile keys looked up under PERCENTILES_KEY; emitted as "tr-<key>"
PERCENTILE_KEYS: tuple[str, ...] = ("50", "75", "95", "99", "999")

RATE_KEYS: tuple[str, ...] = ("one-minute", "five-minute", "fifteen-minute")
SW_RATE_KEYS: tuple[str, ...] = (
    "sw-one-minute",
    "sw-five-minute",
    "sw-fifteen-minute",
)


@dataclass(frozen=True)
class PrefixRule:
    """Turns a dynamically named entry key into a secondary emission.

    A key ``<prefix><suffix>`` yields a ``measurement`` emission tagged
    ``tag=<suffix>`` whose fields are the key's nested object.
    """

    prefix: str
    tag: str
    measurement: str

    def match(self, key: str) -> str | None:
        """Get the tag value for a key.

        Args:
            key: Entry key to test.

        Returns:
            The key with the prefix stripped, or None if it does not match.
        """
        if key.startswith(self.prefix):
            return key[len(self.prefix) :]
        return None


# Evaluated in order; the first matching rule wins
DOWNSTREAM_PREFIX_RULES: tuple[PrefixRule, ...] = (
    PrefixRule(prefix="code-", tag="code", measurement="dsc"),
    PrefixRule(prefix="fbs-", tag="fbs", measurement="fbs"),
)


@dataclass(frozen=True)
class SectionRules:
    """How the entries of one section map to metrics.

    Attributes:
        section: Section the rules apply to.
        measurement: Measurement name of the primary emission.
        tag_keys: Entry keys copied into tags; each must be a string.
        value_keys: Entry keys copied as-is into fields when present.
        minute_keys: Entry keys truncated to int; each is required.
        aliases: (field, source minute key) pairs emitted as extra fields.
        percentiles: Whether tr-percentiles is required and expanded.
        prefix_rules: Rules producing secondary emissions.
    """

    section: Section
    measurement: str
    tag_keys: tuple[str, ...]
    value_keys: tuple[str, ...]
    minute_keys: tuple[str, ...] = RATE_KEYS
    aliases: tuple[tuple[str, str], ...] = ()
    percentiles: bool = False
    prefix_rules: tuple[PrefixRule, ...] = ()


INVERSESTREAM_RULES = SectionRules(
    section=Section.INVERSESTREAM,
    measurement="inversestream",
    tag_keys=("name",),
    value_keys=("ok", "jobs"),
    minute_keys=RATE_KEYS + SW_RATE_KEYS,
    # "sw" repeats fifteen-minute
    aliases=(("sw", "fifteen-minute"),),
)

UPSTREAM_RULES = SectionRules(
    section=Section.UPSTREAM,
    measurement="upstream",
    tag_keys=("name", "src"),
    value_keys=(
        "ok",
        "jobs",
        "fail",
        "idling",
        "success",
        "current",
        "tr-min",
        "tr-max",
    ),
    percentiles=True,
)

DOWNSTREAM_RULES = SectionRules(
    section=Section.DOWNSTREAM,
    measurement="downsteram",
    tag_keys=("name", "app"),
    value_keys=("ok", "jobs", "fail", "success", "current", "tr-min", "tr-max"),
    percentiles=True,
    prefix_rules=DOWNSTREAM_PREFIX_RULES,
)

FRONTSTREAM_RULES = SectionRules(
    section=Section.FRONTSTREAM,
    measurement="frontstream",
    tag_keys=("name",),
    value_keys=("ok", "jobs", "fail"),
)

# Mapped in this order
SECTION_RULES: tuple[SectionRules, ...] = (
    INVERSESTREAM_RULES,
    UPSTREAM_RULES,
    DOWNSTREAM_RULES,
    FRONTSTREAM_RULES,
)
