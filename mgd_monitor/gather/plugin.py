"""The mgd input: fetch, decode, map and accumulate for each server."""

import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from mgd_monitor.fetch.address import normalize_address
from mgd_monitor.fetch.client import StatusFetcher
from mgd_monitor.fetch.constants import DEFAULT_ADDRESS
from mgd_monitor.fetch.models import FetchResult
from mgd_monitor.gather.accumulator import Accumulator
from mgd_monitor.observability.logging import bind_pass_context, clear_pass_context
from mgd_monitor.observability.metrics import PollMetrics
from mgd_monitor.status.decoder import decode_status
from mgd_monitor.status.errors import ErrorRecord, GatherError
from mgd_monitor.status.mapper import StatusMapper


logger = structlog.get_logger()

SAMPLE_CONFIG = """\
## An array of addresses to gather stats about. Specify an ip or hostname
## with optional port. ie localhost, 10.0.0.1:50000, etc.
## An empty list polls ":50000".
servers:
  - localhost:50000

## HTTP settings shared by every server.
# fetch:
#   timeout_seconds: 5
#   max_response_size_bytes: 10485760
"""

DESCRIPTION = "Read metrics from one or many mgd servers"


class StatusSource(Protocol):
    """Anything that can fetch a status document for an address."""

    def fetch(self, address: str) -> FetchResult:
        """Fetch the status document of a server."""
        ...


@dataclass
class ServerGatherResult:
    """Outcome of one server's pass."""

    server: str
    emissions_by_measurement: dict[str, int] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def emissions_total(self) -> int:
        """Total emissions handed to the accumulator."""
        return sum(self.emissions_by_measurement.values())


@dataclass
class GatherResult:
    """Outcome of a complete gather over all servers."""

    pass_id: str
    servers: list[ServerGatherResult] = field(default_factory=list)

    @property
    def emissions_total(self) -> int:
        """Total emissions across servers."""
        return sum(s.emissions_total for s in self.servers)


class MgdInput:
    """Reads metrics from one or many mgd servers.

    Servers are polled sequentially in configuration order. The first
    failure aborts the remaining servers and propagates to the caller.
    """

    def __init__(
        self,
        servers: list[str] | None = None,
        fetcher: StatusSource | None = None,
        mapper: StatusMapper | None = None,
    ) -> None:
        """Initialize the input.

        Args:
            servers: Server addresses; empty polls the default address.
            fetcher: Status source (defaults to an HTTP StatusFetcher).
            mapper: Status mapper.
        """
        self.servers = list(servers or [])
        self._fetcher = fetcher or StatusFetcher()
        self._mapper = mapper or StatusMapper()
        self._metrics = PollMetrics.get_instance()

    @staticmethod
    def sample_config() -> str:
        """Return the sample configuration."""
        return SAMPLE_CONFIG

    @staticmethod
    def description() -> str:
        """Return the one-line description."""
        return DESCRIPTION

    def gather(self, acc: Accumulator) -> GatherResult:
        """Gather all configured servers into an accumulator.

        Args:
            acc: Sink receiving every emission.

        Returns:
            Per-server emission counts.

        Raises:
            GatherError: From the first server that fails.
        """
        pass_id = str(uuid.uuid4())
        bind_pass_context(pass_id)
        result = GatherResult(pass_id=pass_id)
        servers = self.servers or [DEFAULT_ADDRESS]

        try:
            for server in servers:
                result.servers.append(self.gather_server(server, acc))
        finally:
            clear_pass_context()

        logger.info(
            "gather_complete",
            component="gather",
            servers=len(result.servers),
            emissions=result.emissions_total,
            metrics=self._metrics.to_dict(),
        )
        return result

    def gather_server(self, address: str, acc: Accumulator) -> ServerGatherResult:
        """Run one pass for a single server.

        The whole document is mapped before anything reaches the
        accumulator, so a failing server contributes no emissions.

        Args:
            address: Server address, with or without a port.
            acc: Sink receiving the emissions.

        Returns:
            Emission counts for the server.

        Raises:
            GatherError: If fetching, decoding or mapping fails.
        """
        address = normalize_address(address)
        log = logger.bind(component="gather", server=address)
        start_time_ns = time.perf_counter_ns()

        try:
            response = self._fetcher.fetch(address)
            document = decode_status(response.body_bytes)
            emissions = self._mapper.map(document, {"server": address})
        except GatherError as e:
            if e.server is None:
                e.server = address
            self._metrics.record_failure(address, e.error_class.value)
            log.error(
                "server_gather_failed",
                **ErrorRecord.from_exception(e).model_dump(mode="json"),
            )
            raise

        if document.server is not None:
            log = log.bind(mgd_name=document.server.name)

        counts: Counter[str] = Counter()
        for emission in emissions:
            acc.add_fields(emission.name, emission.fields, emission.tags)
            counts[emission.name] += 1

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        for measurement, count in counts.items():
            self._metrics.record_emissions(address, measurement, count)
        self._metrics.record_duration(address, duration_ms)

        log.info(
            "server_gathered",
            emissions=sum(counts.values()),
            duration_ms=round(duration_ms, 2),
        )
        return ServerGatherResult(
            server=address,
            emissions_by_measurement=dict(counts),
            duration_ms=duration_ms,
        )
