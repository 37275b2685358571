"""Metrics about polling itself: fetches, emissions and failures."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock


# Module-level singleton state
_metrics_instance: "PollMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class PollMetrics:
    """Thread-safe counters for gather passes.

    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Responses by (server, status code)
    responses_by_server_status: Counter[tuple[str, int]] = field(
        default_factory=Counter
    )

    # Fetch failures by (server, fetch error class)
    fetch_failures_by_server_class: Counter[tuple[str, str]] = field(
        default_factory=Counter
    )

    # Emissions by (server, measurement)
    emissions_by_server_measurement: Counter[tuple[str, str]] = field(
        default_factory=Counter
    )

    # Gather failures by (server, gather error class)
    failures_by_server_class: Counter[tuple[str, str]] = field(
        default_factory=Counter
    )

    # Last pass duration per server in milliseconds
    duration_by_server: dict[str, float] = field(default_factory=dict)

    bytes_total: int = 0
    fetch_duration_ms_total: float = 0.0
    passes_total: int = 0

    @classmethod
    def get_instance(cls) -> "PollMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared PollMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_fetch(
        self,
        server: str,
        status_code: int,
        bytes_received: int,
        duration_ms: float,
    ) -> None:
        """Record a completed HTTP request.

        Args:
            server: Server address.
            status_code: HTTP status code.
            bytes_received: Body size in bytes.
            duration_ms: Request duration in milliseconds.
        """
        with self._lock:
            self.responses_by_server_status[(server, status_code)] += 1
            self.bytes_total += bytes_received
            self.fetch_duration_ms_total += duration_ms

    def record_fetch_failure(self, server: str, error_class: str) -> None:
        """Record a fetch that raised a transport error."""
        with self._lock:
            self.fetch_failures_by_server_class[(server, error_class)] += 1

    def record_emissions(self, server: str, measurement: str, count: int) -> None:
        """Record emissions handed to the accumulator.

        Args:
            server: Server address.
            measurement: Measurement name.
            count: Number of emissions.
        """
        with self._lock:
            self.emissions_by_server_measurement[(server, measurement)] += count

    def record_failure(self, server: str, error_class: str) -> None:
        """Record a failed gather pass.

        Args:
            server: Server address.
            error_class: Gather error classification value.
        """
        with self._lock:
            self.failures_by_server_class[(server, error_class)] += 1

    def record_duration(self, server: str, duration_ms: float) -> None:
        """Record the duration of a pass for a server."""
        with self._lock:
            self.duration_by_server[server] = duration_ms
            self.passes_total += 1

    def get_emissions_total(self, server: str | None = None) -> int:
        """Get total emissions.

        Args:
            server: Optional server to filter by.

        Returns:
            Total emission count.
        """
        with self._lock:
            return sum(
                count
                for (sid, _), count in self.emissions_by_server_measurement.items()
                if server is None or sid == server
            )

    def get_failures_total(self, server: str | None = None) -> int:
        """Get total failed passes.

        Args:
            server: Optional server to filter by.

        Returns:
            Total failure count.
        """
        with self._lock:
            return sum(
                count
                for (sid, _), count in self.failures_by_server_class.items()
                if server is None or sid == server
            )

    def to_dict(self) -> dict[str, object]:
        """Export metrics as a JSON-safe dictionary.

        Counters keyed by pairs use "first/second" string keys, for example
        "localhost:50000/dsc".

        Returns:
            Dictionary suitable for a structured log event.
        """
        with self._lock:
            return {
                "passes_total": self.passes_total,
                "bytes_total": self.bytes_total,
                "fetch_duration_ms_total": round(self.fetch_duration_ms_total, 2),
                "responses_by_server_status": _join_keys(
                    self.responses_by_server_status
                ),
                "fetch_failures_by_server_class": _join_keys(
                    self.fetch_failures_by_server_class
                ),
                "emissions_by_server_measurement": _join_keys(
                    self.emissions_by_server_measurement
                ),
                "failures_by_server_class": _join_keys(self.failures_by_server_class),
                "duration_by_server": dict(self.duration_by_server),
            }


def _join_keys(
    counter: Counter[tuple[str, str]] | Counter[tuple[str, int]],
) -> dict[str, int]:
    return {
        f"{first}/{second}": count for (first, second), count in sorted(counter.items())
    }
