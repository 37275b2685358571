"""HTTP client that fetches mgd status documents."""

import time
from io import BytesIO

import httpx
import structlog

from mgd_monitor.fetch.address import build_status_url, normalize_address
from mgd_monitor.fetch.config import FetchConfig
from mgd_monitor.fetch.models import (
    FetchDeadlineExceededError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
)
from mgd_monitor.observability.metrics import PollMetrics
from mgd_monitor.status.errors import TransportError


logger = structlog.get_logger()


class StatusFetcher:
    """Fetches the status document of an mgd server.

    Performs exactly one blocking GET per call:
    - Default port applied to addresses without one
    - One fixed deadline for the whole request, body included
    - Maximum response size enforcement
    - No retries; every transport failure raises TransportError
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Fetch configuration.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._metrics = PollMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def fetch(self, address: str) -> FetchResult:
        """Fetch the status document of a server.

        Args:
            address: Server address, with or without a port.

        Returns:
            FetchResult with the status code and body. Non-2xx responses
            are returned as-is.

        Raises:
            TransportError: If the request could not be completed.
        """
        address = normalize_address(address)
        log = self._log.bind(server=address)

        try:
            url = build_status_url(address)
        except ValueError as e:
            raise self._failure(
                address, FetchErrorClass.INVALID_ADDRESS, str(e), log
            ) from e

        start_time_ns = time.perf_counter_ns()
        result = self._execute(address, url, log)
        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_fetch(
            address, result.status_code, result.body_size, duration_ms
        )

        if not result.is_success:
            log.warning("unexpected_status", url=url, status_code=result.status_code)

        log.info(
            "fetch_complete",
            url=url,
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
        )
        return result

    def _execute(
        self,
        address: str,
        url: str,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult:
        """Execute the GET request.

        Args:
            address: Normalized server address.
            url: Status URL.
            log: Bound logger.

        Returns:
            FetchResult from the response.

        Raises:
            TransportError: On timeout, connection or size failures.
        """
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json",
        }

        timeout = self._config.timeout_seconds
        deadline = time.monotonic() + timeout

        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                with client.stream("GET", url, headers=headers) as response:
                    body = self._read_body_with_limit(response, deadline)
                    return FetchResult(
                        address=address,
                        url=url,
                        status_code=response.status_code,
                        headers=dict(response.headers),
                        body_bytes=body,
                    )

        except httpx.TimeoutException as e:
            raise self._failure(
                address,
                FetchErrorClass.NETWORK_TIMEOUT,
                f"Request timed out: {e}",
                log,
            ) from e

        except httpx.ConnectError as e:
            raise self._failure(
                address,
                FetchErrorClass.CONNECTION_ERROR,
                f"Connection failed: {e}",
                log,
            ) from e

        except FetchDeadlineExceededError as e:
            raise self._failure(
                address, FetchErrorClass.NETWORK_TIMEOUT, str(e), log
            ) from e

        except ResponseSizeExceededError as e:
            raise self._failure(
                address, FetchErrorClass.RESPONSE_SIZE_EXCEEDED, str(e), log
            ) from e

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise self._failure(
                address,
                FetchErrorClass.UNKNOWN,
                f"Request failed: {e}",
                log,
            ) from e

    def _read_body_with_limit(
        self,
        response: httpx.Response,
        deadline: float,
    ) -> bytes:
        """Read response body with size limit and deadline.

        Args:
            response: Streaming HTTP response.
            deadline: ``time.monotonic()`` value the whole fetch must end by.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If the size limit is exceeded.
            FetchDeadlineExceededError: If the deadline passes while reading.
        """
        max_size = self._config.max_response_size_bytes

        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit():
            size = int(content_length)
            if size > max_size:
                msg = f"Response size {size} exceeds limit {max_size}"
                raise ResponseSizeExceededError(msg)

        _check_deadline(deadline)

        buffer = BytesIO()
        total_read = 0
        for chunk in response.iter_bytes():
            _check_deadline(deadline)
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg)
            buffer.write(chunk)

        return buffer.getvalue()

    def _failure(
        self,
        address: str,
        error_class: FetchErrorClass,
        message: str,
        log: structlog.stdlib.BoundLogger,
    ) -> TransportError:
        """Record and log a failure, returning the error to raise."""
        self._metrics.record_fetch_failure(address, error_class.value)
        log.warning("fetch_failed", error_class=error_class.value, message=message)
        return TransportError(
            message,
            server=address,
            fetch_error_class=error_class.value,
        )


def _check_deadline(deadline: float) -> None:
    overrun = time.monotonic() - deadline
    if overrun > 0:
        msg = f"Request exceeded its deadline by {overrun:.2f}s"
        raise FetchDeadlineExceededError(msg)
