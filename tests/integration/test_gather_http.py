"""Integration tests for gathering from a live HTTP status endpoint."""

import socket
import threading
import time
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, HTTPServer, ThreadingHTTPServer

import pytest

from mgd_monitor.fetch.client import StatusFetcher
from mgd_monitor.fetch.config import FetchConfig
from mgd_monitor.gather.accumulator import MemoryAccumulator
from mgd_monitor.gather.plugin import MgdInput
from mgd_monitor.observability.metrics import PollMetrics
from mgd_monitor.status.errors import DecodeError, TransportError
from tests.helpers.documents import sample_body


def server_address(server: HTTPServer) -> str:
    """Get the host:port address of a test server.

    Args:
        server: The HTTP server instance.

    Returns:
        Address in host:port form.
    """
    host, port = server.server_address[0], server.server_address[1]
    # Ensure host is a string (may be bytes in some socket scenarios)
    if isinstance(host, bytes):
        host = host.decode("utf-8")
    return f"{host}:{port}"


def unused_port() -> int:
    """Find a local port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class StatusHandler(BaseHTTPRequestHandler):
    """HTTP handler serving an mgd status document at the root path."""

    # Class-level state for test responses
    response_body: bytes = sample_body()
    status_code: int = 200
    paths: list[str] = []

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def do_GET(self) -> None:  # noqa: N802
        """Serve the configured status document."""
        StatusHandler.paths.append(self.path)
        self.send_response(self.status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.response_body)))
        self.end_headers()
        self.wfile.write(self.response_body)


class SlowBodyHandler(BaseHTTPRequestHandler):
    """HTTP handler that sends its body one byte at a time."""

    body: bytes = b"{}      "
    byte_interval_seconds: float = 0.4

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def do_GET(self) -> None:  # noqa: N802
        """Trickle the body out, stopping when the client goes away."""
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for byte in self.body:
                time.sleep(self.byte_interval_seconds)
                self.wfile.write(bytes([byte]))
                self.wfile.flush()
        except (BrokenPipeError, ConnectionResetError):
            return


@pytest.fixture
def status_server() -> Generator[HTTPServer, None, None]:
    """Start a status server on a random local port."""
    StatusHandler.response_body = sample_body()
    StatusHandler.status_code = 200
    StatusHandler.paths = []

    server = HTTPServer(("127.0.0.1", 0), StatusHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def slow_server() -> Generator[HTTPServer, None, None]:
    """Start a server that trickles its body out byte by byte."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), SlowBodyHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


class TestGatherOverHttp:
    """End-to-end gathering against a real socket."""

    @pytest.mark.integration
    def test_gather_sample_document(self, status_server: HTTPServer) -> None:
        """The sample document yields its full set of emissions."""
        address = server_address(status_server)
        acc = MemoryAccumulator()

        result = MgdInput(servers=[address]).gather(acc)

        assert result.emissions_total == 7
        assert [e.name for e in acc.emissions] == [
            "inversestream",
            "upstream",
            "dsc",
            "dsc",
            "fbs",
            "downsteram",
            "frontstream",
        ]
        assert {e.tags["server"] for e in acc.emissions} == {address}
        assert StatusHandler.paths == ["/"]

    @pytest.mark.integration
    def test_error_status_body_still_decoded(self, status_server: HTTPServer) -> None:
        """A non-2xx response is decoded like any other body."""
        StatusHandler.status_code = 503
        StatusHandler.response_body = (
            b'{"frontstream": [{"name": "f", "one-minute": 1,'
            b' "five-minute": 2, "fifteen-minute": 3}]}'
        )
        acc = MemoryAccumulator()

        MgdInput(servers=[server_address(status_server)]).gather(acc)

        assert len(acc) == 1
        responses = PollMetrics.get_instance().responses_by_server_status
        assert responses[(server_address(status_server), 503)] == 1

    @pytest.mark.integration
    def test_html_body_fails(self, status_server: HTTPServer) -> None:
        """A non-JSON body is a decode error."""
        StatusHandler.response_body = b"<html>maintenance</html>"

        with pytest.raises(DecodeError):
            MgdInput(servers=[server_address(status_server)]).gather(
                MemoryAccumulator()
            )

    @pytest.mark.integration
    def test_size_limit(self, status_server: HTTPServer) -> None:
        """Bodies over the configured limit are refused."""
        StatusHandler.response_body = b" " * 4096 + b"{}"
        fetcher = StatusFetcher(FetchConfig(max_response_size_bytes=1024))

        with pytest.raises(TransportError) as exc_info:
            MgdInput(servers=[server_address(status_server)], fetcher=fetcher).gather(
                MemoryAccumulator()
            )

        assert exc_info.value.fetch_error_class == "RESPONSE_SIZE_EXCEEDED"

    @pytest.mark.integration
    def test_refused_connection(self) -> None:
        """Nothing listening is a transport error."""
        fetcher = StatusFetcher(FetchConfig(timeout_seconds=1.0))

        with pytest.raises(TransportError) as exc_info:
            MgdInput(servers=[f"127.0.0.1:{unused_port()}"], fetcher=fetcher).gather(
                MemoryAccumulator()
            )

        assert exc_info.value.fetch_error_class == "CONNECTION_ERROR"

    @pytest.mark.integration
    def test_slow_body_bounded_by_timeout(self, slow_server: HTTPServer) -> None:
        """A body dribbling in under the read timeout still fails on time."""
        fetcher = StatusFetcher(FetchConfig(timeout_seconds=1.0))
        started = time.monotonic()

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch(server_address(slow_server))

        assert exc_info.value.fetch_error_class == "NETWORK_TIMEOUT"
        assert time.monotonic() - started < 2.0
