"""Server address handling: default port and status URL."""

from mgd_monitor.fetch.constants import DEFAULT_HOST, DEFAULT_PORT, MAX_PORT


def split_host_port(address: str) -> tuple[str, str] | None:
    """Split ``host:port`` or ``[host]:port``.

    Args:
        address: Server address.

    Returns:
        (host, port) with IPv6 brackets removed, or None if the address
        carries no port.
    """
    if address.startswith("["):
        end = address.find("]")
        if end == -1 or address[end + 1 : end + 2] != ":":
            return None
        return address[1:end], address[end + 2 :]

    if address.count(":") != 1:
        return None

    host, port = address.split(":")
    return host, port


def normalize_address(address: str) -> str:
    """Append the default port to an address that has none.

    ``localhost`` becomes ``localhost:50000``; ``10.0.0.1:8080`` and
    ``:50000`` are unchanged. A bare IPv6 literal is bracketed first.

    Args:
        address: Configured server address.

    Returns:
        Address with a port.
    """
    if split_host_port(address) is not None:
        return address

    if address.count(":") > 1 and not address.startswith("["):
        return f"[{address}]:{DEFAULT_PORT}"

    return f"{address}:{DEFAULT_PORT}"


def build_status_url(address: str) -> str:
    """Build the status URL for a normalized address.

    An empty host (as in ``:50000``) is dialed as localhost.

    Args:
        address: Address with a port.

    Returns:
        ``http://<host>:<port>/``.

    Raises:
        ValueError: If the address has no port or a non-numeric port.
    """
    parts = split_host_port(address)
    if parts is None:
        msg = f"Address '{address}' has no port"
        raise ValueError(msg)

    host, port = parts
    if not port.isdigit() or int(port) > MAX_PORT:
        msg = f"Address '{address}' has an invalid port '{port}'"
        raise ValueError(msg)

    if not host:
        host = DEFAULT_HOST
    elif ":" in host:
        host = f"[{host}]"

    return f"http://{host}:{port}/"
