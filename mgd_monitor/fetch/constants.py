"""Constants for the fetch layer."""

# Port appended to server addresses that carry none
DEFAULT_PORT = 50000

# Address polled when no server is configured
DEFAULT_ADDRESS = f":{DEFAULT_PORT}"

MAX_PORT = 65535

# Host dialed when an address has an empty host part
DEFAULT_HOST = "localhost"

# Single ceiling applied to the whole fetch
DEFAULT_TIMEOUT_SECONDS = 5.0

# HTTP Status Code Range
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB
