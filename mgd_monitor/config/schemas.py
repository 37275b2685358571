"""Configuration file schema."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mgd_monitor.fetch.config import FetchConfig


class MgdConfig(BaseModel):
    """Contents of an mgd-monitor configuration file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    servers: list[str] = Field(
        default_factory=list,
        description="Server addresses (host or host:port), polled in order",
    )
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("servers")
    @classmethod
    def validate_servers(cls, v: list[str]) -> list[str]:
        """Reject addresses that cannot name a host and port."""
        for address in v:
            if not address:
                msg = "Server address must not be empty"
                raise ValueError(msg)
            if any(char.isspace() for char in address):
                msg = f"Server address '{address}' must not contain whitespace"
                raise ValueError(msg)
            if "://" in address:
                msg = (
                    f"Server address '{address}' must be host[:port], "
                    "without a URL scheme"
                )
                raise ValueError(msg)
        return v
