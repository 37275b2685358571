"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    mgd_servers: str | None = Field(default=None, validation_alias="MGD_SERVERS")
    mgd_config: Path | None = Field(default=None, validation_alias="MGD_CONFIG")
    mgd_log_level: str = Field(default="INFO", validation_alias="MGD_LOG_LEVEL")

    def server_list(self) -> list[str]:
        """Split MGD_SERVERS on commas, dropping blanks."""
        if not self.mgd_servers:
            return []
        return [part.strip() for part in self.mgd_servers.split(",") if part.strip()]


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
