"""Configuration loader with validation."""

import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from mgd_monitor.config.schemas import MgdConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration loading or validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of error details with loc, msg and type.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class ConfigLoader:
    """Loads and validates an mgd-monitor configuration file."""

    def __init__(self) -> None:
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors from the last load."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get validation duration in milliseconds."""
        return self._validation_duration_ms

    def load(self, config_path: Path) -> MgdConfig:
        """Load and validate a configuration file.

        An empty file yields the default configuration.

        Args:
            config_path: Path to the YAML file.

        Returns:
            Validated MgdConfig.

        Raises:
            ConfigValidationError: If the file is missing or unreadable, is
                not UTF-8 YAML or fails validation.
        """
        start_time = time.perf_counter()
        self._validation_errors = []
        log = logger.bind(component="config", file_path=str(config_path))
        log.info("loading_config_file")

        try:
            content = config_path.read_text(encoding="utf-8")
            data = yaml.safe_load(content) or {}
            config = MgdConfig.model_validate(data)

        except FileNotFoundError as e:
            self._record("file", f"File not found: {e.filename}", "file_not_found")
            raise self._fail(config_path, log) from e

        except OSError as e:
            reason = e.strerror or str(e)
            self._record("file", f"Cannot read file: {reason}", "file_unreadable")
            raise self._fail(config_path, log) from e

        except UnicodeDecodeError as e:
            self._record("file", f"Not valid UTF-8: {e.reason}", "file_encoding")
            raise self._fail(config_path, log) from e

        except yaml.YAMLError as e:
            self._record("yaml", f"Invalid YAML: {e}", "yaml_error")
            raise self._fail(config_path, log) from e

        except ValidationError as e:
            for err in e.errors():
                self._record(
                    ".".join(str(loc) for loc in err["loc"]) or "root",
                    err["msg"],
                    err["type"],
                )
            raise self._fail(config_path, log) from e

        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "config_file_loaded",
            server_count=len(config.servers),
            config_validation_duration_ms=round(self._validation_duration_ms, 2),
        )
        return config

    def _record(self, loc: str, msg: str, error_type: str) -> None:
        self._validation_errors.append({"loc": loc, "msg": msg, "type": error_type})

    def _fail(
        self,
        config_path: Path,
        log: structlog.stdlib.BoundLogger,
    ) -> ConfigValidationError:
        """Log the collected errors and build the exception to raise."""
        log.error(
            "config_validation_failed",
            validation_error_count=len(self._validation_errors),
            errors=self._validation_errors,
        )
        return ConfigValidationError(self.validation_errors, str(config_path))
