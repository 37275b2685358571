"""Configuration file loading and validation."""

from mgd_monitor.config.loader import ConfigLoader, ConfigValidationError
from mgd_monitor.config.schemas import MgdConfig


__all__ = ["ConfigLoader", "ConfigValidationError", "MgdConfig"]
