"""Command line interface."""

from mgd_monitor.cli.main import cli


__all__ = ["cli"]
