"""Allow running as ``python -m mgd_monitor``."""

from mgd_monitor.cli.main import cli


if __name__ == "__main__":
    cli()
