"""Poll mgd servers and republish their status as metrics."""

__version__ = "0.1.0"
