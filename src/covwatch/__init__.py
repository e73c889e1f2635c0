"""covwatch: per-file line coverage regression detection."""

__version__ = "0.3.0"
