"""Job portal matching and notification core."""

__version__ = "0.1.0"
