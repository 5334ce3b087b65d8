"""Smart invoice uploader and SMS notifier."""

__version__ = "0.1.0"
