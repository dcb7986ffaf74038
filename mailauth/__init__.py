"""Domain email-authentication resolution and known-sender classification."""

__version__ = "1.0.0"
