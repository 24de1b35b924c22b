"""Daybook — a session-gated personal journal with a synchronized local mirror."""

__version__ = "0.1.0"
