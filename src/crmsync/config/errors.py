"""Configuration errors."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A ``CRMSYNC_*`` setting or ``DATABASE_URI`` holds a value crmsync cannot use."""
