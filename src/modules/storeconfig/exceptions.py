"""Store configuration exceptions."""

from __future__ import annotations


class InvalidConfiguration(Exception):
    """A configuration update was rejected; nothing was applied."""
