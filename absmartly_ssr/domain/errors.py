"""
Engine exceptions.

Nothing here escapes the HTML processor: backends raise these so that the
layer above can log them and degrade gracefully.
"""

from __future__ import annotations


class ABsmartlyError(Exception):
    """Base class for engine errors."""


class MalformedChangeError(ABsmartlyError, ValueError):
    """A DOMChange is missing a field its type requires."""

    def __init__(self, message: str, change_type: str | None = None) -> None:
        super().__init__(message)
        self.change_type = change_type


class BackendError(ABsmartlyError):
    """A change-application backend failed for a whole document."""


class SettingsError(ABsmartlyError, ValueError):
    """Engine settings could not be loaded or validated."""
