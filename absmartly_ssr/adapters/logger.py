"""
Logger adapters (LoggerPort implementations).

StdlibLogger forwards to the standard ``logging`` module under a named
logger; the engine never touches the root logger or handler setup, which
belong to the host. MemoryLogger keeps records in memory for test
assertions.

Key behaviors:
- Messages carry the ``[ABsmartly]`` prefix
- Structured data is rendered as sorted ``key=value`` pairs
- ``debug`` is dropped unless debug output is enabled
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

LOG_PREFIX = "[ABsmartly]"
DEFAULT_LOGGER_NAME = "absmartly_ssr"


def format_data(data: Mapping[str, Any] | None) -> str:
    """Render structured fields as ``key=value`` pairs."""
    if not data:
        return ""
    return " ".join(f"{key}={data[key]!r}" for key in sorted(data))


@dataclass
class StdlibLogger:
    """
    LoggerPort backed by ``logging.getLogger(name)``.

    ``log`` and ``info`` both map to INFO; ``warn`` maps to WARNING.
    """

    name: str = DEFAULT_LOGGER_NAME
    enable_debug: bool = False

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(self.name)

    def _emit(self, level: int, message: str, data: Mapping[str, Any] | None) -> None:
        rendered = format_data(data)
        text = f"{LOG_PREFIX} {message}"
        if rendered:
            text = f"{text} {rendered}"
        self._logger.log(level, text)

    def log(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._emit(logging.INFO, message, data)

    def info(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._emit(logging.INFO, message, data)

    def warn(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._emit(logging.WARNING, message, data)

    def error(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._emit(logging.ERROR, message, data)

    def debug(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        if self.enable_debug:
            self._emit(logging.DEBUG, f"[DEBUG] {message}", data)


@dataclass(frozen=True)
class LogEntry:
    """Record of one logged message."""

    level: str
    message: str
    data: dict[str, Any]


@dataclass
class MemoryLogger:
    """LoggerPort that stores every call for later inspection."""

    entries: list[LogEntry] = field(default_factory=list)

    def _record(self, level: str, message: str, data: Mapping[str, Any] | None) -> None:
        self.entries.append(LogEntry(level=level, message=message, data=dict(data or {})))

    def log(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._record("log", message, data)

    def info(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._record("info", message, data)

    def warn(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._record("warn", message, data)

    def error(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._record("error", message, data)

    def debug(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        self._record("debug", message, data)

    # --- Test Helper Methods ---

    def messages(self, level: str | None = None) -> list[str]:
        """Messages logged at ``level`` (all levels when None)."""
        return [e.message for e in self.entries if level is None or e.level == level]

    def has(self, level: str, contains: str) -> bool:
        """True if a message at ``level`` contains ``contains``."""
        return any(contains in message for message in self.messages(level))

    def clear(self) -> None:
        self.entries.clear()


# --- Factory Function ---


def create_logger(enable_debug: bool = False, name: str = DEFAULT_LOGGER_NAME) -> StdlibLogger:
    """
    Create the default host logger.

    Args:
        enable_debug: Whether debug messages are emitted
        name: Name passed to ``logging.getLogger``

    Returns:
        Configured StdlibLogger
    """
    return StdlibLogger(name=name, enable_debug=enable_debug)
