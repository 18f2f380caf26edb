from collections.abc import Mapping
from typing import Any, Protocol


class LoggerPort(Protocol):
    """
    Logging capability supplied by the host.

    Every method takes a message and an optional mapping of structured
    fields. Implementations must not raise.
    """

    def log(self, message: str, data: Mapping[str, Any] | None = None) -> None: ...

    def info(self, message: str, data: Mapping[str, Any] | None = None) -> None: ...

    def warn(self, message: str, data: Mapping[str, Any] | None = None) -> None: ...

    def error(self, message: str, data: Mapping[str, Any] | None = None) -> None: ...

    def debug(self, message: str, data: Mapping[str, Any] | None = None) -> None: ...
