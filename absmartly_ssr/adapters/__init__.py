from .logger import LogEntry, MemoryLogger, StdlibLogger, create_logger

__all__ = ["LogEntry", "MemoryLogger", "StdlibLogger", "create_logger"]
