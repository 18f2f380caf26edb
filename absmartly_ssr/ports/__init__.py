from .logger import LoggerPort

__all__ = ["LoggerPort"]
