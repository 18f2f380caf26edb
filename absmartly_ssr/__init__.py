"""
absmartly_ssr - server-side A/B experiment rendering.

Rewrites server-rendered HTML for the current request's experiment
assignments: resolves inline <Treatment> markup and applies each
experiment's declarative DOM changes.
"""

from absmartly_ssr.adapters.logger import MemoryLogger, StdlibLogger, create_logger
from absmartly_ssr.components.processor import HTMLProcessor, process_html
from absmartly_ssr.domain.entities import DOMChange, ExperimentData
from absmartly_ssr.domain.errors import (
    ABsmartlyError,
    BackendError,
    MalformedChangeError,
    SettingsError,
)
from absmartly_ssr.domain.serialize import deserialize_experiments, serialize_experiments
from absmartly_ssr.rules import EngineSettings, load_settings, settings_from_mapping

__all__ = [
    "ABsmartlyError",
    "BackendError",
    "DOMChange",
    "EngineSettings",
    "ExperimentData",
    "HTMLProcessor",
    "MalformedChangeError",
    "MemoryLogger",
    "SettingsError",
    "StdlibLogger",
    "create_logger",
    "deserialize_experiments",
    "load_settings",
    "process_html",
    "serialize_experiments",
    "settings_from_mapping",
]
