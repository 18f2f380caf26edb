from .loader import load_settings, settings_from_mapping
from .models import DEFAULT_SETTINGS, EngineSettings

__all__ = ["DEFAULT_SETTINGS", "EngineSettings", "load_settings", "settings_from_mapping"]
