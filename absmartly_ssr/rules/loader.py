from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from absmartly_ssr.domain.errors import SettingsError
from absmartly_ssr.rules.models import EngineSettings


def _extract_yaml(content: str) -> str:
    """Return the first ```yaml fenced block, or the whole text if there is none."""
    yaml_lines: list[str] = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def settings_from_mapping(data: Mapping[str, Any] | None) -> EngineSettings:
    """
    Validate a settings mapping.
    Raises SettingsError if the schema is invalid.
    """
    try:
        return EngineSettings.model_validate(dict(data or {}))
    except ValidationError as e:
        raise SettingsError(f"Engine settings validation failed:\n{e}") from e


def load_settings(path: Path) -> EngineSettings:
    """
    Load and validate an engine settings file.
    Raises FileNotFoundError if file missing.
    Raises SettingsError if the YAML or schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML syntax in settings file: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise SettingsError("Settings file must contain a mapping at the top level")

    return settings_from_mapping(data)
