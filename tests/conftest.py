from pathlib import Path

import pytest

from absmartly_ssr.adapters.logger import MemoryLogger


@pytest.fixture
def memory_logger():
    return MemoryLogger()


@pytest.fixture
def settings_path(tmp_path) -> Path:
    """
    Writes a host-style settings file (upper-case keys) and returns its path.
    """
    path = tmp_path / "absmartly.yaml"
    path.write_text(
        "ENABLE_EMBEDS: true\n"
        "ENABLE_DEBUG: true\n"
        "VARIANT_MAPPING:\n"
        "  control: 0\n"
        "  promo: 1\n"
    )
    return path
