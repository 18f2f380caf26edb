"""
Experiment payload (de)serialization.

Hosts hand the engine the assignment payload produced by the experiment
context, often as JSON. Malformed payloads degrade to "no experiments".
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from absmartly_ssr.domain.entities import ExperimentData
from absmartly_ssr.ports.logger import LoggerPort


def serialize_experiments(experiments: list[ExperimentData]) -> str:
    """Serialize experiments to a JSON document ``{"experiments": [...]}``."""
    payload = {"experiments": [exp.model_dump(exclude_none=True) for exp in experiments]}
    return json.dumps(payload)


def experiments_from_payload(
    payload: Any,
    logger: LoggerPort | None = None,
) -> list[ExperimentData]:
    """
    Build ExperimentData records from a decoded payload.

    Accepts either ``{"experiments": [...]}`` or a bare list. Entries that
    fail validation are logged and skipped.
    """
    if isinstance(payload, dict):
        payload = payload.get("experiments", [])

    if not isinstance(payload, list):
        if logger:
            logger.error(
                "Experiment payload must be a list",
                {"payload_type": type(payload).__name__},
            )
        return []

    experiments: list[ExperimentData] = []
    for index, entry in enumerate(payload):
        try:
            experiments.append(ExperimentData.from_dict(entry))
        except (ValidationError, TypeError) as e:
            if logger:
                logger.error("Skipping invalid experiment entry", {"index": index, "error": str(e)})
    return experiments


def deserialize_experiments(
    json_text: str,
    logger: LoggerPort | None = None,
) -> list[ExperimentData]:
    """Parse a JSON experiment payload, returning [] when it is not valid JSON."""
    try:
        payload = json.loads(json_text)
    except (json.JSONDecodeError, TypeError) as e:
        if logger:
            logger.error(
                "Failed to deserialize experiment data",
                {"error": str(e), "preview": str(json_text)[:100]},
            )
        return []

    return experiments_from_payload(payload, logger)
