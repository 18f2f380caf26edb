from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Enums / Literals ---
InsertPosition = Literal["before", "after", "prepend", "append"]
ClassAction = Literal["add", "remove"]

CHANGE_TYPES: frozenset[str] = frozenset(
    [
        "text",
        "html",
        "style",
        "class",
        "attribute",
        "delete",
        "move",
        "create",
        "styleRules",
        "javascript",
    ]
)

DEFAULT_POSITION: InsertPosition = "append"

# --- Changes ---


class DOMChange(BaseModel):
    """
    One declarative mutation instruction.

    ``selector``, ``type`` and ``position`` are kept as plain strings: a
    missing selector or unknown change type is rejected when the change is
    applied, and unknown positions mean "append", so a single odd entry
    never invalidates a whole payload.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    selector: str = ""
    type: str = ""
    value: Any = None
    name: str | None = None
    action: str | None = None
    target: str | None = None
    position: str = DEFAULT_POSITION
    rules: str | None = None
    trigger_on_view: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_target_selector(cls, data: Any) -> Any:
        # The client plugin spells the reference element "targetSelector".
        if isinstance(data, dict) and not data.get("target") and data.get("targetSelector"):
            data = {**data, "target": data["targetSelector"]}
        return data

    @field_validator("selector", "type", mode="before")
    @classmethod
    def _blank_when_missing(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("position", mode="before")
    @classmethod
    def _default_position(cls, value: Any) -> Any:
        return value or DEFAULT_POSITION

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DOMChange":
        return cls.model_validate(data)


# --- Experiments ---


class ExperimentData(BaseModel):
    """Assignment of one active experiment for the current request."""

    model_config = ConfigDict(extra="ignore")

    name: str
    treatment: int = -1  # -1 = not assigned
    variant: str | None = None
    changes: list[DOMChange] = Field(default_factory=list)

    @field_validator("treatment", mode="before")
    @classmethod
    def _unassigned(cls, value: Any) -> Any:
        return -1 if value is None else value

    @field_validator("changes", mode="before")
    @classmethod
    def _no_changes(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_assigned(self) -> bool:
        return self.treatment >= 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExperimentData":
        return cls.model_validate(data)
