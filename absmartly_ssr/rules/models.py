from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineSettings(BaseModel):
    """
    Settings for the HTML processor.

    Upper-case aliases match the host settings names (ENABLE_EMBEDS,
    VARIANT_MAPPING, ...), so a host settings dict can be validated as is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    enable_embeds: bool = Field(default=True, alias="ENABLE_EMBEDS")
    use_tree_backend: bool = Field(default=True, alias="USE_TREE_BACKEND")
    tree_parser: str = Field(default="html.parser", alias="TREE_PARSER")
    variant_mapping: dict[str, int] = Field(default_factory=dict, alias="VARIANT_MAPPING")
    enable_debug: bool = Field(default=False, alias="ENABLE_DEBUG")
    style_element_id: str = Field(default="absmartly-styles", alias="STYLE_ELEMENT_ID")

    @field_validator("variant_mapping", mode="before")
    @classmethod
    def _no_mapping(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("style_element_id")
    @classmethod
    def _non_blank_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("style_element_id must not be blank")
        return value.strip()


DEFAULT_SETTINGS = EngineSettings()
