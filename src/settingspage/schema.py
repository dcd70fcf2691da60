from __future__ import annotations

from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .enums import FieldType


class StaticDescription(BaseModel):
    """Description text; escaped on output unless ``markup`` is set."""

    kind: Literal["static"] = "static"
    text: str
    markup: bool = False

    def render(self) -> str:
        return self.text


class DynamicDescription(BaseModel):
    """Description produced by a callable; its return value is used verbatim."""

    kind: Literal["dynamic"] = "dynamic"
    callback: Callable[[], str]

    def render(self) -> str:
        return self.callback()


Description = Annotated[
    Union[StaticDescription, DynamicDescription],
    Field(discriminator="kind"),
]


def coerce_description(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return StaticDescription(text=value)
    if isinstance(value, dict):
        return {"kind": "static", **value}
    if isinstance(value, (StaticDescription, DynamicDescription)):
        return value
    if callable(value):
        return DynamicDescription(callback=value)
    return value


class Section(BaseModel):
    id: str
    title: str = ""
    description: Optional[Description] = Field(
        default=None, validation_alias=AliasChoices("description", "desc")
    )
    callback: Optional[Callable[[], str]] = None
    label_submit: Optional[str] = None
    submit_type: str = "primary"
    wrap: bool = True
    attributes: Optional[dict[str, str]] = None

    @field_validator("description", mode="before")
    @classmethod
    def coerce_section_description(cls, v):
        return coerce_description(v)


class FieldSpec(BaseModel):
    id: str = ""
    name: Optional[str] = None
    desc: Optional[Description] = Field(
        default=None, validation_alias=AliasChoices("desc", "description")
    )
    type: FieldType = FieldType.TEXT
    size: Optional[str] = None
    options: dict[str, Any] = Field(default_factory=dict)
    default: Any = ""
    placeholder: str = ""
    sanitize_callback: Optional[Callable[[Any], Any]] = None

    @field_validator("desc", mode="before")
    @classmethod
    def coerce_desc(cls, v):
        return coerce_description(v)

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, v):
        # Choice lists given as plain sequences use each entry as key and label.
        if v is None or v == "":
            return {}
        if isinstance(v, (list, tuple)):
            return {str(item): item for item in v}
        if isinstance(v, dict):
            return {str(key): label for key, label in v.items()}
        return v
