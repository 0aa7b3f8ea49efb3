"""Data models for extracted form fields and fill answers."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

OPTION_TYPES = ("select", "radio", "checkbox")


class FieldOption(BaseModel):
    """One choice of a select, radio group or checkbox group."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    option_id: str = Field(alias="optionId")
    option_text: str = Field(alias="optionText")


class DateComponents(BaseModel):
    """Sub-identifiers of a composite date control, in DOM order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    day: Optional[str] = Field(default=None, alias="Day")
    month: Optional[str] = Field(default=None, alias="Month")
    year: Optional[str] = Field(default=None, alias="Year")


class FieldDescriptor(BaseModel):
    """A single form control discovered on the page."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    required: bool = False
    type: str = Field(min_length=1)
    identifier: str = Field(min_length=1)
    options: list[FieldOption] = []
    components: Optional[DateComponents] = None

    @property
    def has_options(self) -> bool:
        return self.type in OPTION_TYPES or self.components is not None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON shape handed to the fill step."""
        payload: dict[str, Any] = {
            "Label": self.label,
            "Required": "yes" if self.required else "no",
            "Type": self.type,
            "Identifier": self.identifier,
        }
        if self.has_options:
            payload["options"] = [o.model_dump(by_alias=True) for o in self.options]
        if self.components is not None:
            payload["Components"] = self.components.model_dump(by_alias=True, exclude_none=True)
        return payload


class FillAnswer(BaseModel):
    """A value proposed for one field."""

    model_config = ConfigDict(populate_by_name=True)

    identifier: str = Field(alias="Identifier", min_length=1)
    type: str = Field(default="text", alias="Type")
    value: str = Field(default="", alias="Value")

    @field_validator("value", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return str(value)

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


def to_payload(descriptors: list[FieldDescriptor]) -> list[dict[str, Any]]:
    """Serialize a descriptor sequence for JSON output."""
    return [d.to_payload() for d in descriptors]
