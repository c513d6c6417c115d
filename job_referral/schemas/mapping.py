from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

MappingSource = Literal["auto-consent", "resume", "memo", "inferred", "unmapped"]


class FormField(BaseModel):
    name: str
    type: str = "text"
    required: bool = False

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("form field name must not be empty")
        return stripped


class FieldMapping(BaseModel):
    field_name: str
    value: str | None = None
    source: MappingSource = "unmapped"
    confidence: int = 0

    @property
    def mapped(self) -> bool:
        return bool(self.value and self.value.strip())


class MappingResult(BaseModel):
    success: bool = False
    field_mappings: list[FieldMapping] = Field(default_factory=list)
    attempted_mappings: list[FieldMapping] = Field(default_factory=list)
    unmapped_required_fields: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
