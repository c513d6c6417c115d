from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .common import ErrorKind

ExtractionMethod = Literal["direct", "memo_pattern", "none"]


class ExtractionResult(BaseModel):
    success: bool = False
    extracted_title: str | None = None
    confidence: int = Field(default=0, ge=0, le=100)
    method: ExtractionMethod = "none"
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    error_kind: ErrorKind | None = None
    extra_required_fields: list[str] = Field(default_factory=list)
    auto_consent_fields: dict[str, str] = Field(default_factory=dict)
    memo: str | None = None
    trailing_notes: str = ""


class InferenceResult(BaseModel):
    required_fields: list[str] = Field(default_factory=list)
    dropped_fields: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    current_salary: str | None = None
    desired_salary: str | None = None
    minimum_desired_salary: str | None = None
    hedge: str | None = None
    current_employer: str | None = None
    resignation: bool = False
