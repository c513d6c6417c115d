from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .common import ErrorKind, TraceEvent
from .extraction import ExtractionResult
from .mapping import FieldMapping
from .match import MatchResult


class SubmissionRequest(BaseModel):
    upstream_json: dict[str, Any]
    resume_path: str


class SubmissionResult(BaseModel):
    success: bool = False
    matched_posting: str | None = None
    field_mappings: list[FieldMapping] = Field(default_factory=list)
    unmapped_required_fields: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    error_kind: ErrorKind | None = None
    extraction: ExtractionResult | None = None
    match: MatchResult | None = None
    attempted_mappings: list[FieldMapping] = Field(default_factory=list)
    trace: list[TraceEvent] = Field(default_factory=list)
    audit_path: str | None = None
