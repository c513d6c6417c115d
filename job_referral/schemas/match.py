from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from .common import ErrorKind

MatchTier = Literal["exact", "normalized", "core", "subset", "none"]


class PostingCheck(BaseModel):
    original: str
    normalized: str
    core: str
    tier: MatchTier = "none"
    confidence: int = 0
    remaining: str | None = None


class MatchResult(BaseModel):
    success: bool = False
    matched_title: str | None = None
    match_tier: MatchTier = "none"
    confidence: int = 0
    alternatives: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    error_kind: ErrorKind | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class MatchRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    postings: list[str] = Field(default_factory=list, max_length=2000)
