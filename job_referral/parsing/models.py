from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field, field_validator


class ExtractedText(BaseModel):
    text: str
    page_count: int = 0
    method: str
    warnings: list[str] = Field(default_factory=list)
    decoder_lengths: dict[str, int] = Field(default_factory=dict)

    @field_validator("method")
    @classmethod
    def _validate_method(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pypdf", "pdfplumber", "txt"}:
            raise ValueError("method must be one of: pypdf, pdfplumber, txt")
        return normalized


class TextExtractor(Protocol):
    def extract_text(self, path: str) -> ExtractedText:
        ...
