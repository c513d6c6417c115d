from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class DateEntry(BaseModel):
    year: int
    month: int
    content: str

    @field_validator("month")
    @classmethod
    def _validate_month(cls, value: int) -> int:
        if value < 1 or value > 12:
            raise ValueError("month must be between 1 and 12")
        return value


class ResumeFields(BaseModel):
    name: str | None = None
    furigana: str | None = None
    age: int | None = None
    phone: str | None = None
    email: str | None = None
    recommendation_comment: str | None = None
    career_summary: str | None = None
    education_entries: list[DateEntry] = Field(default_factory=list)
    career_entries: list[DateEntry] = Field(default_factory=list)
    education_raw_lines: list[str] = Field(default_factory=list)
    career_raw_lines: list[str] = Field(default_factory=list)
    current_employer: str | None = None
    highest_education: str | None = None
    birth_date: str | None = None
    gender: str | None = None
    address: str | None = None
    field_confidences: dict[str, int] = Field(default_factory=dict)
    confidence: int = 0
