from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class ErrorKind(str, Enum):
    INVALID_INPUT_FORMAT = "INVALID_INPUT_FORMAT"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    EXTRACTION_TOO_SHORT = "EXTRACTION_TOO_SHORT"
    EXTRACTION_TOO_LONG = "EXTRACTION_TOO_LONG"
    LOW_EXTRACTION_CONFIDENCE = "LOW_EXTRACTION_CONFIDENCE"
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"
    LOW_CONFIDENCE_MATCH = "LOW_CONFIDENCE_MATCH"
    NO_MATCH = "NO_MATCH"
    POSTING_SELECTION_FAILED = "POSTING_SELECTION_FAILED"
    UNMAPPED_REQUIRED_FIELD = "UNMAPPED_REQUIRED_FIELD"
    EXTERNAL_COLLABORATOR_FAILURE = "EXTERNAL_COLLABORATOR_FAILURE"


TraceLevel = Literal["info", "success", "warning", "error"]


class TraceEvent(BaseModel):
    stage: str
    level: TraceLevel = "info"
    message: str
