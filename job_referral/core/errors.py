from __future__ import annotations

from typing import Any


class ExternalCollaboratorError(RuntimeError):
    """A portal or text-extractor call failed; fatal for the request, never retried."""

    def __init__(self, message: str, stage: str = "external"):
        super().__init__(message)
        self.stage = stage
        # Partial pipeline result (trace included) attached by the orchestrator.
        self.result: Any = None


class PortalError(ExternalCollaboratorError):
    def __init__(self, message: str):
        super().__init__(message, stage="portal")


class TextExtractionError(ExternalCollaboratorError):
    def __init__(self, message: str):
        super().__init__(message, stage="text_extraction")
