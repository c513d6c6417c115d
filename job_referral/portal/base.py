from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel

from job_referral.schemas import FormField


class SelectionResult(BaseModel):
    success: bool
    error: str | None = None


class FormPortal(Protocol):
    async def list_postings(self) -> list[str]:
        ...

    async def select_posting(self, title: str) -> SelectionResult:
        ...

    async def read_required_fields(self) -> list[FormField]:
        ...


@dataclass
class PortalSession:
    """Request-scoped handle on one portal conversation."""

    portal: FormPortal
    url: str | None = None
    selected_posting: str | None = None
