import json
from pathlib import Path
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status

from job_referral.core.config import settings
from job_referral.core.errors import ExternalCollaboratorError
from job_referral.core.rate_limit import rate_limit
from job_referral.core.security import require_api_key
from job_referral.parsing.models import TextExtractor
from job_referral.parsing.parse import DocumentTextExtractor
from job_referral.portal.base import PortalSession
from job_referral.portal.playwright_portal import open_portal_session
from job_referral.schemas import SubmissionRequest, SubmissionResult
from job_referral.services.audit import AuditWriter
from job_referral.services.submission_service import SubmissionService

from .uploads import stored_resume

router = APIRouter()


def upstream_payload(upstream_json: str = Form(...)) -> dict[str, Any]:
    try:
        payload = json.loads(upstream_json)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"upstream_json is not valid JSON: {exc}",
        ) from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="upstream_json must be a JSON object.")
    return payload


async def get_portal_session() -> AsyncIterator[PortalSession]:
    async with open_portal_session(settings) as session:
        yield session


def get_text_extractor() -> TextExtractor:
    return DocumentTextExtractor()


def get_audit_writer() -> AuditWriter:
    return AuditWriter()


@router.post("/submissions", response_model=SubmissionResult)
@rate_limit()
async def submissions_create(
    request: Request,
    _auth: None = Depends(require_api_key),
    payload: dict[str, Any] = Depends(upstream_payload),
    resume_path: Path = Depends(stored_resume),
    session: PortalSession = Depends(get_portal_session),
    text_extractor: TextExtractor = Depends(get_text_extractor),
    audit_writer: AuditWriter = Depends(get_audit_writer),
):
    _ = request
    service = SubmissionService(session.portal, text_extractor, audit_writer)
    try:
        result = await service.run(SubmissionRequest(upstream_json=payload, resume_path=str(resume_path)))
    except ExternalCollaboratorError as exc:
        detail: dict[str, Any] = {"message": str(exc), "stage": exc.stage}
        if isinstance(exc.result, SubmissionResult):
            detail["result"] = exc.result.model_dump(mode="json")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail) from exc
    session.selected_posting = result.matched_posting
    return result
