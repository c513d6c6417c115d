import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status

from job_referral.core.errors import ExternalCollaboratorError
from job_referral.core.rate_limit import rate_limit
from job_referral.core.security import require_api_key
from job_referral.parsing.parse import parse_document
from job_referral.resume.fields import extract_resume_fields
from job_referral.schemas import ResumeFields

from .uploads import stored_file

router = APIRouter()


@router.post("/resumes/extract", response_model=ResumeFields, dependencies=[Depends(require_api_key)])
@rate_limit()
async def resumes_extract(request: Request, path: Path = Depends(stored_file)):
    _ = request
    try:
        extracted = await asyncio.to_thread(parse_document, str(path))
    except ExternalCollaboratorError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return extract_resume_fields(extracted.text)
