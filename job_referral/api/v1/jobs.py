from typing import Any

from fastapi import APIRouter, Body, Header, Request

from job_referral.core.rate_limit import rate_limit
from job_referral.core.security import check_api_key
from job_referral.extraction.job_name import extract_job_name
from job_referral.schemas import ExtractionResult

router = APIRouter()


@router.post("/jobs/extract", response_model=ExtractionResult)
@rate_limit()
async def jobs_extract(
    request: Request,
    payload: Any = Body(...),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    accept_language: str | None = Header(default=None, alias="Accept-Language"),
):
    _ = request
    check_api_key(x_api_key, accept_language)
    return extract_job_name(payload)
