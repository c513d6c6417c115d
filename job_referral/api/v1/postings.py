from fastapi import APIRouter, Header, Request

from job_referral.core.rate_limit import rate_limit
from job_referral.core.security import check_api_key
from job_referral.matching.posting_matcher import match_posting
from job_referral.schemas import MatchRequest, MatchResult

router = APIRouter()


@router.post("/postings/match", response_model=MatchResult)
@rate_limit()
async def postings_match(
    request: Request,
    payload: MatchRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    accept_language: str | None = Header(default=None, alias="Accept-Language"),
):
    _ = request
    check_api_key(x_api_key, accept_language)
    return match_posting(payload.title, payload.postings)
