import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from job_referral.api.v1.health import router as health_router
from job_referral.api.v1.jobs import router as jobs_router
from job_referral.api.v1.postings import router as postings_router
from job_referral.api.v1.resumes import router as resumes_router
from job_referral.api.v1.submissions import router as submissions_router
from job_referral.core.config import settings
from job_referral.core.cors import cors_allow_credentials, cors_allowed_origins
from job_referral.core.errors import ExternalCollaboratorError
from job_referral.core.rate_limit import limiter
from job_referral.core.rules import get_rules_config

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

# Fail at startup on a missing or malformed rules file.
get_rules_config()

app = FastAPI(title="Job Referral API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(ExternalCollaboratorError)
async def external_collaborator_error_handler(request: Request, exc: ExternalCollaboratorError):
    logger.warning("external_collaborator_error path=%s stage=%s error=%s", request.url.path, exc.stage, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": {"message": str(exc), "stage": exc.stage}},
    )


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(jobs_router, prefix="/v1", tags=["Jobs"])
app.include_router(postings_router, prefix="/v1", tags=["Postings"])
app.include_router(resumes_router, prefix="/v1", tags=["Resumes"])
app.include_router(submissions_router, prefix="/v1", tags=["Submissions"])
