from __future__ import annotations

from job_referral.core.config import settings


def cors_allowed_origins() -> list[str]:
    return list(settings.cors_allowed_origins)


def cors_allow_credentials() -> bool:
    # Credentials are never combined with a wildcard origin.
    return settings.cors_allow_credentials and "*" not in settings.cors_allowed_origins
