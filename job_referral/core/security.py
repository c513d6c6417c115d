from __future__ import annotations

from fastapi import Header, HTTPException, status

from job_referral.core.config import settings


def _normalize_lang(lang: str | None) -> str:
    if not lang:
        return "ja"
    return lang.split(",")[0].split("-")[0].strip().lower()


def _auth_error_message(lang: str | None) -> str:
    key = _normalize_lang(lang)
    messages = {
        "ja": "有効なAPIキーを指定してください。",
        "en": "Please provide a valid API key.",
    }
    return messages.get(key, messages["en"])


def check_api_key(x_api_key: str | None, lang: str | None = None) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_auth_error_message(lang),
        )


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    accept_language: str | None = Header(default=None, alias="Accept-Language"),
) -> None:
    check_api_key(x_api_key, accept_language)
