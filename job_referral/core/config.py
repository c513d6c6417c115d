from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    portal_url: str | None
    portal_headless: bool
    portal_navigation_timeout_ms: int
    portal_settle_delay_ms: int
    audit_enabled: bool
    audit_dir: str
    upload_dir: str
    upload_max_bytes: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    portal_url=_get_env("PORTAL_URL"),
    portal_headless=_get_env_bool("PORTAL_HEADLESS", True),
    portal_navigation_timeout_ms=_get_env_int("PORTAL_NAVIGATION_TIMEOUT_MS", 30_000),
    portal_settle_delay_ms=_get_env_int("PORTAL_SETTLE_DELAY_MS", 2_000),
    audit_enabled=_get_env_bool("AUDIT_ENABLED", True),
    audit_dir=_get_env("AUDIT_DIR", "data/audit") or "data/audit",
    upload_dir=_get_env("UPLOAD_DIR", "data/uploads") or "data/uploads",
    upload_max_bytes=_get_env_int("UPLOAD_MAX_BYTES", 10 * 1024 * 1024),
)

if settings.portal_navigation_timeout_ms <= 0:
    raise RuntimeError("PORTAL_NAVIGATION_TIMEOUT_MS must be a positive integer.")
