from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from job_referral.core.config import settings

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^\w\-]+")
_MAX_SLUG_LENGTH = 60


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def slugify(title: str | None) -> str:
    slug = _SLUG_RE.sub("_", (title or "").strip()).strip("_")
    return slug[:_MAX_SLUG_LENGTH] or "unmatched"


def audit_filename(posting: str | None, moment: datetime | None = None) -> str:
    stamp = (moment or _utc_now()).strftime("%Y%m%dT%H%M%S%fZ")
    return f"{slugify(posting)}_{stamp}.json"


class AuditWriter:
    """Writes one JSON record per pipeline run; existing files are never overwritten."""

    def __init__(self, directory: str | None = None, enabled: bool | None = None):
        self.directory = Path(directory or settings.audit_dir)
        self.enabled = settings.audit_enabled if enabled is None else enabled

    def write(self, posting: str | None, payload: dict[str, Any]) -> str | None:
        if not self.enabled:
            return None
        path = self.directory / audit_filename(posting)
        try:
            os.makedirs(self.directory, exist_ok=True)
            with path.open("x", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2, default=str)
        except OSError as exc:
            logger.warning("audit_write_failed path=%s error=%s", path, exc)
            return None
        logger.info("audit_written path=%s", path)
        return str(path)
