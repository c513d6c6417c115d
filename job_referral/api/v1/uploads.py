from __future__ import annotations

import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import File, HTTPException, UploadFile, status

from job_referral.core.config import settings

ALLOWED_EXTENSIONS = {"pdf", "txt"}
_CHUNK_BYTES = 1024 * 64


def upload_extension(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported file type '.{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}.",
        )
    return ext


async def read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.upload_max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum allowed size is {settings.upload_max_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    payload = b"".join(chunks)
    if not payload:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    return payload


async def save_upload(file: UploadFile) -> Path:
    """Validate and persist an upload under the upload directory; the caller removes it."""
    ext = upload_extension(file.filename or "")
    content = await read_upload(file)
    os.makedirs(settings.upload_dir, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(mode="wb", suffix=f".{ext}", dir=settings.upload_dir, delete=False)
    try:
        tmp.write(content)
    finally:
        tmp.close()
    return Path(tmp.name)


def discard_upload(path: Path) -> None:
    if path.exists():
        path.unlink()


@asynccontextmanager
async def _stored(upload: UploadFile) -> AsyncIterator[Path]:
    path = await save_upload(upload)
    try:
        yield path
    finally:
        discard_upload(path)


async def stored_file(file: UploadFile = File(...)) -> AsyncIterator[Path]:
    async with _stored(file) as path:
        yield path


async def stored_resume(resume: UploadFile = File(...)) -> AsyncIterator[Path]:
    async with _stored(resume) as path:
        yield path
