from __future__ import annotations

import logging
from pathlib import Path

from job_referral.core.errors import TextExtractionError

from .models import ExtractedText

logger = logging.getLogger(__name__)


def _parse_txt(file_path: Path) -> ExtractedText:
    text = file_path.read_text(encoding="utf-8", errors="replace")
    return ExtractedText(text=text, page_count=1, method="txt")


def _decode_pypdf(file_path: Path) -> tuple[str, int, list[str]]:
    warnings: list[str] = []
    try:
        from pypdf import PdfReader
    except Exception:
        warnings.append("pypdf is unavailable; skipping decoder.")
        return "", 0, warnings

    try:
        reader = PdfReader(str(file_path))
        pages = [(page.extract_text() or "") for page in reader.pages]
        return "\n".join(pages).strip(), len(pages), warnings
    except Exception as exc:
        warnings.append(f"pypdf decoding failed: {exc}")
        return "", 0, warnings


def _decode_pdfplumber(file_path: Path) -> tuple[str, int, list[str]]:
    warnings: list[str] = []
    try:
        import pdfplumber
    except Exception:
        warnings.append("pdfplumber is unavailable; skipping decoder.")
        return "", 0, warnings

    try:
        with pdfplumber.open(str(file_path)) as pdf:
            pages = [(page.extract_text() or "") for page in pdf.pages]
        return "\n".join(pages).strip(), len(pages), warnings
    except Exception as exc:
        warnings.append(f"pdfplumber decoding failed: {exc}")
        return "", 0, warnings


def _parse_pdf(file_path: Path) -> ExtractedText:
    pypdf_text, pypdf_pages, pypdf_warnings = _decode_pypdf(file_path)
    plumber_text, plumber_pages, plumber_warnings = _decode_pdfplumber(file_path)
    warnings = pypdf_warnings + plumber_warnings

    if not pypdf_text and not plumber_text:
        raise TextExtractionError(f"No text could be decoded from '{file_path.name}': " + "; ".join(warnings))

    # Keep whichever decoder produced more characters.
    if len(plumber_text) > len(pypdf_text):
        text, page_count, method = plumber_text, plumber_pages, "pdfplumber"
    else:
        text, page_count, method = pypdf_text, pypdf_pages, "pypdf"

    logger.info(
        "pdf_decoded method=%s pypdf_chars=%s pdfplumber_chars=%s pages=%s",
        method,
        len(pypdf_text),
        len(plumber_text),
        page_count,
    )
    return ExtractedText(
        text=text,
        page_count=page_count,
        method=method,
        warnings=warnings,
        decoder_lengths={"pypdf": len(pypdf_text), "pdfplumber": len(plumber_text)},
    )


def parse_document(file_path: str) -> ExtractedText:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input document not found: '{path}'")

    extension = path.suffix.lower()
    if extension == ".txt":
        return _parse_txt(path)
    if extension == ".pdf":
        return _parse_pdf(path)
    raise NotImplementedError(f"Unsupported file type '{extension}'. Supported types: .txt, .pdf")


class DocumentTextExtractor:
    """Default text extractor backed by parse_document."""

    def extract_text(self, path: str) -> ExtractedText:
        return parse_document(path)
