from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_DASH_RE = re.compile(r"[‐‑‒–—―−]")
_OPEN_ANGLE_RE = re.compile(r"[〈《]")
_CLOSE_ANGLE_RE = re.compile(r"[〉》]")
_DECORATION_RE = re.compile(r"[【】〈〉《》()（）\[\]「」『』★☆◆◇■□▲△▼▽●○◎]")
_SEPARATOR_RUN_RE = re.compile(r"[・/\-]{2,}")
_EDGE_SEPARATOR_RE = re.compile(r"^[\s・/\-]+|[\s・/\-]+$")


def normalize(title: str | None) -> str:
    """Fold width, whitespace, interpuncts, dashes and case so equivalent titles compare equal."""
    if not title or not isinstance(title, str):
        return ""
    text = unicodedata.normalize("NFKC", title)
    text = _WHITESPACE_RE.sub("", text)
    text = text.replace("・", "/")
    text = _DASH_RE.sub("-", text)
    text = _OPEN_ANGLE_RE.sub("(", text)
    text = _CLOSE_ANGLE_RE.sub(")", text)
    # Lower-casing and whitespace removal can leave combining marks to recompose.
    return unicodedata.normalize("NFKC", text.lower())


def strip_decoration(title: str | None) -> str:
    """Drop bracket and symbol clutter, then separator runs and dangling separators."""
    if not title or not isinstance(title, str):
        return ""
    text = _DECORATION_RE.sub("", unicodedata.normalize("NFC", title))
    text = _SEPARATOR_RUN_RE.sub("", text)
    text = _EDGE_SEPARATOR_RE.sub("", text)
    return unicodedata.normalize("NFC", text)


def core_form(title: str | None) -> str:
    return strip_decoration(normalize(title))
