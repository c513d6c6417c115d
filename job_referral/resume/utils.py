from __future__ import annotations

import re
import unicodedata
from functools import lru_cache

from job_referral.core.rules import get_rule_list

_DIGIT_DASH_RE = re.compile(r"(?<=\d)[‐‑‒–—―−ー](?=\d)")


def enumerate_lines(text: str) -> list[tuple[int, str]]:
    return [(index + 1, line) for index, line in enumerate(text.splitlines())]


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def content_lines(text: str) -> list[str]:
    """Trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def fold_width(line: str) -> str:
    """NFKC-fold digits and punctuation so numeric patterns see ASCII."""
    return _DIGIT_DASH_RE.sub("-", unicodedata.normalize("NFKC", line))


def contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


@lru_cache(maxsize=1)
def _noise_patterns() -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern) for pattern in get_rule_list("resume.noise_patterns"))


def is_noise_line(line: str) -> bool:
    stripped = normalize_line(line)
    if not stripped:
        return True
    return any(pattern.search(stripped) for pattern in _noise_patterns())


def clear_pattern_cache() -> None:
    _noise_patterns.cache_clear()
