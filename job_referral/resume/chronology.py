from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from job_referral.core.rules import get_rule_list, get_rule_value
from job_referral.schemas import DateEntry

from .utils import contains_any, enumerate_lines, fold_width, is_noise_line, normalize_line

logger = logging.getLogger(__name__)

# Strictest shape first.
_DATE_PATTERNS = (
    re.compile(r"(\d{4})\s*年\s*(\d{1,2})\s*月"),
    re.compile(r"(\d{4})\s*[/.\-]\s*(\d{1,2})(?!\d)"),
    re.compile(r"(\d{4})\s+(\d{1,2})(?=\s|$)"),
)
_LEADING_JUNK_RE = re.compile(r"^[\s:：\-/・]+")
_MIN_SUBSTANTIVE_LENGTH = 5
_TOP_ENTRIES = 3


@dataclass
class Chronology:
    education_entries: list[DateEntry] = field(default_factory=list)
    career_entries: list[DateEntry] = field(default_factory=list)
    education_raw_lines: list[str] = field(default_factory=list)
    career_raw_lines: list[str] = field(default_factory=list)


def parse_date_entry(line: str) -> DateEntry | None:
    folded = fold_width(line)
    for pattern in _DATE_PATTERNS:
        match = pattern.search(folded)
        if not match:
            continue
        year, month = int(match.group(1)), int(match.group(2))
        if year < 1900 or year > 2100 or month < 1 or month > 12:
            continue
        content = folded[: match.start()] + " " + folded[match.end():]
        content = _LEADING_JUNK_RE.sub("", normalize_line(content))
        return DateEntry(year=year, month=month, content=content)
    return None


def scan_chronology(text: str) -> Chronology:
    """Single forward scan collecting dated education and career entries."""
    chronology = Chronology()
    education_keyword = str(get_rule_value("resume.sections.education_keyword", "学歴"))
    career_keyword = str(get_rule_value("resume.sections.career_keyword", "職歴"))
    end_keywords = get_rule_list("resume.sections.end_keywords")
    end_lines = set(get_rule_list("resume.sections.end_lines"))

    section: str | None = None
    # Entry whose date sat on its own line; the next substantive line supplies its content.
    pending: DateEntry | None = None

    for _, raw_line in enumerate_lines(text):
        line = normalize_line(raw_line)
        if not line or is_noise_line(line):
            continue

        entry = parse_date_entry(line)
        if entry is None:
            if education_keyword in line and career_keyword not in line:
                section, pending = "education", None
                continue
            if career_keyword in line and education_keyword not in line:
                section, pending = "career", None
                continue
            if line in end_lines or contains_any(line, end_keywords):
                section, pending = None, None
                continue

        if section is None:
            continue
        entries = chronology.education_entries if section == "education" else chronology.career_entries
        raw_lines = chronology.education_raw_lines if section == "education" else chronology.career_raw_lines

        if entry is not None:
            entries.append(entry)
            pending = entry if not entry.content else None
            continue

        if pending is not None:
            pending.content = line
            pending = None
            continue

        if len(line) > _MIN_SUBSTANTIVE_LENGTH:
            raw_lines.append(line)

    logger.debug(
        "chronology_scan education=%s career=%s",
        len(chronology.education_entries),
        len(chronology.career_entries),
    )
    return chronology


def most_recent(entries: list[DateEntry], limit: int = _TOP_ENTRIES) -> list[DateEntry]:
    return sorted(entries, key=lambda entry: (entry.year, entry.month), reverse=True)[:limit]


def _alternation(values: tuple[str, ...]) -> str:
    ordered = sorted(values, key=len, reverse=True)
    return "|".join(re.escape(value) for value in ordered)


def _employer_patterns() -> tuple[re.Pattern[str], ...]:
    suffixes = _alternation(get_rule_list("resume.company_suffixes"))
    verbs = _alternation(get_rule_list("resume.join_verbs"))
    token = r"[^\s、。,]"
    return (
        re.compile(rf"((?:{suffixes}){token}+?|{token}+?(?:{suffixes}))\s*に?\s*(?:{verbs})"),
        re.compile(rf"((?:{suffixes}){token}+|{token}+?(?:{suffixes}))(?=[\s、。,]|$)"),
    )


def derive_current_employer(career_entries: list[DateEntry]) -> str | None:
    """Company named in the most recent career entries, newest first."""
    if not career_entries:
        return None
    patterns = _employer_patterns()
    for entry in most_recent(career_entries):
        for pattern in patterns:
            match = pattern.search(entry.content)
            if match:
                return match.group(1).strip()
    return None


def derive_highest_education(education_entries: list[DateEntry]) -> str | None:
    if not education_entries:
        return None
    markers = get_rule_list("resume.graduation_markers")
    school = re.compile(rf"(\S+(?:{_alternation(get_rule_list('resume.school_suffixes'))}))")
    for entry in most_recent(education_entries):
        if not contains_any(entry.content, markers):
            continue
        match = school.search(entry.content)
        if match:
            return match.group(1)
    return None
