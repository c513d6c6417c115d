from __future__ import annotations

import logging
import re
from datetime import date

from job_referral.core.rules import get_rule_list, get_rule_value
from job_referral.schemas import ResumeFields

from .chronology import derive_current_employer, derive_highest_education, scan_chronology
from .utils import contains_any, content_lines, fold_width

logger = logging.getLogger(__name__)

_KANJI = r"[一-龯々]"
_NAME_PATTERNS = (
    re.compile(rf"({_KANJI}{{1,4}})[\s　]+({_KANJI}{{1,4}})"),
    re.compile(rf"^({_KANJI}{{2}})({_KANJI}{{2}})$"),
    re.compile(rf"^({_KANJI}{{1}})({_KANJI}{{2}})$"),
)
_KANJI_ONLY_RE = re.compile(rf"^{_KANJI}{{2,6}}$")
_GENERAL_NAME_PATTERNS = (
    re.compile(rf"({_KANJI}{{2}})[\s　]*({_KANJI}{{2}})"),
    re.compile(rf"({_KANJI}{{1}})[\s　]*({_KANJI}{{2}})"),
)
_KATAKANA_RE = re.compile(r"[ァ-ン]+(?:[\s　]+[ァ-ン]+)*")
_HIRAGANA_RE = re.compile(r"[ぁ-ん]+(?:[\s　]+[ぁ-ん]+)*")

_AGE_PATTERNS = (
    re.compile(r"満\s*(\d{1,2})\s*歳"),
    re.compile(r"(?<!\d)(\d{1,2})\s*歳\s*\(?\s*[男女]"),
    re.compile(r"年齢\s*[:：]?\s*(\d{1,2})(?!\d)"),
)
_PHONE_PATTERNS = (
    re.compile(r"(?:電話|携帯|TEL|Tel|tel)[^0-9]{0,6}(0\d{1,3}[-\s]?\d{2,4}[-\s]?\d{4})(?!\d)"),
    re.compile(r"(?<!\d)(0\d{1,3}[-\s]?\d{2,4}[-\s]?\d{4})(?!\d)"),
    re.compile(r"(?<!\d)(0\d{9,10})(?!\d)"),
)
_PHONE_VALID_RE = re.compile(r"^0\d{9,10}$")
_EMAIL_RE = re.compile(r"([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})")
_PARTIAL_EMAIL_TLD_RE = re.compile(r"([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{1,2})$")
_PARTIAL_EMAIL_DOMAIN_RE = re.compile(r"([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+)$")
_EMAIL_CONTINUATION_RE = re.compile(r"^[A-Za-z]{1,3}$")
_DOMAIN_CONTINUATION_RE = re.compile(r"^\.?[A-Za-z]{2,4}$")
_EMAIL_FULL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_BIRTH_PATTERNS = (
    re.compile(r"(\d{4})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日\s*生"),
    re.compile(r"生年月日\s*[:：]?\s*(\d{4})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日"),
    re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})"),
    re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})"),
)
_GENDER_LINE_MAX = 20
_ADDRESS_MIN_LENGTH = 5
_EMAIL_LOOKAHEAD = 3

_NAME_BASE_CONFIDENCE = 60
_AGE_CONFIDENCE = 95
_PHONE_CONFIDENCE = 90
_EMAIL_CONFIDENCE = 95
_COMMENT_CONFIDENCE = 90
_SUMMARY_CONFIDENCE = 85
_DERIVED_CONFIDENCE = 90
_SUPPLEMENTARY_CONFIDENCE = 80


def _strip_labels(line: str, labels: tuple[str, ...]) -> str:
    for label in labels:
        line = line.replace(label, "")
    return line.replace(":", "").replace("：", "").strip()


def name_from_line(line: str) -> str | None:
    clean = _strip_labels(line, get_rule_list("resume.name_labels"))
    for pattern in _NAME_PATTERNS:
        match = pattern.search(clean)
        if match:
            return f"{match.group(1)} {match.group(2)}"
    if _KANJI_ONLY_RE.match(clean):
        if len(clean) == 4:
            return f"{clean[:2]} {clean[2:]}"
        if len(clean) == 3:
            return f"{clean[:1]} {clean[1:]}"
        return clean
    return None


def furigana_from_line(line: str) -> str | None:
    clean = fold_width(_strip_labels(line, get_rule_list("resume.furigana_labels")))
    katakana = _KATAKANA_RE.search(clean)
    if katakana:
        hiragana = "".join(
            chr(ord(char) - 0x60) if "ァ" <= char <= "ン" else char for char in katakana.group(0)
        )
        return re.sub(r"[\s　]+", " ", hiragana).strip()
    hiragana_match = _HIRAGANA_RE.search(clean)
    if hiragana_match:
        return re.sub(r"[\s　]+", " ", hiragana_match.group(0)).strip()
    return None


def _general_name(line: str) -> str | None:
    if contains_any(line, get_rule_list("resume.name_denylist")):
        return None
    for pattern in _GENERAL_NAME_PATTERNS:
        match = pattern.search(line)
        if match:
            return f"{match.group(1)} {match.group(2)}"
    return None


def extract_name(lines: list[str]) -> tuple[str | None, str | None]:
    name_labels = get_rule_list("resume.name_labels")
    furigana_labels = get_rule_list("resume.furigana_labels")
    name: str | None = None
    furigana: str | None = None

    for index, line in enumerate(lines):
        if not contains_any(line, name_labels):
            continue
        name = name_from_line(line)
        if name is None and index + 1 < len(lines):
            name = name_from_line(lines[index + 1])
        if name:
            break

    for index, line in enumerate(lines):
        if not contains_any(line, furigana_labels):
            continue
        furigana = furigana_from_line(line)
        if furigana:
            break
        if index + 1 < len(lines):
            furigana = furigana_from_line(lines[index + 1])
            if furigana:
                break
            if name is None and index + 2 < len(lines):
                name = name_from_line(lines[index + 2])

    if name is None:
        for line in lines:
            name = _general_name(line)
            if name:
                break
    return name, furigana


def name_confidence(name: str | None, furigana: str | None) -> int:
    score = 0
    if name:
        score += _NAME_BASE_CONFIDENCE
        if 3 <= len(name) <= 8:
            score += 20
        if " " in name:
            score += 10
    if furigana:
        score += 10
    return min(score, 100)


def extract_age(lines: list[str]) -> int | None:
    low, high = get_rule_value("resume.age_range", [15, 80])
    for line in lines:
        folded = fold_width(line)
        for pattern in _AGE_PATTERNS:
            match = pattern.search(folded)
            if match and int(low) <= int(match.group(1)) <= int(high):
                return int(match.group(1))
    return None


def _format_phone(phone: str) -> str:
    if re.fullmatch(r"\d{11}", phone):
        return f"{phone[:3]}-{phone[3:7]}-{phone[7:]}"
    if re.fullmatch(r"\d{10}", phone):
        return re.sub(r"^(\d{2,3})(\d{4})(\d{4})$", r"\1-\2-\3", phone)
    return re.sub(r"[-\s]+", "-", phone)


def extract_phone(lines: list[str]) -> str | None:
    for line in lines:
        folded = fold_width(line)
        for pattern in _PHONE_PATTERNS:
            match = pattern.search(folded)
            if not match:
                continue
            phone = match.group(1).strip()
            if not _PHONE_VALID_RE.match(re.sub(r"[-\s]", "", phone)):
                continue
            return _format_phone(phone)
    return None


def _repair_split_email(line: str, following: list[str]) -> str | None:
    partial = _PARTIAL_EMAIL_TLD_RE.search(line)
    if partial:
        for candidate in following:
            if _EMAIL_CONTINUATION_RE.match(candidate):
                joined = partial.group(1) + candidate
                if _EMAIL_FULL_RE.match(joined):
                    return joined
        return None
    partial = _PARTIAL_EMAIL_DOMAIN_RE.search(line)
    if partial:
        for candidate in following:
            if _DOMAIN_CONTINUATION_RE.match(candidate):
                suffix = candidate if candidate.startswith(".") else f".{candidate}"
                joined = partial.group(1) + suffix
                if _EMAIL_FULL_RE.match(joined):
                    return joined
    return None


def extract_email(lines: list[str]) -> str | None:
    for index, line in enumerate(lines):
        if "@" not in line:
            continue
        match = _EMAIL_RE.search(line)
        if match:
            return match.group(1)
        following = lines[index + 1: index + 1 + _EMAIL_LOOKAHEAD]
        repaired = _repair_split_email(line, following)
        if repaired:
            return repaired
    return None


def extract_section(text: str, headers: tuple[str, ...], terminators: tuple[str, ...]) -> str | None:
    """Lines after the first header line up to a terminator, blank lines kept."""
    raw_lines = [line.strip() for line in text.splitlines()]
    for index, line in enumerate(raw_lines):
        header = next((item for item in headers if item in line), None)
        if header is None:
            continue
        collected: list[str] = []
        remainder = line.split(header, 1)[1].lstrip(":： 　").strip()
        if remainder:
            collected.append(remainder)
        for current in raw_lines[index + 1:]:
            if current and contains_any(current, terminators):
                break
            collected.append(current)
        while collected and not collected[-1]:
            collected.pop()
        while collected and not collected[0]:
            collected.pop(0)
        if collected:
            return "\n".join(collected)
    return None


def extract_birth_date(lines: list[str]) -> str | None:
    current_year = date.today().year
    for line in lines:
        folded = fold_width(line)
        for pattern in _BIRTH_PATTERNS:
            match = pattern.search(folded)
            if not match:
                continue
            year, month, day = (int(group) for group in match.groups())
            if 1900 <= year <= current_year and 1 <= month <= 12 and 1 <= day <= 31:
                return f"{year}/{month:02d}/{day:02d}"
    return None


def extract_gender(lines: list[str]) -> str | None:
    for line in lines:
        if len(line) >= _GENDER_LINE_MAX:
            continue
        if ("男" in line and "女" not in line) or "男性" in line:
            return "男"
        if ("女" in line and "男" not in line) or "女性" in line:
            return "女"
    return None


def extract_address(lines: list[str]) -> str | None:
    prefectures = "|".join(re.escape(item) for item in get_rule_list("resume.prefectures"))
    head = rf"(?:{prefectures}|[一-龯]{{2,3}}県)" if prefectures else r"[一-龯]{2,3}県"
    pattern = re.compile(rf"({head}[一-龯々ぁ-んァ-ヶー市区町村丁目番地号0-9\-\s]+)")
    for line in lines:
        match = pattern.search(fold_width(line))
        if match:
            address = match.group(1).strip()
            if len(address) >= _ADDRESS_MIN_LENGTH:
                return address
    return None


def extract_resume_fields(text: str) -> ResumeFields:
    """Pull candidate attributes out of decoded résumé text."""
    fields = ResumeFields()
    if not text or not text.strip():
        return fields

    lines = content_lines(text)
    confidences: dict[str, int] = {}

    fields.name, fields.furigana = extract_name(lines)
    if fields.name:
        confidences["name"] = name_confidence(fields.name, fields.furigana)
    if fields.furigana:
        confidences["furigana"] = name_confidence(fields.name, fields.furigana)

    fields.age = extract_age(lines)
    if fields.age is not None:
        confidences["age"] = _AGE_CONFIDENCE

    fields.phone = extract_phone(lines)
    if fields.phone:
        confidences["phone"] = _PHONE_CONFIDENCE

    fields.email = extract_email(lines)
    if fields.email:
        confidences["email"] = _EMAIL_CONFIDENCE

    fields.recommendation_comment = extract_section(
        text,
        get_rule_list("resume.recommendation.headers"),
        get_rule_list("resume.recommendation.terminators"),
    )
    if fields.recommendation_comment:
        confidences["recommendation_comment"] = _COMMENT_CONFIDENCE

    fields.career_summary = extract_section(
        text,
        get_rule_list("resume.career_summary.headers"),
        get_rule_list("resume.career_summary.terminators"),
    )
    if fields.career_summary:
        confidences["career_summary"] = _SUMMARY_CONFIDENCE

    chronology = scan_chronology(text)
    fields.education_entries = chronology.education_entries
    fields.career_entries = chronology.career_entries
    fields.education_raw_lines = chronology.education_raw_lines
    fields.career_raw_lines = chronology.career_raw_lines

    fields.current_employer = derive_current_employer(fields.career_entries)
    if fields.current_employer:
        confidences["current_employer"] = _DERIVED_CONFIDENCE
    fields.highest_education = derive_highest_education(fields.education_entries)
    if fields.highest_education:
        confidences["highest_education"] = _DERIVED_CONFIDENCE

    fields.birth_date = extract_birth_date(lines)
    fields.gender = extract_gender(lines)
    fields.address = extract_address(lines)
    for attribute in ("birth_date", "gender", "address"):
        if getattr(fields, attribute):
            confidences[attribute] = _SUPPLEMENTARY_CONFIDENCE

    fields.field_confidences = confidences
    fields.confidence = max(confidences.values(), default=0)
    logger.info(
        "resume_extraction fields=%s confidence=%s",
        ",".join(sorted(confidences)),
        fields.confidence,
    )
    return fields
