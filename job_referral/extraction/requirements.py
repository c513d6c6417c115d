from __future__ import annotations

import logging
import re
import unicodedata

from job_referral.core.rules import get_rule_list, get_rule_value
from job_referral.schemas import InferenceResult

logger = logging.getLogger(__name__)

_AMOUNT = r"(\d[\d,]*(?:\.\d+)?)\s*(万円|万|円)"
_CURRENT_SALARY_RE = re.compile(rf"現(?:在)?年収\s*[:：は]?\s*{_AMOUNT}")
_MINIMUM_SALARY_RE = re.compile(rf"最低(?:希望)?年収\s*[:：は]?\s*{_AMOUNT}")
_DESIRED_SALARY_RE = re.compile(rf"(?<!最低)希望年収\s*[:：は]?\s*{_AMOUNT}(?:\s*\(([^)]*)\))?")
_EMPLOYER_PATTERNS = (
    re.compile(r"現職は\s*((?:株式会社|有限会社|合同会社)[^\s、。,]+?)(?=です|に|で|[\s、。,]|$)"),
    re.compile(r"現職は\s*([^\s、。,]*?会社)"),
)
_EXPLICIT_REQUIRED_RE = re.compile(r"(?:追加)?必須(?:項目)?\s*[:：]\s*([^\n]+)")
_LIST_SPLIT_RE = re.compile(r"[、,/／]+")


def split_memo(memo: str | None) -> tuple[str | None, str]:
    """Return (title segment, trailing notes) around the marker and delimiter tokens."""
    if not memo:
        return None, ""
    marker = str(get_rule_value("job_name.memo_marker", "W送付"))
    delimiter = str(get_rule_value("job_name.delimiter", "※"))

    marker_index = memo.find(marker)
    if marker_index < 0:
        delimiter_index = memo.find(delimiter)
        trailing = memo[delimiter_index + len(delimiter):] if delimiter_index >= 0 else ""
        return None, trailing.strip()

    after_marker = memo[marker_index + len(marker):]
    delimiter_index = after_marker.find(delimiter)
    if delimiter_index < 0:
        return after_marker.strip(), ""
    return after_marker[:delimiter_index].strip(), after_marker[delimiter_index + len(delimiter):].strip()


def _format_amount(amount: str, unit: str) -> str:
    unit = "万円" if unit == "万" else unit
    return f"{amount}{unit}"


def _is_zero(amount: str) -> bool:
    try:
        return float(amount.replace(",", "")) == 0
    except ValueError:
        return False


def _looks_like_document_reference(term: str) -> bool:
    return any(marker in term for marker in get_rule_list("requirements.ambiguous_terms"))


def infer_required_fields(trailing_notes: str | None) -> InferenceResult:
    """Derive mandatory form fields from the notes that follow the job title."""
    result = InferenceResult()
    if not trailing_notes or not trailing_notes.strip():
        return result

    notes = unicodedata.normalize("NFKC", trailing_notes)
    candidates: list[str] = []

    current = _CURRENT_SALARY_RE.search(notes)
    if current:
        amount, unit = current.group(1), current.group(2)
        result.current_salary = _format_amount(amount, unit)
        candidates.append(str(get_rule_value("requirements.current_salary", "現年収")))
        if _is_zero(amount):
            result.resignation = True
            logger.info("requirement_inference current_salary_zero resignation=true")

    minimum = _MINIMUM_SALARY_RE.search(notes)
    if minimum:
        result.minimum_desired_salary = _format_amount(minimum.group(1), minimum.group(2))
        candidates.append(str(get_rule_value("requirements.minimum_desired_salary", "最低希望年収")))

    desired = _DESIRED_SALARY_RE.search(notes)
    if desired:
        result.desired_salary = _format_amount(desired.group(1), desired.group(2))
        candidates.append(str(get_rule_value("requirements.desired_salary", "希望年収")))
        hedge = (desired.group(3) or "").strip()
        if hedge and any(word in hedge for word in get_rule_list("requirements.hedge_words")):
            result.hedge = hedge
            candidates.append(str(get_rule_value("requirements.other_conditions", "その他条件")))

    for pattern in _EMPLOYER_PATTERNS:
        employer = pattern.search(notes)
        if employer and employer.group(1).strip():
            result.current_employer = employer.group(1).strip()
            candidates.append(str(get_rule_value("requirements.current_employer", "現所属")))
            break

    explicit = _EXPLICIT_REQUIRED_RE.search(notes)
    if explicit:
        candidates.extend(item.strip() for item in _LIST_SPLIT_RE.split(explicit.group(1)) if item.strip())

    allow_list = set(get_rule_list("requirements.allow_list"))
    for candidate in candidates:
        if candidate in allow_list:
            if candidate not in result.required_fields:
                result.required_fields.append(candidate)
            continue
        if candidate in result.dropped_fields:
            continue
        result.dropped_fields.append(candidate)
        logger.info("requirement_inference dropped field=%s reason=not_allow_listed", candidate)
        result.warnings.append(f"Field '{candidate}' is not on the allow-list and was not made required.")
        if _looks_like_document_reference(candidate):
            result.warnings.append(
                f"Field '{candidate}' looks like a document, skill or education reference; "
                "it must be confirmed manually."
            )

    return result
