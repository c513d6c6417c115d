from __future__ import annotations

import logging
import re
from typing import Any

from job_referral.core.rules import get_rule_value
from job_referral.extraction.requirements import infer_required_fields, split_memo
from job_referral.schemas import ErrorKind, ExtractionResult, MemoRecord, SimpleRecord, parse_upstream_record

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        output.append(value)
    return output


def _fail(result: ExtractionResult, kind: ErrorKind, message: str) -> ExtractionResult:
    result.success = False
    result.error_kind = kind
    result.errors.append(message)
    logger.info("job_name_extraction failed kind=%s", kind.value)
    return result


def _check_length(result: ExtractionResult, title: str) -> bool:
    min_length = int(get_rule_value("job_name.min_length", 3))
    max_length = int(get_rule_value("job_name.max_length", 100))
    if len(title) < min_length:
        _fail(
            result,
            ErrorKind.EXTRACTION_TOO_SHORT,
            f"Extracted job name '{title}' is shorter than {min_length} characters.",
        )
        return False
    if len(title) > max_length:
        _fail(
            result,
            ErrorKind.EXTRACTION_TOO_LONG,
            f"Extracted job name is longer than {max_length} characters ({len(title)}).",
        )
        return False
    return True


def _apply_qualifier_bonus(result: ExtractionResult, title: str) -> None:
    opener = str(get_rule_value("job_name.qualifier_open", "【"))
    closer = str(get_rule_value("job_name.qualifier_close", "】"))
    if opener in title and closer in title:
        bonus = int(get_rule_value("job_name.confidence.qualifier_bonus", 3))
        result.confidence = min(100, result.confidence + bonus)
        result.warnings.append(f"Job name carries a role qualifier {opener}...{closer}; kept as part of the title.")


def _from_simple(record: SimpleRecord) -> ExtractionResult:
    result = ExtractionResult(
        extracted_title=record.name.strip(),
        confidence=int(get_rule_value("job_name.confidence.direct", 100)),
        method="direct",
    )
    if not _check_length(result, result.extracted_title or ""):
        return result
    _apply_qualifier_bonus(result, result.extracted_title or "")
    result.success = True
    return result


def _from_memo(record: MemoRecord) -> ExtractionResult:
    result = ExtractionResult(method="memo_pattern", memo=record.memo)
    segment, trailing_notes = split_memo(record.memo)
    result.trailing_notes = trailing_notes

    if segment is None:
        marker = get_rule_value("job_name.memo_marker", "W送付")
        return _fail(result, ErrorKind.EXTRACTION_FAILED, f"Memo does not contain the '{marker}' marker.")

    title = _WHITESPACE_RE.sub(" ", segment).strip()
    result.extracted_title = title or None
    if not _check_length(result, title):
        return result

    result.confidence = int(get_rule_value("job_name.confidence.memo_pattern", 95))
    _apply_qualifier_bonus(result, title)

    flag = str(get_rule_value("job_name.extra_fields_flag", "追加指定項目あり"))
    extra_fields: list[str] = []
    if record.extra_fields:
        if record.record_kind and flag in record.record_kind:
            extra_fields = list(record.extra_fields)
        else:
            result.warnings.append(
                f"Ignored {len(record.extra_fields)} extra field(s): record kind is not flagged '{flag}'."
            )
    result.auto_consent_fields = dict(record.auto_consent)

    inference = infer_required_fields(trailing_notes)
    result.warnings.extend(inference.warnings)
    result.extra_required_fields = _dedupe(extra_fields + inference.required_fields)
    result.success = True
    return result


def extract_job_name(payload: Any) -> ExtractionResult:
    """Pull the target job title out of an upstream record."""
    record = parse_upstream_record(payload)
    if record is None:
        return _fail(
            ExtractionResult(),
            ErrorKind.INVALID_INPUT_FORMAT,
            "Payload matches neither the simple {name} shape nor a memo record.",
        )

    if isinstance(record, SimpleRecord):
        result = _from_simple(record)
    else:
        result = _from_memo(record)

    if result.success:
        logger.info(
            "job_name_extraction ok method=%s confidence=%s extra_fields=%s",
            result.method,
            result.confidence,
            len(result.extra_required_fields),
        )
    return result
