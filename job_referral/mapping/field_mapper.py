from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Iterable

from job_referral.core.rules import get_rule_list, get_rule_value
from job_referral.extraction.requirements import infer_required_fields
from job_referral.schemas import (
    ExtractionResult,
    FieldMapping,
    FormField,
    InferenceResult,
    MappingResult,
    ResumeFields,
)

logger = logging.getLogger(__name__)

_MEMO_RECOMMENDATION_RE = re.compile(r"推薦(?:理由|コメント|文)\s*[:：]\s*([^\n※]+)")
_BRACKETED_CLAUSE_RE = re.compile(r"[（(【「]([^）)】」]+)[）)】」]")


def _keyword_table(path: str, target_key: str) -> list[tuple[tuple[str, ...], str]]:
    table: list[tuple[tuple[str, ...], str]] = []
    for row in get_rule_value(path, []) or []:
        if not isinstance(row, dict):
            continue
        keywords = tuple(str(item) for item in row.get("keywords", []) if str(item))
        target = str(row.get(target_key, "")).strip()
        if keywords and target:
            table.append((keywords, target))
    return table


def _lookup(table: list[tuple[tuple[str, ...], str]], field_name: str) -> str | None:
    for keywords, target in table:
        if any(keyword in field_name for keyword in keywords):
            return target
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _form_fields_for_extra(extra: str, fields: list[FormField]) -> list[str]:
    exact = [form_field.name for form_field in fields if form_field.name == extra]
    if exact:
        return exact
    # A longer canonical name holding the extra (最低希望年収 for 希望年収) is a different field.
    broader = [name for name in get_rule_list("requirements.allow_list") if name != extra and extra in name]
    return [
        form_field.name
        for form_field in fields
        if (extra in form_field.name or form_field.name in extra)
        and not any(name in form_field.name for name in broader)
    ]


def resolve_required_fields(
    form_fields: Iterable[FormField],
    extra_required_fields: Iterable[str],
) -> tuple[list[str], list[str]]:
    """Names of required form fields, plus warnings for extras the form does not offer."""
    fields = list(form_fields)
    extras = [item.strip() for item in extra_required_fields if item and item.strip()]
    required: list[str] = []
    warnings: list[str] = []

    for form_field in fields:
        if form_field.required and form_field.name not in required:
            required.append(form_field.name)

    for extra in extras:
        matched = _form_fields_for_extra(extra, fields)
        if not matched:
            warnings.append(f"Extra required field '{extra}' is not present on the portal form.")
            continue
        if len(matched) > 1:
            warnings.append(
                f"Extra required field '{extra}' matches several form fields ({', '.join(matched)}); none was made required."
            )
            continue
        if matched[0] not in required:
            required.append(matched[0])
    return required, warnings


class _FieldResolver:
    def __init__(self, resume: ResumeFields, extraction: ExtractionResult, inference: InferenceResult):
        self.resume = resume
        self.extraction = extraction
        self.inference = inference
        self.consent_responses = {
            str(key): str(value) for key, value in (get_rule_value("mapping.consent_responses", {}) or {}).items()
        }
        self.resume_table = _keyword_table("mapping.resume_fields", "attribute")
        self.salary_table = _keyword_table("mapping.salary_fields", "clause")
        self.career_summary_field = str(get_rule_value("mapping.career_summary_field", "経歴"))
        self.notes_fields = tuple(str(item) for item in get_rule_value("mapping.notes_fields", []) or [])

    def resolve(self, field_name: str) -> FieldMapping:
        for step in (
            self._consent,
            self._auto_consent,
            self._resume,
            self._memo_clause,
            self._memo_recommendation,
            self._notes,
        ):
            mapping = step(field_name)
            if mapping is not None:
                return mapping
        return FieldMapping(field_name=field_name)

    def _consent(self, field_name: str) -> FieldMapping | None:
        response = self.consent_responses.get(field_name)
        if response is None:
            return None
        return FieldMapping(field_name=field_name, value=response, source="auto-consent", confidence=100)

    def _auto_consent(self, field_name: str) -> FieldMapping | None:
        provided = self.extraction.auto_consent_fields
        value = provided.get(field_name)
        if value is None:
            value = next(
                (item for key, item in provided.items() if key and (key in field_name or field_name in key)),
                None,
            )
        if _text(value) is None:
            return None
        return FieldMapping(field_name=field_name, value=str(value), source="auto-consent", confidence=100)

    def _resume(self, field_name: str) -> FieldMapping | None:
        if field_name == self.career_summary_field:
            attribute: str | None = "career_summary"
        else:
            attribute = _lookup(self.resume_table, field_name)
        if attribute is None:
            return None
        value = _text(getattr(self.resume, attribute, None))
        if value is None:
            return None
        confidence = int(self.resume.field_confidences.get(attribute, self.resume.confidence))
        return FieldMapping(field_name=field_name, value=value, source="resume", confidence=confidence)

    def _memo_clause(self, field_name: str) -> FieldMapping | None:
        confidence = int(get_rule_value("mapping.salary_confidence_from_memo", 95))
        clause = _lookup(self.salary_table, field_name)
        if clause is None and _lookup(self.resume_table, field_name) == "current_employer":
            clause = "current_employer"
        if clause is None:
            return None
        value = _text(getattr(self.inference, clause, None))
        if value is None:
            return None
        return FieldMapping(field_name=field_name, value=value, source="memo", confidence=confidence)

    def _memo_recommendation(self, field_name: str) -> FieldMapping | None:
        if _lookup(self.resume_table, field_name) != "recommendation_comment":
            return None
        if _text(self.resume.recommendation_comment) is not None or not self.extraction.memo:
            return None
        match = _MEMO_RECOMMENDATION_RE.search(self.extraction.memo)
        if not match or not match.group(1).strip():
            return None
        confidence = int(get_rule_value("mapping.recommendation_confidence_from_memo", 80))
        return FieldMapping(field_name=field_name, value=match.group(1).strip(), source="memo", confidence=confidence)

    def _notes(self, field_name: str) -> FieldMapping | None:
        if not any(keyword in field_name for keyword in self.notes_fields):
            return None
        value: str | None = None
        if self.inference.hedge and self.inference.desired_salary:
            desired_label = str(get_rule_value("requirements.desired_salary", "希望年収"))
            value = f"{desired_label}{self.inference.desired_salary}（{self.inference.hedge}）"
        else:
            match = _BRACKETED_CLAUSE_RE.search(unicodedata.normalize("NFKC", self.extraction.trailing_notes or ""))
            if match and match.group(1).strip():
                value = match.group(1).strip()
        if value is None:
            return None
        confidence = int(get_rule_value("mapping.notes_confidence_from_memo", 90))
        return FieldMapping(field_name=field_name, value=value, source="inferred", confidence=confidence)


def map_fields(
    form_fields: Iterable[FormField],
    resume: ResumeFields,
    extraction: ExtractionResult,
) -> MappingResult:
    """Resolve a value for every form field; any unmapped required field fails the whole mapping."""
    fields = list(form_fields)
    result = MappingResult()
    required, warnings = resolve_required_fields(fields, extraction.extra_required_fields)
    result.warnings.extend(warnings)

    resolver = _FieldResolver(resume, extraction, infer_required_fields(extraction.trailing_notes))
    for form_field in fields:
        mapping = resolver.resolve(form_field.name)
        result.attempted_mappings.append(mapping)
        if not mapping.mapped and form_field.name in required:
            result.unmapped_required_fields.append(form_field.name)

    if result.unmapped_required_fields:
        result.success = False
        result.field_mappings = []
        result.errors.append(
            "Required field(s) could not be filled: " + ", ".join(result.unmapped_required_fields)
        )
        logger.info("field_mapping failed unmapped=%s", len(result.unmapped_required_fields))
        return result

    result.success = True
    result.field_mappings = [mapping for mapping in result.attempted_mappings if mapping.mapped]
    logger.info(
        "field_mapping ok mapped=%s required=%s",
        len(result.field_mappings),
        len(required),
    )
    return result
