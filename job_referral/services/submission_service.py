from __future__ import annotations

import asyncio
import logging

from job_referral.core.errors import ExternalCollaboratorError, TextExtractionError
from job_referral.core.rules import get_rule_value
from job_referral.extraction.job_name import extract_job_name
from job_referral.mapping.field_mapper import map_fields
from job_referral.matching.posting_matcher import match_posting, unique_postings
from job_referral.parsing.models import TextExtractor
from job_referral.portal.base import FormPortal
from job_referral.resume.fields import extract_resume_fields
from job_referral.schemas import ErrorKind, SubmissionRequest, SubmissionResult, TraceEvent
from job_referral.schemas.common import TraceLevel

from .audit import AuditWriter

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _StageFailed(Exception):
    """Internal short-circuit once a stage has recorded its failure on the result."""


class SubmissionService:
    """Runs one referral through extraction, matching, form reading and field mapping."""

    def __init__(
        self,
        portal: FormPortal,
        text_extractor: TextExtractor,
        audit_writer: AuditWriter | None = None,
    ):
        self.portal = portal
        self.text_extractor = text_extractor
        self.audit_writer = audit_writer

    def _trace(self, result: SubmissionResult, stage: str, level: TraceLevel, message: str) -> None:
        result.trace.append(TraceEvent(stage=stage, level=level, message=message))
        logger.log(_LOG_LEVELS[level], "pipeline_trace stage=%s level=%s message=%s", stage, level, message)

    def _fail(
        self,
        result: SubmissionResult,
        stage: str,
        kind: ErrorKind | None,
        errors: list[str],
    ) -> _StageFailed:
        result.success = False
        result.error_kind = kind
        result.errors.extend(errors)
        self._trace(result, stage, "error", "; ".join(errors) or "stage failed")
        return _StageFailed(stage)

    async def run(self, request: SubmissionRequest) -> SubmissionResult:
        result = SubmissionResult()
        try:
            await self._run_stages(request, result)
        except _StageFailed:
            pass
        except ExternalCollaboratorError as exc:
            result.success = False
            result.error_kind = ErrorKind.EXTERNAL_COLLABORATOR_FAILURE
            result.errors.append(str(exc))
            self._trace(result, exc.stage, "error", str(exc))
            self._write_audit(request, result)
            exc.result = result
            raise
        self._write_audit(request, result)
        return result

    async def _run_stages(self, request: SubmissionRequest, result: SubmissionResult) -> None:
        extraction = extract_job_name(request.upstream_json)
        result.extraction = extraction
        result.warnings.extend(extraction.warnings)
        for warning in extraction.warnings:
            self._trace(result, "extraction", "warning", warning)
        if not extraction.success:
            raise self._fail(result, "extraction", extraction.error_kind, extraction.errors)

        floor = int(get_rule_value("safety.acceptance_floor", 90))
        if extraction.confidence < floor:
            raise self._fail(
                result,
                "extraction",
                ErrorKind.LOW_EXTRACTION_CONFIDENCE,
                [f"Extraction confidence {extraction.confidence} is below the acceptance floor {floor}."],
            )
        self._trace(
            result,
            "extraction",
            "success",
            f"Job name '{extraction.extracted_title}' ({extraction.method}, confidence {extraction.confidence}).",
        )

        postings = unique_postings(await self.portal.list_postings())
        self._trace(result, "postings", "info", f"{len(postings)} posting(s) listed.")

        match = match_posting(extraction.extracted_title, postings)
        result.match = match
        result.warnings.extend(match.warnings)
        if not match.success:
            errors = list(match.errors)
            if match.alternatives:
                errors.append("Alternatives: " + ", ".join(match.alternatives))
            raise self._fail(result, "matching", match.error_kind, errors)
        result.matched_posting = match.matched_title
        self._trace(
            result,
            "matching",
            "success",
            f"Matched '{match.matched_title}' at the {match.match_tier} tier (confidence {match.confidence}).",
        )

        selection = await self.portal.select_posting(match.matched_title or "")
        if not selection.success:
            raise self._fail(
                result,
                "selection",
                ErrorKind.POSTING_SELECTION_FAILED,
                [selection.error or f"Could not open posting '{match.matched_title}'."],
            )
        self._trace(result, "selection", "success", f"Opened the recommendation form for '{match.matched_title}'.")

        form_fields = await self.portal.read_required_fields()
        required_count = sum(1 for item in form_fields if item.required)
        self._trace(result, "form", "info", f"{len(form_fields)} form field(s), {required_count} required.")

        try:
            extracted = await asyncio.to_thread(self.text_extractor.extract_text, request.resume_path)
        except (OSError, NotImplementedError) as exc:
            raise TextExtractionError(f"Could not read résumé '{request.resume_path}': {exc}") from exc
        for warning in extracted.warnings:
            self._trace(result, "text_extraction", "warning", warning)
        self._trace(
            result,
            "text_extraction",
            "info",
            f"{len(extracted.text)} characters via {extracted.method} ({extracted.page_count} page(s)).",
        )

        resume = extract_resume_fields(extracted.text)
        self._trace(
            result,
            "resume",
            "info",
            f"Résumé fields {sorted(resume.field_confidences)} (confidence {resume.confidence}).",
        )

        mapping = map_fields(form_fields, resume, extraction)
        result.attempted_mappings = mapping.attempted_mappings
        result.warnings.extend(mapping.warnings)
        for warning in mapping.warnings:
            self._trace(result, "mapping", "warning", warning)
        if not mapping.success:
            result.unmapped_required_fields = list(mapping.unmapped_required_fields)
            raise self._fail(result, "mapping", ErrorKind.UNMAPPED_REQUIRED_FIELD, mapping.errors)

        result.field_mappings = mapping.field_mappings
        result.success = True
        self._trace(result, "mapping", "success", f"{len(mapping.field_mappings)} field(s) ready for submission.")

    def _write_audit(self, request: SubmissionRequest, result: SubmissionResult) -> None:
        if self.audit_writer is None:
            return
        payload = result.model_dump(mode="json")
        payload["resume_path"] = request.resume_path
        result.audit_path = self.audit_writer.write(result.matched_posting, payload)

