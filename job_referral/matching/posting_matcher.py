from __future__ import annotations

import logging
from typing import Iterable

from job_referral.core.rules import get_rule_value
from job_referral.normalize.titles import core_form, normalize
from job_referral.schemas import ErrorKind, MatchResult, PostingCheck

logger = logging.getLogger(__name__)

_TIER_ORDER = ("exact", "normalized", "core", "subset")


def _tier_confidence(tier: str) -> int:
    defaults = {"exact": 100, "normalized": 95, "core": 90, "subset": 85}
    return int(get_rule_value(f"matching.tiers.{tier}", defaults[tier]))


def unique_postings(postings: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for posting in postings:
        if not isinstance(posting, str):
            continue
        title = posting.strip()
        if not title or title in seen:
            continue
        seen.add(title)
        output.append(title)
    return output


def _subset_remaining(extracted_core: str, posting_core: str) -> str | None:
    """Leftover of the extracted core when the posting core is a strict, separator-only subset."""
    min_length = int(get_rule_value("matching.subset_min_length", 3))
    if len(posting_core) < min_length or posting_core == extracted_core:
        return None
    index = extracted_core.find(posting_core)
    if index < 0:
        return None

    remaining = extracted_core[:index] + extracted_core[index + len(posting_core):]
    separators = set(str(get_rule_value("matching.subset_separators", "・/-_|:,&+")))
    if not remaining or any(char not in separators for char in remaining):
        return None
    if any(char not in extracted_core for char in posting_core):
        return None
    return remaining


def check_posting(extracted: str, posting: str) -> PostingCheck:
    """Classify one posting against the extracted title; the first satisfied tier wins."""
    extracted_normalized = normalize(extracted)
    extracted_core = core_form(extracted)
    check = PostingCheck(original=posting, normalized=normalize(posting), core=core_form(posting))

    if extracted.strip() == posting.strip():
        check.tier = "exact"
    elif extracted_normalized and extracted_normalized == check.normalized:
        check.tier = "normalized"
    elif extracted_core and extracted_core == check.core:
        check.tier = "core"
    else:
        remaining = _subset_remaining(extracted_core, check.core) if extracted_core else None
        if remaining is not None:
            check.tier = "subset"
            check.remaining = remaining

    if check.tier != "none":
        check.confidence = _tier_confidence(check.tier)
    return check


def _reject(result: MatchResult, kind: ErrorKind, message: str, alternatives: list[str]) -> MatchResult:
    result.success = False
    result.error_kind = kind
    result.errors.append(message)
    result.alternatives = alternatives
    logger.info("posting_match rejected kind=%s alternatives=%s", kind.value, len(alternatives))
    return result


def match_posting(extracted: str | None, postings: Iterable[str] | None) -> MatchResult:
    """Match an extracted title against portal postings, refusing anything ambiguous."""
    result = MatchResult()
    title = extracted.strip() if isinstance(extracted, str) else ""
    candidates = unique_postings(postings or [])
    if not title:
        return _reject(result, ErrorKind.INVALID_INPUT_FORMAT, "Extracted job title is empty.", [])
    if not candidates:
        return _reject(result, ErrorKind.INVALID_INPUT_FORMAT, "Posting list is empty.", [])

    buckets: dict[str, list[str]] = {tier: [] for tier in _TIER_ORDER}
    checks: list[PostingCheck] = []
    for posting in candidates:
        check = check_posting(title, posting)
        checks.append(check)
        if check.tier != "none":
            buckets[check.tier].append(posting)

    result.details = {
        "extracted_normalized": normalize(title),
        "extracted_core": core_form(title),
        "posting_count": len(candidates),
        "bucket_sizes": {tier: len(items) for tier, items in buckets.items()},
        "checks": [check.model_dump() for check in checks if check.tier != "none"],
    }

    for tier in ("exact", "normalized", "core"):
        if len(buckets[tier]) > 1:
            result.match_tier = tier
            return _reject(
                result,
                ErrorKind.AMBIGUOUS_MATCH,
                f"{len(buckets[tier])} postings match at the {tier} tier; refusing to choose.",
                list(buckets[tier]),
            )

    confident = buckets["exact"] + buckets["normalized"] + buckets["core"]
    if len(confident) > 1:
        return _reject(
            result,
            ErrorKind.AMBIGUOUS_MATCH,
            f"{len(confident)} postings match across tiers; refusing to choose.",
            confident,
        )

    floor = int(get_rule_value("safety.acceptance_floor", 90))
    for tier in ("exact", "normalized", "core"):
        if buckets[tier]:
            confidence = _tier_confidence(tier)
            result.match_tier = tier
            result.confidence = confidence
            if confidence < floor:
                return _reject(
                    result,
                    ErrorKind.LOW_CONFIDENCE_MATCH,
                    f"Match confidence {confidence} is below the acceptance floor {floor}.",
                    list(buckets[tier]),
                )
            result.success = True
            result.matched_title = buckets[tier][0]
            logger.info("posting_match ok tier=%s confidence=%s", tier, confidence)
            return result

    if buckets["subset"]:
        result.match_tier = "subset"
        result.confidence = _tier_confidence("subset")
        result.warnings.append(
            f"{len(buckets['subset'])} posting(s) only partially match the title; manual confirmation required."
        )
        return _reject(
            result,
            ErrorKind.LOW_CONFIDENCE_MATCH,
            f"Partial match confidence {result.confidence} is below the acceptance floor {floor}.",
            [buckets["subset"][0]],
        )

    return _reject(result, ErrorKind.NO_MATCH, "No matching job posting found.", [])
