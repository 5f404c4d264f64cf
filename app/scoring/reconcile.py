from __future__ import annotations

import logging
import math
import re
from typing import Any, Literal, Mapping

from app.core.scoring_config import get_scoring_value
from app.normalize.text import unique_by_key
from app.schemas.analysis import (
    BUCKET_MAX,
    BUCKET_ORDER,
    ATSBucketScore,
    HeuristicResult,
    KeywordDisplay,
    KeywordMatchResult,
    ReconciledScore,
    SectionFlags,
)

from .common import clamp_int, feedback_lines, make_bucket, round_half_up
from .education import score_education
from .heuristic import (
    BucketComputation,
    compute_structure,
    compute_summary_flags,
    experience_reasons,
    experience_signals,
    skills_reasons,
    skills_score,
    unique_skill_count,
)

logger = logging.getLogger(__name__)

TrustPolicy = Literal["recompute", "external_score_local_reasons", "relevance_blend"]

# Which buckets may keep a score from the external model. Text-derived buckets are
# always recomputed from the excerpts the model may not have seen verbatim.
BUCKET_TRUST_POLICY: dict[str, TrustPolicy] = {
    "Structure": "recompute",
    "Summary": "recompute",
    "Skills": "external_score_local_reasons",
    "Experience": "external_score_local_reasons",
    "Education": "relevance_blend",
    "Keywords": "recompute",
}

_TOO_GENERIC_DISPLAY_RE = re.compile(
    r"\b(reports?|reporting|analytics?|analysis|stakeholders?|process(?:es)?|framework|environment|ability|"
    r"strong|demonstrated|well[-\s]?developed|previous\s+experience|about|our|solid|familiarity|prior|"
    r"tertiary|related\s+field|a\s+related\s+field|at\s+least\s+one\s+programming\s+language)\b",
    re.IGNORECASE,
)
_PROGRAMMING_LANGUAGE_RE = re.compile(r"\bprogramming language\b", re.IGNORECASE)
_RELATED_FIELD_RE = re.compile(r"\b(a\s+related\s+field|related\s+field)\b", re.IGNORECASE)


def is_clean_keyword(token: str) -> bool:
    if not token or _TOO_GENERIC_DISPLAY_RE.search(token):
        return False
    return 1 <= len(token.split()) <= 5


def prettify_keyword(token: str) -> str:
    if _PROGRAMMING_LANGUAGE_RE.search(token):
        return "Programming language (e.g., Python/R)"
    if _RELATED_FIELD_RE.search(token):
        return "Relevant degree/discipline"
    return token


def display_terms(tokens: list[str]) -> list[str]:
    return unique_by_key([prettify_keyword(token) for token in tokens if is_clean_keyword(token)])


def build_keyword_display(match: KeywordMatchResult) -> KeywordDisplay:
    return KeywordDisplay(
        pct=match.pct,
        matched=display_terms(match.matched),
        partial=display_terms(match.partial),
        missing=display_terms(match.missing),
        present_in_jd=list(match.present_in_jd),
    )


def keyword_bucket(match: KeywordMatchResult) -> ATSBucketScore:
    score = min(10, round_half_up(match.pct / 10))
    reasons = [f"matches {match.pct}% of JD keywords"]
    missing = display_terms(match.missing)
    limit = int(get_scoring_value("keywords.missing_display_limit", 5))
    if not match.present_in_jd:
        reasons.append("no job description keywords found")
    elif missing:
        reasons.append(f"missing: {', '.join(missing[:limit])}")
    else:
        reasons.append("no critical gaps")
    return make_bucket("Keywords", score, reasons)


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_external_breakdown(external: Mapping[str, Any] | None) -> dict[str, int]:
    """Validated external bucket scores, rescaled onto the fixed bucket maxima.

    Unknown labels are dropped; missing labels are simply absent from the result.
    """
    if not isinstance(external, Mapping):
        return {}
    raw_items = external.get("breakdown")
    if not isinstance(raw_items, list):
        return {}

    output: dict[str, int] = {}
    for item in raw_items:
        if not isinstance(item, Mapping):
            continue
        label = str(item.get("label") or "").strip()
        if label not in BUCKET_MAX or label in output:
            continue
        score = clamp_int(item.get("score"), 0, 0, 100)
        declared_max = clamp_int(item.get("max", 20), 20, 1, 100)
        score = min(score, declared_max)
        target_max = BUCKET_MAX[label]
        if declared_max != target_max:
            score = round_half_up(score / declared_max * target_max)
        output[label] = max(0, min(target_max, score))
    return output


def _bucket_from(label: str, computed: BucketComputation) -> ATSBucketScore:
    return make_bucket(label, computed.score, computed.reasons)


def external_top_line(external: Mapping[str, Any] | None) -> int | None:
    if not isinstance(external, Mapping):
        return None
    number = _finite_number(external.get("score"))
    if number is None or number < 0 or number > 100:
        return None
    return round_half_up(number)


def reconcile(
    heuristic: HeuristicResult,
    external: Mapping[str, Any] | None,
    keyword_match: KeywordMatchResult,
    flags: SectionFlags,
    summary_excerpt: str,
    skills_excerpt: str,
    resume_text: str,
    job_description: str,
    *,
    experience_excerpt: str | None = None,
    policy: Mapping[str, TrustPolicy] = BUCKET_TRUST_POLICY,
) -> ReconciledScore:
    """Merge an optional external breakdown with deterministic recomputation.

    Always yields all six buckets in fixed order, with feedback regenerated from
    the final scores so numbers and prose agree.
    """
    external_scores = parse_external_breakdown(external)
    top_line = external_top_line(external)
    if external is not None and not external_scores and top_line is None:
        logger.warning("external_breakdown_ignored reason=malformed")
    has_external = bool(external_scores) or top_line is not None
    heuristic_scores = {bucket.label: bucket.score for bucket in heuristic.buckets}

    unique_skills = unique_skill_count(skills_excerpt)
    signals = experience_signals(experience_excerpt if experience_excerpt is not None else resume_text)

    local: dict[str, ATSBucketScore] = {
        "Structure": _bucket_from("Structure", compute_structure(flags)),
        "Summary": _bucket_from("Summary", compute_summary_flags(summary_excerpt, skills_excerpt)),
        "Skills": make_bucket("Skills", skills_score(unique_skills), skills_reasons(unique_skills)),
        "Experience": make_bucket("Experience", signals.score, experience_reasons(signals)),
        "Education": make_bucket("Education", heuristic_scores.get("Education", 0)),
        "Keywords": keyword_bucket(keyword_match),
    }

    ordered: list[ATSBucketScore] = []
    for label in BUCKET_ORDER:
        rule = policy.get(label, "recompute")
        external_score = external_scores.get(label)
        own = local[label]
        if rule == "external_score_local_reasons" and external_score:
            ordered.append(make_bucket(label, external_score, own.reasons))
        elif rule == "relevance_blend":
            # An external breakdown that omits the bucket counts it as zero.
            base = external_scores.get(label, 0) if external_scores else own.score
            ordered.append(score_education(flags, resume_text, job_description, base_score=base))
        else:
            ordered.append(own)

    total = top_line if top_line is not None else max(0, min(100, sum(bucket.score for bucket in ordered)))
    logger.debug(
        "ats_reconciled source=%s total=%s buckets=%s",
        "model" if has_external else "heuristic",
        total,
        ",".join(f"{bucket.label}={bucket.score}" for bucket in ordered),
    )
    return ReconciledScore(
        score=total,
        breakdown=ordered,
        feedback=feedback_lines(ordered),
        source="model" if has_external else "heuristic",
    )
