from __future__ import annotations

import re

from app.schemas.analysis import ATSBucketScore, SectionFlags

from .common import make_bucket

STUDY_FIELDS: tuple[str, ...] = (
    "data science",
    "statistics",
    "mathematics",
    "computer science",
    "economics",
)

_TERTIARY_RE = re.compile(r"\b(tertiary|degree|bachelor|masters?|qualification)\b", re.IGNORECASE)
_DEGREE_RE = re.compile(r"\b(bachelor|degree|diploma)\b", re.IGNORECASE)


def names_study_field(term: str, fields: tuple[str, ...] = STUDY_FIELDS) -> bool:
    lowered = (term or "").lower()
    return any(field in lowered for field in fields)


def score_education(
    flags: SectionFlags,
    resume_text: str,
    job_description: str,
    base_score: int = 0,
    fields: tuple[str, ...] = STUDY_FIELDS,
) -> ATSBucketScore:
    """Relevance-aware Education bucket.

    A degree in a field the job description did not name still earns partial
    credit; only an absent education section zeroes the bucket.
    """
    if not flags.has_education:
        return make_bucket("Education", 0, ["education missing", "missing required degree"])

    jd_text = (job_description or "").lower()
    cv_text = (resume_text or "").lower()
    jd_fields = [item for item in fields if item in jd_text]

    if _TERTIARY_RE.search(jd_text) and jd_fields:
        if names_study_field(cv_text, fields):
            return make_bucket("Education", 10, ["education present", "perfectly matches Job Description requirements"])
        if _DEGREE_RE.search(cv_text):
            return make_bucket("Education", max(base_score, 6), ["education present", "partially relevant"])
        return make_bucket("Education", min(base_score, 4), ["education present", "missing required degree"])

    return make_bucket("Education", max(base_score, 6), ["education present", "partially relevant"])
