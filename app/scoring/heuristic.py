from __future__ import annotations

import re
from dataclasses import dataclass

from app.core.scoring_config import get_scoring_value
from app.features.sections import extract_section
from app.features.skill_tokens import extract_atomic_skills
from app.normalize.text import normalize_text
from app.schemas.analysis import (
    BUCKET_ORDER,
    ATSBucketScore,
    HeuristicParts,
    HeuristicResult,
    SectionFlags,
)

from .common import feedback_lines, make_bucket, round_half_up

_YEARS_RE = re.compile(r"\b\d+\s*(\+|plus)?\s*(years?|yrs?)\b", re.IGNORECASE)
_SUMMARY_METRIC_RE = re.compile(
    r"(\$[\d,]+|\d+(?:\.\d+)?%|\b\d{1,3}(?:,\d{3})+\b|\b\d+(?:\.\d+)?\s+(?:hours?|days?|weeks?|months?)\b)",
    re.IGNORECASE,
)
_ACTION_VERB_RE = re.compile(
    r"\b(le(?:d|ad)|manag|coordinat|implement|develop|optimi[sz]|streamlin|reduc|increas|improv|sav|"
    r"administer|perform|monitor|train|mentor)\w*",
    re.IGNORECASE,
)
# Currency, percentages, comma-grouped counts, durations and headcounts.
_EXPERIENCE_METRIC_RE = re.compile(
    r"(\$[\d,]+(?:\.\d+)?[kmb]?|\d+(?:\.\d+)?%|\b\d{1,3}(?:,\d{3})+\b|"
    r"\b\d+(?:\.\d+)?\s+(?:hours?|days?|weeks?|months?)\b|"
    r"\b(?:team|staff|group|crew)\s+of\s+\d+\b)",
    re.IGNORECASE,
)
_CORE_KEYWORDS_RE = re.compile(
    r"\b(sql|excel|tableau|power\s*bi|python|looker|snowflake|redshift|bigquery)\b",
    re.IGNORECASE,
)
_STANDALONE_R_RE = re.compile(r"(^|[^A-Za-z])R([^A-Za-z]|$)")

_STRUCTURE_POINTS: dict[str, int] = {
    "has_summary": 6,
    "has_experience": 8,
    "has_skills": 6,
    "has_education": 6,
    "has_tools": 4,
    "has_projects": 4,
    "has_contact": 4,
}
_STRUCTURE_REASONS: tuple[tuple[str, str, str], ...] = (
    ("has_summary", "has summary", "missing summary"),
    ("has_experience", "has experience", "missing experience"),
    ("has_skills", "has skills", "missing skills"),
    ("has_education", "has education", "missing education"),
    ("has_contact", "contact info present", "no contact info"),
    ("has_bullets", "uses bullets", "no bullets"),
)


@dataclass(frozen=True)
class BucketComputation:
    score: int
    reasons: list[str]


@dataclass(frozen=True)
class ExperienceSignals:
    action_hits: int
    metric_hits: int

    @property
    def score(self) -> int:
        return min(20, round_half_up(self.action_hits * 2 + self.metric_hits * 2))


def structure_raw_score(flags: SectionFlags) -> int:
    cap = int(get_scoring_value("structure_points.cap", 25))
    total = 0
    for name, default in _STRUCTURE_POINTS.items():
        if getattr(flags, name):
            total += int(get_scoring_value(f"structure_points.{name}", default))
    return min(total, cap)


def compute_structure(flags: SectionFlags) -> BucketComputation:
    """Section-presence points on a 25 scale, rescaled onto the 20-point Structure bucket."""
    raw = structure_raw_score(flags)
    cap = int(get_scoring_value("structure_points.cap", 25)) or 25
    score = min(20, round_half_up(min(raw, cap) / cap * 20))
    reasons = []
    for name, present, absent in _STRUCTURE_REASONS:
        value = flags.uses_bullets if name == "has_bullets" else getattr(flags, name)
        reasons.append(present if value else absent)
    return BucketComputation(score=score, reasons=reasons)


def _mentions_skill(summary: str, token: str) -> bool:
    escaped = re.escape(token)
    if len(token) <= 3:
        pattern = rf"(^|[^A-Za-z0-9]){escaped}([^A-Za-z0-9]|$)"
    elif " " in token:
        pattern = escaped
    else:
        pattern = rf"\b{escaped}\b"
    return re.search(pattern, summary, re.IGNORECASE) is not None


def compute_summary_flags(summary_excerpt: str, skills_excerpt: str) -> BucketComputation:
    """Score the Summary from its own excerpt and the résumé's own skills list only."""
    summary = summary_excerpt or ""
    has_summary = bool(summary.strip())
    has_years = bool(_YEARS_RE.search(summary))
    has_metric = bool(_SUMMARY_METRIC_RE.search(summary))
    skills = [token.lower() for token in extract_atomic_skills(skills_excerpt)]
    has_skill = has_summary and any(_mentions_skill(summary, token) for token in skills)

    score = min(20, 5 * sum((has_summary, has_years, has_metric, has_skill)))
    reasons = [
        "has summary" if has_summary else "no summary",
        "years mentioned" if has_years else "years not mentioned",
        "has quantified outcome" if has_metric else "no quantified outcome",
        "mentions a resume skill" if has_skill else "no skill mentioned",
    ]
    return BucketComputation(score=score, reasons=reasons)


def unique_skill_count(skills_excerpt: str) -> int:
    return len({normalize_text(token) for token in extract_atomic_skills(skills_excerpt)} - {""})


def skills_score(unique_count: int) -> int:
    cap = int(get_scoring_value("skills.token_cap", 12)) or 12
    return min(20, round_half_up(min(unique_count, cap) / cap * 20))


def skills_reasons(unique_count: int) -> list[str]:
    broad = int(get_scoring_value("skills.broad_coverage", 8))
    return [
        f"extracted {unique_count} skill tokens" if unique_count else "no skill tokens found",
        "broad skill coverage" if unique_count >= broad else "limited skill variety",
    ]


def experience_signals(experience_excerpt: str) -> ExperienceSignals:
    text = experience_excerpt or ""
    return ExperienceSignals(
        action_hits=len(_ACTION_VERB_RE.findall(text)),
        metric_hits=len(_EXPERIENCE_METRIC_RE.findall(text)),
    )


def experience_reasons(signals: ExperienceSignals) -> list[str]:
    return [
        f"{signals.action_hits} action verbs" if signals.action_hits else "few action verbs",
        f"{signals.metric_hits} quantified metrics" if signals.metric_hits else "no quantified metrics",
    ]


def keywords_floor_score(resume_text: str) -> int:
    """Cheap keyword floor used before any job-description dictionary match exists."""
    text = resume_text or ""
    if _CORE_KEYWORDS_RE.search(text) or _STANDALONE_R_RE.search(text):
        return int(get_scoring_value("keywords.core_score", 7))
    return int(get_scoring_value("keywords.floor_score", 3))


def to_ats_breakdown(parts: HeuristicParts) -> list[ATSBucketScore]:
    """Internal heuristic parts onto the six UI buckets (20/20/20/20/10/10)."""
    scores = {
        "Structure": round_half_up(parts.structure25 / 25 * 20),
        "Summary": parts.summary20,
        "Skills": parts.skills20,
        "Experience": parts.experience20,
        "Education": parts.education10,
        "Keywords": round_half_up(parts.keywords7 / 7 * 10),
    }
    return [make_bucket(label, scores[label]) for label in BUCKET_ORDER]


def compute_ats_heuristic(resume_text: str, flags: SectionFlags) -> HeuristicResult:
    """Deterministic six-bucket ATS score from the résumé text and its section flags."""
    text = resume_text or ""
    summary_excerpt = extract_section(text, "summary")
    skills_excerpt = extract_section(text, "skills")
    experience_excerpt = extract_section(text, "experience") or text

    structure = compute_structure(flags)
    summary = compute_summary_flags(summary_excerpt, skills_excerpt)
    unique_skills = unique_skill_count(skills_excerpt)
    signals = experience_signals(experience_excerpt)
    keywords7 = keywords_floor_score(text)

    parts = HeuristicParts(
        structure25=structure_raw_score(flags),
        summary20=summary.score,
        skills20=skills_score(unique_skills),
        experience20=signals.score,
        education10=10 if flags.has_education else 0,
        keywords7=keywords7,
    )

    reasons = {
        "Structure": structure.reasons,
        "Summary": summary.reasons,
        "Skills": skills_reasons(unique_skills),
        "Experience": experience_reasons(signals),
        "Education": ["has education"] if flags.has_education else ["education missing"],
        "Keywords": ["core tool or language present" if keywords7 >= 7 else "no core tools found"],
    }
    buckets = [
        bucket.model_copy(update={"reasons": reasons[bucket.label]})
        for bucket in to_ats_breakdown(parts)
    ]
    return HeuristicResult(
        score=min(100, sum(bucket.score for bucket in buckets)),
        buckets=buckets,
        feedback=feedback_lines(buckets),
        parts=parts,
    )
