from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

from app.core.scoring_config import get_scoring_value
from app.normalize.text import normalize_whitespace
from app.schemas.analysis import SectionFlags

SectionKind = Literal["summary", "skills", "experience", "education", "projects"]
SECTION_KINDS: tuple[SectionKind, ...] = ("summary", "skills", "experience", "education", "projects")

_I = re.IGNORECASE

SUMMARY_LABELS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:^|\n)\s*(?:professional\s+summary|summary|profile|objective)\s*:?\s*(?:\n|$)", _I),
)
SKILLS_LABELS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:^|\n)\s*(skills?|key\s+skills|technical\s+skills|competenc(?:y|ies)|core\s+skills|"
        r"technical\s+proficiencies|tools\s*&?\s*technologies|tech\s+stack|capabilit(?:y|ies))\s*:?\s*(?:\n|$)",
        _I,
    ),
    re.compile(r"(?:^|\n)\s*demonstrated\s+capabilities\s+and\s+skills\s*:?\s*(?:\n|$)", _I),
)
EXPERIENCE_LABELS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:^|\n)\s*(?:experience|work\s+experience|employment(?:\s+history)?|work\s+history|"
        r"professional\s+experience|clinical\s+experience)\s*:?\s*(?:\n|$)",
        _I,
    ),
)
EDUCATION_LABELS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:^|\n)\s*(education|academic|qualifications?|certifications?|training|courses?|"
        r"professional\s+development)\s*:?\s*(?:\n|$)",
        _I,
    ),
)
PROJECTS_LABELS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:^|\n)\s*(?:[-•]\s*)?(projects?|key\s+projects|selected\s+projects|case\s+stud(?:y|ies)|"
        r"engagements?|assignments?|list\s+of\s+projects|worked\s+on\s+projects?)\s*:?\s*(?:\n|$)",
        _I,
    ),
)

SECTION_STOP_LABELS: tuple[re.Pattern[str], ...] = (
    SUMMARY_LABELS[0],
    EXPERIENCE_LABELS[0],
    SKILLS_LABELS[0],
    EDUCATION_LABELS[0],
    re.compile(
        r"(?:^|\n)\s*(?:projects?|key\s+projects|selected\s+projects|case\s+stud(?:y|ies)|"
        r"engagements?|assignments?)\s*:?\s*(?:\n|$)",
        _I,
    ),
    re.compile(r"(?:^|\n)\s*(?:awards?|publications?|interests?|hobbies|references?)\s*:?\s*(?:\n|$)", _I),
)

_START_LABELS: dict[SectionKind, tuple[re.Pattern[str], ...]] = {
    "summary": SUMMARY_LABELS,
    "skills": SKILLS_LABELS,
    "experience": EXPERIENCE_LABELS,
    "education": EDUCATION_LABELS,
    "projects": PROJECTS_LABELS,
}

# Single-regex extractors without stop-heading boundaries; the capture group is the excerpt.
_LEGACY_PATTERNS: dict[SectionKind, tuple[re.Pattern[str], ...]] = {
    "summary": (
        re.compile(
            r"(?:professional summary|summary|profile|objective)[:\s]*\n([\s\S]*?)(?=\n\s*\n|\n[A-Z][A-Za-z]|$)",
            _I,
        ),
        re.compile(r"(?:professional summary|summary|profile|objective)[:\s]*([^\n]+?)(?=\n|$)", _I),
    ),
    "skills": (
        re.compile(
            r"(?:skills|competencies|technical skills|key skills|tools|technologies)[:\s]*\n"
            r"([\s\S]*?)(?=\n\s*\n|\n[A-Z][A-Za-z]|$)",
            _I,
        ),
        re.compile(
            r"(?:skills|competencies|technical skills|key skills|tools|technologies)[:\s]*([^\n]+?)(?=\n|$)",
            _I,
        ),
    ),
    "experience": (
        re.compile(
            r"(?:^|\n)\s*(?:experience|work experience|employment|work history|professional experience|"
            r"clinical experience)\s*:?\s*\n+([\s\S]*?)(?=\n\s*(?:education|skills|projects|tools|technologies|"
            r"training|certifications?|licenses?|references?|$)|$)",
            _I,
        ),
        re.compile(
            r"(?:^|\n)\s*(?:experience|work experience|employment|work history|professional experience|"
            r"clinical experience)\s*:?\s*([^\n]+?)(?=\n|$)",
            _I,
        ),
    ),
    "education": (
        re.compile(
            r"(?:^|\n)\s*(?:education|academic|qualifications?|certifications?|training)\s*[:\s]*\n"
            r"([\s\S]*?)(?=\n\s*\n|\n(?:skills?|experience|projects?|tools?|technologies?)\b|$)",
            _I,
        ),
    ),
    "projects": (
        re.compile(
            r"(?:projects|selected projects|assignments|engagements|list of projects)[:\s]*\n"
            r"([\s\S]*?)(?=\n\s*\n|\n[A-Z][A-Za-z]|$)",
            _I,
        ),
    ),
}

_FLAG_PATTERNS: dict[str, re.Pattern[str]] = {
    "has_summary": re.compile(r"\bsummary\b|\bobjective\b|\bprofile\b|professional summary", _I),
    "has_education": re.compile(r"education|academic|qualification|degree|certificate|university|college", _I),
    "has_skills": re.compile(r"\bskills?\b|competenc|technical skills|core skills|tools|technologies", _I),
    "has_experience": re.compile(
        r"(?:^|\n)\s*(?:experience|work experience|employment|work history|professional experience|"
        r"clinical experience|demonstrated\s+capabilit(?:y|ies))",
        _I,
    ),
    "has_tools": re.compile(r"tools|technologies|software|technical proficiencies", _I),
    "has_projects": re.compile(r"project|case stud(?:y|ies)|implementation|engagements?", _I),
    "has_contact": re.compile(
        r"phone|mobile|\btel\b|email|@|linkedin\.com|address|\b\d{3,}\s+\w+ (?:st|rd|ave|road)\b",
        _I,
    ),
    "uses_bullets": re.compile(r"[•◦▪●■*\-–]|\d\."),
}


@dataclass(frozen=True)
class ExtractionStrategy:
    name: str
    run: Callable[[str, SectionKind], str]


def robust_slice(
    text: str,
    start_labels: Sequence[re.Pattern[str]],
    stop_labels: Sequence[re.Pattern[str]] = SECTION_STOP_LABELS,
    max_chars: int | None = None,
) -> str:
    """Slice from the earliest start heading up to the nearest following section heading."""
    if not text:
        return ""
    limit = max_chars if max_chars is not None else int(get_scoring_value("sections.max_chars", 12000))
    source = normalize_whitespace(text)

    start_match: re.Match[str] | None = None
    for pattern in start_labels:
        match = pattern.search(source)
        if match and (start_match is None or match.start() < start_match.start()):
            start_match = match
    if start_match is None:
        return ""

    body_start = start_match.end()
    stop_index = len(source)
    remainder = source[body_start:]
    for pattern in stop_labels:
        match = pattern.search(remainder)
        if match:
            stop_index = min(stop_index, body_start + match.start())

    return normalize_whitespace(source[body_start:stop_index])[:limit]


def legacy_extract_section(text: str, kind: SectionKind) -> str:
    for pattern in _LEGACY_PATTERNS[kind]:
        match = pattern.search(text or "")
        if match and match.group(1):
            return match.group(1).strip()
    return ""


def _heading_slice(text: str, kind: SectionKind) -> str:
    return robust_slice(text, _START_LABELS[kind])


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy(name="heading_slice", run=_heading_slice),
    ExtractionStrategy(name="legacy_regex", run=legacy_extract_section),
)


def section_min_length(kind: SectionKind) -> int:
    configured = get_scoring_value(f"sections.min_length.{kind}", None)
    if configured is None:
        configured = get_scoring_value("sections.min_length.default", 40)
    return int(configured)


def run_strategies(
    text: str,
    kind: SectionKind,
    strategies: Sequence[ExtractionStrategy],
    accept: Callable[[str], bool],
) -> str:
    """Return the first accepted excerpt, else the first non-empty one, else ""."""
    attempts: list[str] = []
    for strategy in strategies:
        excerpt = strategy.run(text, kind)
        if accept(excerpt):
            return excerpt
        attempts.append(excerpt)
    return next((item for item in attempts if item), "")


def extract_section(
    text: str,
    kind: SectionKind,
    *,
    min_length: int | None = None,
    strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES,
) -> str:
    if kind not in _START_LABELS:
        raise ValueError(f"Unknown section kind '{kind}'. Expected one of: {', '.join(SECTION_KINDS)}")
    if not text:
        return ""
    threshold = section_min_length(kind) if min_length is None else min_length
    return run_strategies(text, kind, strategies, lambda excerpt: bool(excerpt) and len(excerpt) >= threshold)


def detect_section_flags(text: str) -> SectionFlags:
    source = text or ""
    return SectionFlags(**{name: bool(pattern.search(source)) for name, pattern in _FLAG_PATTERNS.items()})
