from __future__ import annotations

import re
from typing import Any

from app.normalize.text import unique_by_key
from app.normalize.tokens import map_tool_name
from app.schemas.resume_pack import (
    AnalysisLists,
    EducationEntry,
    EvidencePreview,
    ExperienceEntry,
    MatchedEvidence,
    MissingEvidence,
    ProjectEntry,
    ResumePack,
)

MAX_KEY_SKILLS = 25
MAX_EVIDENCE_ITEMS = 5
MAX_EVIDENCE_QUOTES = 3

_LIST_SPLIT_RE = re.compile(r"[\n,;|•\-]+")


def to_str(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def to_list(value: Any) -> list[str]:
    if isinstance(value, list):
        items = [str(item).strip() for item in value if item is not None]
    elif isinstance(value, str):
        items = [item.strip() for item in _LIST_SPLIT_RE.split(value)]
    else:
        return []
    return [item for item in items if item]


def _objects(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def to_experience(value: Any) -> list[ExperienceEntry]:
    entries = [
        ExperienceEntry(
            employer=to_str(item.get("employer")),
            title=to_str(item.get("title")),
            location=to_str(item.get("location")),
            start=to_str(item.get("start")),
            end=to_str(item.get("end")),
            bullets=to_list(item.get("bullets")),
        )
        for item in _objects(value)
    ]
    return [entry for entry in entries if entry.employer or entry.title or entry.bullets]


def to_projects(value: Any) -> list[ProjectEntry]:
    entries = [
        ProjectEntry(
            name=to_str(item.get("name")),
            context=to_str(item.get("context")),
            tools=to_list(item.get("tools")),
            bullets=to_list(item.get("bullets")),
        )
        for item in _objects(value)
    ]
    return [entry for entry in entries if entry.name or entry.bullets]


def to_education(value: Any) -> list[EducationEntry]:
    return [
        EducationEntry(
            name=to_str(item.get("name")),
            institution=to_str(item.get("institution")),
            year=to_str(item.get("year")),
        )
        for item in _objects(value)
        if to_str(item.get("name"))
    ]


def _inferred_skill_names(value: Any) -> list[str]:
    names: list[str] = []
    for item in value if isinstance(value, list) else []:
        if isinstance(item, dict):
            name = to_str(item.get("skill") or item.get("name"))
        else:
            name = to_str(item)
        if name:
            names.append(name)
    return unique_by_key(names)


def coerce_resume_pack(raw: Any) -> ResumePack | None:
    """Typed résumé pack from untrusted model JSON; ``None`` when nothing usable came back."""
    if not isinstance(raw, dict):
        return None
    pack = ResumePack(
        professional_summary=to_str(raw.get("professionalSummary")),
        key_skills=unique_by_key(to_list(raw.get("keySkills")))[:MAX_KEY_SKILLS],
        inferred_skills=_inferred_skill_names(raw.get("inferredSkills")),
        professional_experience=to_experience(raw.get("professionalExperience")),
        key_projects=to_projects(raw.get("keyProjects")),
        education_and_certification=to_education(raw.get("educationAndCertification")),
        tools_and_technologies=unique_by_key([map_tool_name(item) for item in to_list(raw.get("toolsAndTechnologies"))]),
    )
    if pack == ResumePack():
        return None
    return pack


def coerce_analysis_lists(raw: Any) -> AnalysisLists:
    if not isinstance(raw, dict):
        return AnalysisLists()
    return AnalysisLists(
        strengths=to_list(raw.get("strengths")),
        improvements=to_list(raw.get("improvements")),
        gaps=to_list(raw.get("gaps")),
        recommendations=to_list(raw.get("recommendations")),
        overall_summary=to_str(raw.get("overallSummary")),
    )


def _quotes(value: Any) -> list[str]:
    # Quotes are kept whole; commas inside a quote are not separators.
    if not isinstance(value, list):
        return []
    return [quote for quote in (to_str(item) for item in value) if quote][:MAX_EVIDENCE_QUOTES]


def coerce_evidence(raw: Any) -> EvidencePreview:
    """Model-cited quotes per matched and missing item, capped for display."""
    if not isinstance(raw, dict):
        return EvidencePreview()
    matched = [
        MatchedEvidence(
            item=to_str(item.get("item")),
            resume_quotes=_quotes(item.get("resume_quotes")),
            jd_quotes=_quotes(item.get("jd_quotes")),
        )
        for item in _objects(raw.get("matched"))
        if to_str(item.get("item"))
    ]
    missing = [
        MissingEvidence(item=to_str(item.get("item")), jd_quotes=_quotes(item.get("jd_quotes")))
        for item in _objects(raw.get("missing"))
        if to_str(item.get("item"))
    ]
    return EvidencePreview(matched=matched[:MAX_EVIDENCE_ITEMS], missing=missing[:MAX_EVIDENCE_ITEMS])
