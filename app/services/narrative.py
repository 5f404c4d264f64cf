from __future__ import annotations

import logging
import re

from app.schemas.analysis import KeywordDisplay, ReconciledScore
from app.schemas.resume_pack import AnalysisLists, ResumePack

logger = logging.getLogger(__name__)

# Regulated-domain claims a narrative may only make when either source text mentions them.
DOMAIN_CLAIM_TERMS: tuple[str, ...] = (
    "ahpra",
    "registered nurse",
    "rn",
    "patient care",
    "medication administration",
    "aged care",
    "ndis",
    "police check",
    "working with children check",
)


def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9])", re.IGNORECASE)


def enforce_domain_consistency(
    markdown: str,
    resume_text: str,
    job_description: str,
    terms: tuple[str, ...] = DOMAIN_CLAIM_TERMS,
) -> str:
    """Drop narrative lines that claim a domain term absent from both the résumé and the job description."""
    corpus = f"{resume_text or ''}\n{job_description or ''}"
    unsupported = [pattern for pattern in map(_term_pattern, terms) if not pattern.search(corpus)]
    if not unsupported:
        return markdown

    kept: list[str] = []
    dropped = 0
    for line in (markdown or "").split("\n"):
        if any(pattern.search(line) for pattern in unsupported):
            dropped += 1
            continue
        kept.append(line)
    if dropped:
        logger.info("narrative_domain_lines_dropped count=%s", dropped)
    return "\n".join(kept)


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items]


def _role_header(title: str, employer: str, location: str, start: str, end: str) -> str:
    header = f"**{title} — {employer}"
    if location:
        header += f", {location}"
    dates = " – ".join(value for value in (start, end) if value)
    if dates:
        header += f" ({dates})"
    return header + "**"


def build_narrative(lists: AnalysisLists, pack: ResumePack | None) -> str:
    """Markdown report from model-supplied analysis lists and résumé pack."""
    parts: list[str] = [
        "### Strengths",
        *_bullets(lists.strengths),
        "",
        "### Opportunities to Improve",
        *_bullets(lists.improvements),
        "",
        "### Gaps",
        *_bullets(lists.gaps),
        "",
        "### Recommendations",
        *_bullets(lists.recommendations),
        "",
        "### Overall Summary",
        lists.overall_summary,
    ]
    if pack is None:
        return "\n".join(parts).strip()

    parts += [
        "",
        "---",
        "## Resume Rewrite Pack",
        "",
        "### Professional Summary",
        pack.professional_summary,
        "",
        "### Key Skills",
        *_bullets(pack.key_skills),
        "",
        "### Professional Experience",
    ]
    for role in pack.professional_experience:
        parts.append(_role_header(role.title, role.employer, role.location, role.start, role.end))
        parts.extend(_bullets(role.bullets))
        parts.append("")
    if pack.key_projects:
        parts += ["### Key Projects"]
        for project in pack.key_projects:
            suffix = f" ({', '.join(project.tools)})" if project.tools else ""
            parts.append(f"**{project.name}**{suffix}")
            parts.extend(_bullets(project.bullets))
            parts.append("")
    if pack.education_and_certification:
        parts += ["### Education & Certification"]
        for entry in pack.education_and_certification:
            details = ", ".join(value for value in (entry.institution, entry.year) if value)
            parts.append(f"- {entry.name}" + (f" — {details}" if details else ""))
        parts.append("")
    if pack.tools_and_technologies:
        parts += ["### Tools & Technologies", ", ".join(pack.tools_and_technologies)]
    return "\n".join(parts).strip()


def build_fallback_narrative(
    ats: ReconciledScore,
    keywords: KeywordDisplay,
    lists: AnalysisLists,
    *,
    job_title: str = "",
    company_name: str = "",
) -> str:
    """Deterministic report used when no model narrative is available."""
    role = job_title or "the target"
    org = company_name or "the company"
    lines = [
        f"I've reviewed your CV against the {role} role at {org} using the offline ATS heuristics.",
        "",
        "### ATS Breakdown",
        f"ATS Score: {ats.score}/100",
        *_bullets(ats.feedback),
        "",
        "### Keyword Coverage",
        f"Matches {keywords.pct}% of job description keywords.",
    ]
    if keywords.matched:
        lines.append(f"Matched: {', '.join(keywords.matched[:10])}")
    if keywords.partial:
        lines.append(f"Partially evidenced: {', '.join(keywords.partial[:10])}")
    if keywords.missing:
        lines.append(f"Missing: {', '.join(keywords.missing[:10])}")

    weak = [bucket for bucket in ats.breakdown if bucket.score * 2 < bucket.max]
    if weak:
        lines += ["", "### Opportunities to Improve"]
        lines += [f"- {bucket.label}: {'; '.join(bucket.reasons)}" for bucket in weak]

    if lists.recommendations or lists.improvements:
        lines += ["", "### Recommendations", *_bullets(lists.recommendations + lists.improvements)]
    return "\n".join(lines).strip()
