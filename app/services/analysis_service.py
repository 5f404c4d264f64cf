from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from app.core.config import settings
from app.core.scoring_config import get_scoring_value
from app.features.jd_dictionary import build_jd_dictionary
from app.features.sections import detect_section_flags, extract_section
from app.schemas.analysis import (
    AnalysisResponse,
    AnalyzeRequest,
    JobFitBuckets,
    JobFitScore,
    KeywordMatchResult,
    ReconciledScore,
    SectionFlags,
)
from app.scoring.common import clamp_int, round_half_up
from app.scoring.education import names_study_field
from app.scoring.heuristic import compute_ats_heuristic
from app.scoring.reconcile import build_keyword_display, reconcile
from app.semantic.matcher import (
    KeywordMatcher,
    SemanticKeywordMatcher,
    build_semantic_matcher,
    compute_keyword_match,
    compute_keyword_match_async,
)
from app.services.coaching_rules import apply_coaching_rules
from app.services.llm import json_completion, json_completion_required
from app.services.narrative import build_fallback_narrative, build_narrative, enforce_domain_consistency
from app.services.resume_pack import coerce_analysis_lists, coerce_evidence, coerce_resume_pack

logger = logging.getLogger(__name__)

_JOB_FIT_FIELDS: dict[str, str] = {
    "must_have": "mustHave",
    "core_skills": "coreSkills",
    "domain_title_adjacency": "domainTitleAdjacency",
    "seniority": "seniority",
    "recency": "recency",
    "nice_to_haves": "niceToHaves",
}

SYSTEM_PROMPT = """
You are an expert ATS evaluator and recruiter. Compare the RESUME with the JOB DESCRIPTION and
return ONE JSON object with keys "analysis", "resumePack", "scores" and "evidence". Use only the
texts provided; copy names verbatim and never invent employers, dates or tools.

analysis: {strengths[], improvements[], gaps[], recommendations[], overallSummary}
  - strengths only with CV evidence (max 8); gaps only truly missing must-haves (max 5);
    improvements are concrete resume edits (max 6); recommendations 1-5 actionable items.
resumePack: {professionalSummary, keySkills[], inferredSkills[{skill}], professionalExperience[{employer,
  title, location, start, end, bullets[]}], keyProjects[{name, context, tools[], bullets[]}],
  educationAndCertification[{name, institution, year}], toolsAndTechnologies[]}
scores:
  ats: {score 0-100, breakdown: EXACTLY six items {label, score, max} with labels Structure (max 20),
    Summary (max 20), Skills (max 20), Experience (max 20), Education (max 10), Keywords (max 10)}
  match: {score 0-100, buckets: {mustHave, coreSkills, domainTitleAdjacency, seniority, recency,
    niceToHaves} each 0-100}
evidence: {matched[{item, resume_quotes[], jd_quotes[]}], missing[{item, jd_quotes[]}]}
  - up to 3 short verbatim quotes per item; every strength and gap must be backed by a quote.

Treat the deterministic keyword matches you are given as authoritative. If unknown, return "" or [].
""".strip()


class AnalysisInputError(ValueError):
    """Request text too short to analyse; surfaced as a 400 before any scoring runs."""


def validate_inputs(resume_text: str, job_description: str) -> None:
    if len((job_description or "").strip()) < settings.min_job_description_chars:
        raise AnalysisInputError(
            f"Job description is too short. Provide at least {settings.min_job_description_chars} characters."
        )
    words = len((resume_text or "").split())
    if words < settings.min_resume_words:
        raise AnalysisInputError(
            f"Resume text is too short ({words} words). Provide at least {settings.min_resume_words} words."
        )


def build_user_prompt(
    *,
    resume_text: str,
    job_description: str,
    job_title: str,
    company_name: str,
    flags: SectionFlags,
    summary_excerpt: str,
    keyword_match: KeywordMatchResult,
) -> str:
    flag_lines = "\n".join(f"{name}={value}" for name, value in flags.model_dump().items())
    present = [item for item in keyword_match.present_in_jd if not names_study_field(item)]
    missing = [item for item in keyword_match.missing if not names_study_field(item)]
    return "\n".join(
        [
            f"JOB_TITLE: {job_title}",
            f"COMPANY_NAME: {company_name}",
            "",
            "STRUCTURE_FLAGS (use ONLY these for Structure):",
            flag_lines,
            "",
            "SUMMARY_EXCERPT (use ONLY this block for Summary):",
            "<<<SUMMARY_EXCERPT>>>",
            summary_excerpt,
            "<<<END_SUMMARY_EXCERPT>>>",
            "",
            "RESUME:",
            "<<<RESUME_START>>>",
            resume_text,
            "<<<RESUME_END>>>",
            "",
            "JOB DESCRIPTION:",
            "<<<JD_START>>>",
            job_description,
            "<<<JD_END>>>",
            "",
            "DETERMINISTIC_KEYWORD_MATCH:",
            f"- presentInJD: {json.dumps(present)}",
            f"- matched: {json.dumps(keyword_match.matched)}",
            f"- partial: {json.dumps(keyword_match.partial)}",
            f"- missing: {json.dumps(missing)}",
            "",
            "Return ONLY the JSON object.",
        ]
    )


def _section(payload: Any, *keys: str) -> Any:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def compute_job_fit(model_match: Any, *, offline: bool) -> JobFitScore:
    """Model fit score and buckets clamped to 0..100, with policy defaults when absent."""
    default_key = "job_fit.offline_bucket" if offline else "job_fit.default_bucket"
    default = int(get_scoring_value(default_key, 70 if offline else 50))
    raw_buckets = _section(model_match, "buckets")
    raw_buckets = raw_buckets if isinstance(raw_buckets, dict) else {}
    buckets = JobFitBuckets(
        **{field: clamp_int(raw_buckets.get(key), default, 0, 100) for field, key in _JOB_FIT_FIELDS.items()}
    )
    score = clamp_int(_section(model_match, "score"), default, 0, 100)
    return JobFitScore(score=score, buckets=buckets)


def compute_overall_score(job_fit: int, ats: int) -> int:
    fit = max(0, min(100, job_fit)) / 100
    ats_ratio = max(0, min(100, ats)) / 100
    return max(0, min(100, round_half_up(100 * (fit**0.7) * (ats_ratio**0.3))))


async def match_keywords(
    job_description: str,
    resume_text: str,
    dictionary: list[str],
    *,
    matcher: KeywordMatcher | None = None,
    semantic_matcher: SemanticKeywordMatcher | None = None,
) -> KeywordMatchResult:
    if semantic_matcher is not None:
        return await compute_keyword_match_async(
            job_description, resume_text, matcher=semantic_matcher, dictionary=dictionary
        )
    return compute_keyword_match(job_description, resume_text, matcher=matcher, dictionary=dictionary)


async def analyze_resume(
    payload: AnalyzeRequest,
    *,
    section_flags: SectionFlags | None = None,
    matcher: KeywordMatcher | None = None,
    semantic_matcher: SemanticKeywordMatcher | None = None,
) -> AnalysisResponse:
    resume_text = payload.resume_text
    job_description = payload.job_description_text
    validate_inputs(resume_text, job_description)

    flags = section_flags or detect_section_flags(resume_text)
    summary_excerpt = extract_section(resume_text, "summary")
    skills_excerpt = extract_section(resume_text, "skills")
    experience_excerpt = extract_section(resume_text, "experience") or resume_text

    base_matcher = matcher or KeywordMatcher()
    semantic = semantic_matcher if semantic_matcher is not None else build_semantic_matcher(base_matcher)
    dictionary = build_jd_dictionary(job_description)
    keyword_match = await match_keywords(
        job_description,
        resume_text,
        dictionary,
        matcher=base_matcher,
        semantic_matcher=semantic,
    )
    heuristic = compute_ats_heuristic(resume_text, flags)

    model_payload: dict[str, Any] | None = None
    if payload.use_model:
        completion = json_completion_required if payload.require_model else json_completion
        model_payload = await asyncio.to_thread(
            completion,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_user_prompt(
                resume_text=resume_text,
                job_description=job_description,
                job_title=payload.job_title,
                company_name=payload.company_name,
                flags=flags,
                summary_excerpt=summary_excerpt,
                keyword_match=keyword_match,
            ),
            purpose="analyze_resume",
        )

    external_ats = _section(model_payload, "scores", "ats")
    ats: ReconciledScore = reconcile(
        heuristic,
        external_ats if isinstance(external_ats, dict) else None,
        keyword_match,
        flags,
        summary_excerpt,
        skills_excerpt,
        resume_text,
        job_description,
        experience_excerpt=experience_excerpt,
    )
    offline = model_payload is None
    job_fit = compute_job_fit(_section(model_payload, "scores", "match"), offline=offline)
    keywords = build_keyword_display(keyword_match)

    pack = coerce_resume_pack(_section(model_payload, "resumePack"))
    evidence = coerce_evidence(_section(model_payload, "evidence"))
    lists = apply_coaching_rules(
        coerce_analysis_lists(_section(model_payload, "analysis")),
        job_description,
        resume_text,
    )

    if offline:
        narrative = build_fallback_narrative(
            ats,
            keywords,
            lists,
            job_title=payload.job_title,
            company_name=payload.company_name,
        )
        message = "Model analysis unavailable; returned heuristic analysis."
    else:
        narrative = enforce_domain_consistency(build_narrative(lists, pack), resume_text, job_description)
        message = ""

    overall = compute_overall_score(job_fit.score, ats.score)
    logger.info(
        "resume_analyzed mode=%s ats=%s fit=%s overall=%s keywords=%s/%s",
        ats.source,
        ats.score,
        job_fit.score,
        overall,
        len(keyword_match.matched),
        len(keyword_match.present_in_jd),
    )
    return AnalysisResponse(
        success=True,
        mode=ats.source,
        ats_score=ats,
        job_fit=job_fit,
        overall_score=overall,
        keywords=keywords,
        sections=flags,
        analysis_lists=lists,
        pack=pack,
        evidence=evidence,
        narrative=narrative,
        message=message,
    )
