from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Literal, Sequence

from app.core.config import settings
from app.normalize.text import unique_by_key
from app.schemas.resume_pack import AnalysisLists

logger = logging.getLogger(__name__)

RuleSection = Literal["recommendations", "improvements"]
MAX_LIST_ITEMS = 6


@dataclass(frozen=True)
class CoachingRule:
    """When the job description matches ``jd`` and the résumé matches none of ``cv``, coach."""

    id: str
    jd: tuple[re.Pattern[str], ...]
    cv: tuple[re.Pattern[str], ...]
    recommendation: str
    section: RuleSection = "recommendations"

    def applies(self, job_description: str, resume_text: str) -> bool:
        if not self.recommendation:
            return False
        wanted = any(pattern.search(job_description or "") for pattern in self.jd)
        present = any(pattern.search(resume_text or "") for pattern in self.cv)
        return wanted and not present


def _compile(patterns: Sequence[str], flags: int = re.IGNORECASE) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, flags) for pattern in patterns)


DEFAULT_RULES: tuple[CoachingRule, ...] = (
    CoachingRule(
        id="cicd",
        jd=_compile(
            [
                r"ci/?cd",
                r"continuous\s+integration",
                r"continuous\s+(?:delivery|deployment)",
                r"version\s+control",
                r"automation\s+of\s+test(?:\s+plans)?",
                r"test\s+plans?",
            ]
        ),
        cv=_compile(
            [
                r"ci/?cd",
                r"\bgit(hub|lab)?\b",
                r"bitbucket",
                r"azure\s+devops",
                r"jenkins|circleci|travis",
                r"pipelines?",
                r"\bya?ml\b",
                r"\bactions?\b",
                r"release\s+pipeline",
                r"unit\s*tests?",
            ]
        ),
        recommendation=(
            "If applicable, add a bullet on version control, CI/CD, and automated test plans for BI pipelines."
        ),
    ),
    CoachingRule(
        id="r_language",
        # Case-sensitive: only a standalone capital R counts.
        jd=_compile([r"\bR\b", r"python\s+and\s+R", r"R\s+for\s+stat"], flags=0),
        cv=_compile([r"\bR\b"], flags=0),
        recommendation="If you have R exposure, add a short proof (e.g., tidyverse, ggplot2, statistical tests).",
    ),
    CoachingRule(
        id="paginated_reporting",
        jd=_compile([r"paginated\s+report", r"power\s*bi\s+report\s+builder"]),
        cv=_compile([r"paginated\s+report", r"report\s+builder", r"\brdl\b"]),
        recommendation="Mention any Paginated Reporting (Power BI Report Builder / RDL) experience, if applicable.",
    ),
    CoachingRule(
        id="dataops",
        jd=_compile([r"data-?ops", r"reporting\s*&?\s*analytics\s+framework"]),
        cv=_compile(
            [r"data-?ops", r"pipeline|orchestrat(e|ion)|schedule|refresh", r"airflow|databricks|azure\s+devops"]
        ),
        recommendation="Add a line on DataOps: versioning, pipeline orchestration, or scheduled refreshes.",
    ),
    CoachingRule(
        id="data_literacy",
        jd=_compile([r"data\s+literacy", r"enable.*learn.*read.*work\s+with\s+data"]),
        cv=_compile([r"workshop|training|upskilling|data\s+literacy"]),
        recommendation="Add a bullet on data literacy enablement (workshops, training, stakeholder upskilling).",
    ),
)


def _rule_from_payload(index: int, item: Any) -> CoachingRule | None:
    if not isinstance(item, dict):
        return None
    try:
        jd = _compile([str(pattern) for pattern in item.get("jd") or []])
        cv = _compile([str(pattern) for pattern in item.get("cv") or []])
    except re.error as exc:
        logger.warning("coaching_rule_invalid_pattern index=%s: %s", index, exc)
        return None
    recommendation = str(item.get("recommendation") or "").strip()
    if not jd or not recommendation:
        return None
    return CoachingRule(
        id=str(item.get("id") or f"external_{index}"),
        jd=jd,
        cv=cv,
        recommendation=recommendation,
        section="improvements" if item.get("section") == "improvements" else "recommendations",
    )


def parse_external_rules(raw: str | None) -> list[CoachingRule]:
    """Rules from a JSON object ``{"rules": [{id, jd, cv, recommendation, section}]}``."""
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("resume_rules_invalid_json: %s", exc)
        return []
    items = payload.get("rules") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        logger.warning("resume_rules_invalid_shape")
        return []
    rules = [_rule_from_payload(index, item) for index, item in enumerate(items)]
    return [rule for rule in rules if rule is not None]


@lru_cache(maxsize=1)
def get_coaching_rules() -> tuple[CoachingRule, ...]:
    return DEFAULT_RULES + tuple(parse_external_rules(settings.resume_rules_json))


def apply_coaching_rules(
    lists: AnalysisLists,
    job_description: str,
    resume_text: str,
    rules: Sequence[CoachingRule] | None = None,
) -> AnalysisLists:
    additions: dict[RuleSection, list[str]] = {"recommendations": [], "improvements": []}
    for rule in rules if rules is not None else get_coaching_rules():
        if rule.applies(job_description, resume_text):
            additions[rule.section].append(rule.recommendation)

    if not any(additions.values()):
        return lists
    return lists.model_copy(
        update={
            section: unique_by_key([*getattr(lists, section), *extra])[:MAX_LIST_ITEMS]
            for section, extra in additions.items()
            if extra
        }
    )
