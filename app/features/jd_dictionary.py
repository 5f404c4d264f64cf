from __future__ import annotations

import json
import logging
import re
from typing import Sequence

from app.core.config import settings
from app.core.scoring_config import get_scoring_value
from app.normalize.tokens import canon, clean_token
from app.schemas.analysis import KeywordSource, KeywordToken
from app.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

logger = logging.getLogger(__name__)

PROGRAMMING_LANGUAGE_TOKEN = "Programming language"

_TRIGGER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"experience\s+(?:with|in|across)\s*[:-]?\s*(.+)", re.IGNORECASE),
    re.compile(r"proficien(?:t|cy)\s+(?:in|with)\s*[:-]?\s*(.+)", re.IGNORECASE),
    re.compile(r"skills?\s*(?:required|preferred)?\s*[:-]?\s*(.+)", re.IGNORECASE),
    re.compile(r"tools?\s*(?:&?\s*technologies|and technologies)?\s*[:-]?\s*(.+)", re.IGNORECASE),
    re.compile(r"including\s+(.+)", re.IGNORECASE),
    re.compile(r"such\s+as\s+(.+)", re.IGNORECASE),
    re.compile(r"familiarity\s+with\s+(.+)", re.IGNORECASE),
    re.compile(r"collaborat(?:e|ing|ion)\s+with\s+(.+)", re.IGNORECASE),
)
_LINE_SPLIT_RE = re.compile(r"\n+")
_AND_OR_RE = re.compile(r"\band/or\b", re.IGNORECASE)
_SENTENCE_TERMINATOR_RE = re.compile(r"[.?!]")
_LIST_SPLIT_RE = re.compile(r"[,/|;]|\s+and\s+|\s+or\s+", re.IGNORECASE)

# Dots are excluded from Title-Case runs so "Injections. Working" does not fuse.
_TITLE_CASE_RE = re.compile(r"\b([A-Z][A-Za-z0-9+#/-]*(?:[ \t]+[A-Z0-9][A-Za-z0-9+#/-]*){0,3})\b")
_ACRONYM_RE = re.compile(r"\b([A-Z][A-Z0-9]{1,9})\b")
_SPECIAL_TECH_RE = re.compile(r"(?<![A-Za-z0-9])(?:C\+\+|C#|\.NET|Node\.js|React\.js|Vue\.js)(?![A-Za-z0-9])")

_BAD_TITLE_CASE_SINGLES = frozenset(
    {
        "About", "Our", "Strong", "Solid", "Familiarity", "Prior", "Understanding", "Experience",
        "Tertiary", "Related", "Field", "We", "You", "Your", "The", "This", "As", "In", "With",
        "For", "And", "Is", "Are", "Will", "Join", "Help", "Key", "Role", "Team", "Must",
        "Ideal", "Responsibilities", "Requirements", "Skills",
    }
)

_BOILERPLATE_RE = re.compile(
    r"\b(highly regarded|preferably|preferred|required|desirable|essential|experience across|"
    r"experience with|good understanding of)\b",
    re.IGNORECASE,
)
_TITLE_CASE_HINT_RE = re.compile(r"[A-Z][a-z]")
_ACRONYM_SHAPE_RE = re.compile(r"^[A-Z0-9.+#-]{2,}$")
_MULTI_WORD_RE = re.compile(r"[A-Za-z]+\s+[A-Za-z]+")
_DIGIT_RE = re.compile(r"[0-9]")

_TOO_GENERIC_RE = re.compile(
    r"\b(reports?|reporting|analytics?|analysis|stakeholders?|process(?:es)?|framework|environment|"
    r"ability|strong|demonstrated|well[-\s]?developed|previous\s+experience|registered|assist(?:ing)?)\b",
    re.IGNORECASE,
)
_BAD_SINGLETONS = frozenset(
    {
        "about", "our", "strong", "solid", "familiarity", "prior", "understanding", "experience",
        "proficiency", "qualification", "qualifications", "tertiary", "related", "field", "a", "an", "the",
    }
)
_AT_LEAST_ONE_LANGUAGE_RE = re.compile(r"\bat\s+least\s+one\s+programming\s+language\b", re.IGNORECASE)
_BAD_PHRASES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(a\s+related\s+field)\b", re.IGNORECASE),
    _AT_LEAST_ONE_LANGUAGE_RE,
)


def extract_triggered_lists(job_description: str) -> list[str]:
    """Split the tail after trigger phrases ("experience with X, Y and Z") into candidates."""
    output: list[str] = []
    for raw_line in _LINE_SPLIT_RE.split(job_description or ""):
        line = _AND_OR_RE.sub(" and ", raw_line.strip())
        if not line:
            continue
        for pattern in _TRIGGER_PATTERNS:
            match = pattern.search(line)
            if not match or not match.group(1):
                continue
            segment = _SENTENCE_TERMINATOR_RE.split(match.group(1), maxsplit=1)[0]
            for piece in _LIST_SPLIT_RE.split(segment):
                token = clean_token(piece)
                if token:
                    output.append(token)
    return output


def extract_noun_phrases(job_description: str) -> list[str]:
    """Title-Case runs, all-caps acronyms and punctuated tech names found anywhere."""
    text = job_description or ""
    output: list[str] = []
    for phrase in _TITLE_CASE_RE.findall(text):
        if phrase in _BAD_TITLE_CASE_SINGLES:
            continue
        output.append(phrase)
    output.extend(_ACRONYM_RE.findall(text))
    output.extend(_SPECIAL_TECH_RE.findall(text))
    return [token for token in (clean_token(item) for item in output) if token]


def parse_extra_keywords(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("jd_keywords_extra_invalid_json: %s", exc)
        return []
    if not isinstance(parsed, list):
        logger.warning("jd_keywords_extra_invalid_shape type=%s", type(parsed).__name__)
        return []
    return [str(item).strip() for item in parsed if str(item).strip()]


def is_likely_keyword(token: str, taxonomy: TaxonomyProvider | None = None) -> bool:
    if not token:
        return False
    provider = taxonomy or get_default_taxonomy_provider()
    max_words = int(get_scoring_value("dictionary.max_words", 5))

    if len(token.split()) > max_words:
        return False
    if _BOILERPLATE_RE.search(token):
        return False
    if provider.is_stopword(token):
        return False
    if len(token) < 2 and token != "R":
        return False

    return bool(
        _TITLE_CASE_HINT_RE.search(token)
        or _ACRONYM_SHAPE_RE.match(token)
        or _MULTI_WORD_RE.search(token)
        or _DIGIT_RE.search(token)
        or token == "R"
    )


def _is_specific(token: str) -> bool:
    if _TOO_GENERIC_RE.search(token):
        return False
    lowered = token.lower().strip()
    if lowered in _BAD_SINGLETONS:
        return False
    return not any(pattern.search(lowered) for pattern in _BAD_PHRASES)


def build_jd_tokens(
    job_description: str,
    *,
    taxonomy: TaxonomyProvider | None = None,
    extra_keywords: Sequence[str] | None = None,
    max_tokens: int | None = None,
) -> list[KeywordToken]:
    provider = taxonomy or get_default_taxonomy_provider()
    limit = max_tokens if max_tokens is not None else int(get_scoring_value("dictionary.max_tokens", 60))
    extras = list(extra_keywords) if extra_keywords is not None else parse_extra_keywords(settings.jd_keywords_extra)

    triggered = extract_triggered_lists(job_description)
    noun_phrases = extract_noun_phrases(job_description)
    candidates: list[tuple[str, KeywordSource]] = (
        [(item, "triggered") for item in triggered]
        + [(item, "noun_phrase") for item in noun_phrases]
        + [(item, "extra") for item in extras]
    )

    seen: set[str] = set()
    dictionary: list[KeywordToken] = []
    for raw, source in candidates:
        literal = clean_token(raw)
        token = canon(literal, provider)
        if not is_likely_keyword(token, provider):
            continue
        key = token.lower()
        if key in seen:
            continue
        seen.add(key)
        dictionary.append(KeywordToken(text=literal, canonical=token, source=source))

    specific = [item for item in dictionary if _is_specific(item.canonical)]
    final = specific[:limit]

    if limit > 0 and _AT_LEAST_ONE_LANGUAGE_RE.search(job_description or ""):
        final = [item for item in final if item.canonical.lower() != PROGRAMMING_LANGUAGE_TOKEN.lower()]
        if len(final) >= limit:
            final = final[: max(limit - 1, 0)]
        final.append(
            KeywordToken(
                text="at least one programming language",
                canonical=PROGRAMMING_LANGUAGE_TOKEN,
                source="synthetic",
            )
        )

    logger.debug(
        "jd_dictionary_built jd_len=%s triggered=%s noun_phrases=%s unique=%s final=%s",
        len(job_description or ""),
        len(triggered),
        len(noun_phrases),
        len(dictionary),
        len(final),
    )
    return final


def build_jd_dictionary(
    job_description: str,
    *,
    taxonomy: TaxonomyProvider | None = None,
    extra_keywords: Sequence[str] | None = None,
    max_tokens: int | None = None,
) -> list[str]:
    tokens = build_jd_tokens(
        job_description,
        taxonomy=taxonomy,
        extra_keywords=extra_keywords,
        max_tokens=max_tokens,
    )
    return [token.canonical for token in tokens]
