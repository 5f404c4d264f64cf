from __future__ import annotations

import re

from app.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

from .text import skill_key

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_LEADING_BULLETS_RE = re.compile(rf"^[{re.escape(_BULLET_CHARS)}\s]+")
_PARENTHETICAL_RE = re.compile(r"\(.*?\)")
_AND_OR_RE = re.compile(r"\band/or\b", re.IGNORECASE)
_REQUIREMENT_TAIL_RE = re.compile(
    r"\b(is\s+(?:highly\s+)?regarded|is\s+(?:required|preferred|desirable|essential))\b.*$",
    re.IGNORECASE,
)
_EXAMPLE_TAIL_RE = re.compile(r"\b(such\s+as|including)\b.*$", re.IGNORECASE)
_SENTENCE_END_RE = re.compile(r"\.(?:\s|$).*")
_INCLUDE_TAIL_RE = re.compile(r"\b(include|includes)\b:?.*$", re.IGNORECASE)
_TRAILING_BRACKETS_RE = re.compile(r"[(){}\[\],;:]+$")
_WHITESPACE_RE = re.compile(r"\s+")

_TOOL_NAME_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(^|\s)(ms|microsoft)\s*sql\b|(^|\s)t-?sql\b|(^|\s)mssql\b"), "SQL Server"),
    (re.compile(r"^power\s*bi(\s*desktop)?$|^pbi$"), "Power BI"),
    (re.compile(r"^power\s*query$|^powerquery$|^pq$"), "Power Query"),
    (re.compile(r"^ssms$|sql\s*server\s*management\s*studio"), "SSMS"),
    (re.compile(r"^excel$|^microsoft\s*excel$"), "Microsoft Excel"),
    (re.compile(r"^dax$"), "DAX"),
    (re.compile(r"^python$"), "Python"),
    (re.compile(r"^mysql$"), "MySQL"),
    (re.compile(r"^tableau$"), "Tableau"),
)


def strip_bullet(value: str) -> str:
    return _LEADING_BULLETS_RE.sub("", value or "")


def clean_token(raw: str | None) -> str:
    """Strip bullets, asides and requirement boilerplate from a candidate keyword."""
    text = strip_bullet(raw or "")
    text = _PARENTHETICAL_RE.sub("", text)
    text = _AND_OR_RE.sub(" ", text)
    text = _REQUIREMENT_TAIL_RE.sub("", text)
    text = _EXAMPLE_TAIL_RE.sub("", text)
    text = _SENTENCE_END_RE.sub("", text)
    text = _INCLUDE_TAIL_RE.sub("", text)
    text = _TRAILING_BRACKETS_RE.sub("", text.strip())
    return _WHITESPACE_RE.sub(" ", text).strip()


def canon(token: str, taxonomy: TaxonomyProvider | None = None) -> str:
    provider = taxonomy or get_default_taxonomy_provider()
    return provider.canonical(token)


def map_tool_name(raw: str) -> str:
    key = skill_key(raw)
    if not key:
        return raw
    for pattern, canonical_name in _TOOL_NAME_RULES:
        if pattern.search(key):
            return canonical_name
    return raw
