from __future__ import annotations

import re

from app.core.scoring_config import get_scoring_value
from app.normalize.text import normalize_text, normalize_whitespace

SHORT_SKILL_ALLOWLIST = frozenset({"SQL", "R", "ETL", "DAX"})

_LINE_SPLIT_RE = re.compile(r"\n+")
_DELIMITERS_RE = re.compile(r"(?:,|;|\||/| — | – | - )+")
_BULLET_PREFIX_RE = re.compile(r"^[•◦▪●\-–—*]\s*")
_WHITESPACE_RE = re.compile(r"\s+")


def _accept(candidate: str, max_words: int) -> str | None:
    token = _BULLET_PREFIX_RE.sub("", candidate.strip()).strip()
    if not token:
        return None
    if len(token) <= 2 and token.upper() not in SHORT_SKILL_ALLOWLIST:
        return None
    # Sentence-like fragments are not skills.
    if len(_WHITESPACE_RE.split(token)) > max_words:
        return None
    return token


def extract_atomic_skills(excerpt: str | None) -> list[str]:
    """Split a skills block into short, unique skill tokens in first-seen order."""
    if not excerpt:
        return []

    max_words = int(get_scoring_value("dictionary.max_words", 5))
    candidates: list[str] = []
    for raw_line in _LINE_SPLIT_RE.split(normalize_whitespace(excerpt)):
        line = raw_line.strip()
        if not line:
            continue
        header, _, rest = line.partition(":")
        if header and rest:
            candidates.append(header)
            candidates.extend(_DELIMITERS_RE.split(rest))
        else:
            candidates.extend(_DELIMITERS_RE.split(line))

    seen: set[str] = set()
    output: list[str] = []
    for candidate in candidates:
        token = _accept(candidate, max_words)
        if token is None:
            continue
        key = normalize_text(token) or token.lower()
        if key in seen:
            continue
        seen.add(key)
        output.append(token)
    return output
