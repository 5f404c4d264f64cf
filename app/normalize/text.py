from __future__ import annotations

import re
import unicodedata

_NBSP = "\u00a0"
_WHITESPACE_RE = re.compile(r"\s+")
_DROP_CHARS_RE = re.compile(r"[^\w\s+#.\-/&]")
_EDGE_LEADING_RE = re.compile(r"^[\s\-/&_]+")
_EDGE_TRAILING_RE = re.compile(r"[\s.\-/&_]+$")
_LOOSE_BRACKETS_RE = re.compile(r"[(){}\[\],;:]+")
_TRAILING_SPACE_NEWLINE_RE = re.compile(r"[ \t]+\n")
_MANY_NEWLINES_RE = re.compile(r"\n{3,}")
_KEY_DROP_RE = re.compile(r"[^a-z0-9+#.\-\s]")
_KEY_TRAILING_RE = re.compile(r"[.,;:]+$")


def normalize_text(value: str | None) -> str:
    """Canonical comparison form: NFKC, case-folded, punctuation trimmed, single-spaced.

    Idempotent: ``normalize_text(normalize_text(s)) == normalize_text(s)``.
    """
    text = unicodedata.normalize("NFKC", value or "").replace(_NBSP, " ")
    text = unicodedata.normalize("NFKC", text.casefold())
    text = _DROP_CHARS_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    text = _EDGE_LEADING_RE.sub("", text)
    text = _EDGE_TRAILING_RE.sub("", text)
    return text


def normalize_loose(value: str | None) -> str:
    """Looser form used by the matcher; bracket and list punctuation become spaces."""
    text = unicodedata.normalize("NFKC", value or "").lower().replace(_NBSP, " ")
    text = _LOOSE_BRACKETS_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_whitespace(value: str | None) -> str:
    text = (value or "").replace(_NBSP, " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _TRAILING_SPACE_NEWLINE_RE.sub("\n", text)
    text = _MANY_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def normalize_document_text(value: str | None) -> str:
    return normalize_whitespace(unicodedata.normalize("NFKC", value or ""))


def skill_key(value: str | None) -> str:
    """ASCII de-duplication key for skill tokens."""
    text = (value or "").lower()
    text = _KEY_DROP_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return _KEY_TRAILING_RE.sub("", text).strip()


def unique_by_key(values: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for value in values or []:
        key = skill_key(value)
        if not key or key in seen:
            continue
        seen.add(key)
        output.append(value)
    return output
