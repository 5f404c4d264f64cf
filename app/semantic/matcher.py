from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from app.core.config import settings
from app.core.scoring_config import get_scoring_value
from app.features.jd_dictionary import PROGRAMMING_LANGUAGE_TOKEN, build_jd_dictionary
from app.normalize.text import normalize_loose
from app.normalize.tokens import clean_token
from app.schemas.analysis import KeywordMatchResult
from app.scoring.common import round_half_up

from .embeddings import EmbeddingProvider, OpenAIEmbeddingProvider, cosine_similarity
from .similarity import fuzzy_contains, word_ngrams

logger = logging.getLogger(__name__)

PROGRAMMING_LANGUAGES: tuple[str, ...] = (
    "Python", "R", "Java", "C#", "C++", "JavaScript", "TypeScript",
    "Scala", "Go", "MATLAB", "SAS", "Julia", "Ruby", "PHP",
)

# (pattern, replacement, reverse pattern, reverse replacement)
PhraseEquivalence = tuple[str, str, str, str]

DEFAULT_EQUIVALENCES: tuple[PhraseEquivalence, ...] = (
    (r"\bpost\s*procedure\b", "post-procedure", r"\bpost-procedure\b", "post procedure"),
    (r"\bprocedures?\b", "procedural", r"\bprocedural\b", "procedure"),
    (r"\brecover\b", "recovery", r"\brecovery\b", "recover"),
    (r"\bobservation\b", "observations", r"\bobservations\b", "observation"),
)

_HYPHENS_RE = re.compile(r"[-‐-―]")
_WHITESPACE_RE = re.compile(r"\s+")
_STEM_RE = re.compile(
    r"\b(\w{3,})(ing|ed|es|s|al|ally|ation|ations|er|ers|ion|ions|ive|ives|ary|aries)\b",
    re.IGNORECASE,
)
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True)
class MatchOutcome:
    matched: bool
    partial: bool = False


@dataclass
class PreparedResume:
    """Résumé text normalized once and reused across every dictionary token."""

    raw: str
    loose: str
    grams: dict[int, list[str]] = field(default_factory=dict)


def hyphen_space_variants(value: str) -> list[str]:
    return list(dict.fromkeys([value, _WHITESPACE_RE.sub("-", value), _HYPHENS_RE.sub(" ", value)]))


def light_stems(value: str) -> list[str]:
    return [item for item in dict.fromkeys([value, _STEM_RE.sub(r"\1", value)]) if item]


def _variant_pattern(variant: str) -> re.Pattern[str]:
    body = r"[\s-]+".join(re.escape(word) for word in variant.split())
    return re.compile(rf"(^|[^a-z0-9]){body}([^a-z0-9]|$)", re.IGNORECASE)


class KeywordMatcher:
    """Synchronous tiers: literal/variant containment, then fuzzy n-gram similarity."""

    def __init__(
        self,
        *,
        fuzzy_threshold: float | None = None,
        equivalences: Sequence[PhraseEquivalence] = DEFAULT_EQUIVALENCES,
        languages: Sequence[str] = PROGRAMMING_LANGUAGES,
    ) -> None:
        self.fuzzy_threshold = (
            fuzzy_threshold
            if fuzzy_threshold is not None
            else float(get_scoring_value("matching.fuzzy_threshold", 0.90))
        )
        self._equivalences = tuple(
            (re.compile(pattern, re.IGNORECASE), replacement, re.compile(reverse, re.IGNORECASE), reverse_replacement)
            for pattern, replacement, reverse, reverse_replacement in equivalences
        )
        self.languages = tuple(languages)
        self._max_ngram = int(get_scoring_value("matching.fuzzy_max_ngram", 5))

    def prepare(self, resume_text: str | PreparedResume) -> PreparedResume:
        if isinstance(resume_text, PreparedResume):
            return resume_text
        raw = resume_text or ""
        return PreparedResume(raw=raw, loose=normalize_loose(raw), grams=word_ngrams(raw, self._max_ngram))

    def variants(self, token: str) -> list[str]:
        base = clean_token(token)
        stems = [stem for variant in hyphen_space_variants(base) for stem in light_stems(variant)]
        swapped: list[str] = []
        for variant in stems:
            current = [variant]
            for pattern, replacement, reverse, reverse_replacement in self._equivalences:
                expanded: list[str] = []
                for item in current:
                    expanded.extend([item, pattern.sub(replacement, item), reverse.sub(reverse_replacement, item)])
                current = list(dict.fromkeys(expanded))
            swapped.extend(current)
        return [item for item in dict.fromkeys(normalize_loose(item) for item in swapped) if item]

    def contains_token(self, resume: str | PreparedResume, token: str) -> bool:
        prepared = self.prepare(resume)
        if not prepared.loose:
            return False
        return any(_variant_pattern(variant).search(prepared.loose) for variant in self.variants(token))

    def fuzzy_contains(self, resume: str | PreparedResume, token: str, threshold: float | None = None) -> bool:
        prepared = self.prepare(resume)
        return fuzzy_contains(
            prepared.raw,
            token,
            threshold if threshold is not None else self.fuzzy_threshold,
            grams=prepared.grams,
        )

    def has_any_language(self, resume: str | PreparedResume) -> bool:
        prepared = self.prepare(resume)
        return any(self.contains_token(prepared, language) for language in self.languages)

    def match(self, resume: str | PreparedResume, token: str) -> MatchOutcome:
        prepared = self.prepare(resume)
        if is_programming_language_token(token):
            return MatchOutcome(matched=self.has_any_language(prepared))
        hit = self.contains_token(prepared, token) or self.fuzzy_contains(prepared, token)
        return MatchOutcome(matched=hit)


class SemanticKeywordMatcher:
    """Adds embedding-based partial credit on top of a synchronous matcher.

    Never changes a synchronous hit; only upgrades "missing" to "partial".
    Embedding failures are logged and treated as no partial credit.
    """

    def __init__(
        self,
        base: KeywordMatcher,
        provider: EmbeddingProvider,
        *,
        threshold: float | None = None,
        max_sentences: int | None = None,
        max_sentence_chars: int | None = None,
    ) -> None:
        self.base = base
        self.provider = provider
        self.threshold = (
            threshold if threshold is not None else float(get_scoring_value("matching.semantic.threshold", 0.78))
        )
        self.max_sentences = (
            max_sentences if max_sentences is not None else int(get_scoring_value("matching.semantic.max_sentences", 200))
        )
        self.max_sentence_chars = (
            max_sentence_chars
            if max_sentence_chars is not None
            else int(get_scoring_value("matching.semantic.max_sentence_chars", 300))
        )

    def prepare(self, resume_text: str | PreparedResume) -> PreparedResume:
        return self.base.prepare(resume_text)

    def candidate_sentences(self, resume_text: str) -> list[str]:
        sentences = [
            sentence
            for sentence in _SENTENCE_SPLIT_RE.split(resume_text or "")
            if sentence.strip() and len(sentence) < self.max_sentence_chars
        ]
        return sentences[: self.max_sentences]

    async def semantic_hit(self, resume_text: str, token: str) -> bool:
        term = (token or "").strip()
        if not term:
            return False
        sentences = self.candidate_sentences(resume_text)
        if not sentences:
            return False

        token_vectors, sentence_vectors = await asyncio.gather(
            self.provider.embed([term]),
            self.provider.embed(sentences),
        )
        if not token_vectors:
            return False
        token_vector = token_vectors[0]
        return any(cosine_similarity(token_vector, vector) >= self.threshold for vector in sentence_vectors)

    async def match(self, resume: str | PreparedResume, token: str) -> MatchOutcome:
        prepared = self.prepare(resume)
        outcome = self.base.match(prepared, token)
        if outcome.matched or is_programming_language_token(token):
            return outcome
        try:
            partial = await self.semantic_hit(prepared.raw, token)
        except Exception as exc:  # noqa: BLE001 - semantic tier is advisory
            logger.warning("semantic_match_failed token=%s: %s", token, exc)
            partial = False
        return MatchOutcome(matched=False, partial=partial)


def is_programming_language_token(token: str) -> bool:
    return (token or "").strip().lower() == PROGRAMMING_LANGUAGE_TOKEN.lower()


def keyword_pct(matched: int, partial: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, min(100, round_half_up(100 * (matched + 0.5 * partial) / total)))


def match_keyword(resume_text: str, token: str, matcher: KeywordMatcher | None = None) -> MatchOutcome:
    return (matcher or KeywordMatcher()).match(resume_text, token)


def compute_keyword_match(
    job_description: str,
    resume_text: str,
    *,
    matcher: KeywordMatcher | None = None,
    dictionary: Sequence[str] | None = None,
) -> KeywordMatchResult:
    engine = matcher or KeywordMatcher()
    present = list(dictionary) if dictionary is not None else build_jd_dictionary(job_description)
    prepared = engine.prepare(resume_text)

    matched: list[str] = []
    missing: list[str] = []
    for token in present:
        (matched if engine.match(prepared, token).matched else missing).append(token)

    return KeywordMatchResult(
        matched=matched,
        missing=missing,
        partial=[],
        pct=keyword_pct(len(matched), 0, len(present)),
        present_in_jd=present,
    )


async def compute_keyword_match_async(
    job_description: str,
    resume_text: str,
    *,
    matcher: SemanticKeywordMatcher,
    dictionary: Sequence[str] | None = None,
) -> KeywordMatchResult:
    present = list(dictionary) if dictionary is not None else build_jd_dictionary(job_description)
    prepared = matcher.prepare(resume_text)

    matched: list[str] = []
    partial: list[str] = []
    missing: list[str] = []
    for token in present:
        outcome = await matcher.match(prepared, token)
        if outcome.matched:
            matched.append(token)
        elif outcome.partial:
            partial.append(token)
        else:
            missing.append(token)

    return KeywordMatchResult(
        matched=matched,
        missing=missing,
        partial=partial,
        pct=keyword_pct(len(matched), len(partial), len(present)),
        present_in_jd=present,
    )


def build_semantic_matcher(
    base: KeywordMatcher | None = None,
    provider: EmbeddingProvider | None = None,
) -> SemanticKeywordMatcher | None:
    """Semantic tier only when the feature flag is on and an embedding provider is available."""
    if not settings.semantic_match_enabled:
        return None
    if provider is None:
        if not settings.openai_api_key:
            return None
        provider = OpenAIEmbeddingProvider()
    return SemanticKeywordMatcher(base or KeywordMatcher(), provider)
