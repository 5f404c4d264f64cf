from __future__ import annotations

import json
from pathlib import Path

from .provider import TaxonomyProvider


class LocalTaxonomy(TaxonomyProvider):
    def __init__(
        self,
        synonyms_path: str | Path | None = None,
        stopwords_path: str | Path | None = None,
    ) -> None:
        synonyms = Path(synonyms_path) if synonyms_path else Path(__file__).with_name("synonyms.json")
        stopwords = Path(stopwords_path) if stopwords_path else Path(__file__).with_name("stopwords.json")
        self._synonyms = self._load_synonyms(synonyms)
        self._stopwords = self._load_stopwords(stopwords)

    @staticmethod
    def _load_synonyms(path: Path) -> dict[str, str]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        return {str(key).strip().lower(): str(value) for key, value in raw.items()}

    @staticmethod
    def _load_stopwords(path: Path) -> frozenset[str]:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        return frozenset(str(item).strip().lower() for item in raw)

    def canonical(self, token: str) -> str:
        key = (token or "").strip().lower()
        return self._synonyms.get(key, token)

    def is_stopword(self, token: str) -> bool:
        return (token or "").strip().lower() in self._stopwords


class StaticTaxonomy(TaxonomyProvider):
    """In-memory taxonomy, handy for swapping tables in tests."""

    def __init__(self, synonyms: dict[str, str], stopwords: set[str] | frozenset[str] = frozenset()) -> None:
        self._synonyms = {key.strip().lower(): value for key, value in synonyms.items()}
        self._stopwords = frozenset(word.strip().lower() for word in stopwords)

    def canonical(self, token: str) -> str:
        key = (token or "").strip().lower()
        return self._synonyms.get(key, token)

    def is_stopword(self, token: str) -> bool:
        return (token or "").strip().lower() in self._stopwords
