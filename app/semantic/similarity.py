from __future__ import annotations

from rapidfuzz import process
from rapidfuzz.distance import JaroWinkler

from app.core.scoring_config import get_scoring_value
from app.normalize.text import normalize_loose


def jaro_winkler(left: str, right: str) -> float:
    """Case-insensitive Jaro-Winkler similarity with a prefix bonus of up to 4 chars."""
    a = (left or "").lower()
    b = (right or "").lower()
    if a == b:
        return 1.0
    return float(JaroWinkler.similarity(a, b, prefix_weight=0.1))


def word_ngrams(text: str, max_n: int) -> dict[int, list[str]]:
    """Unique word windows of size 1..max_n over loosely normalized text, first-seen order."""
    words = normalize_loose(text).split()
    grams: dict[int, list[str]] = {}
    for size in range(1, max(1, max_n) + 1):
        seen: set[str] = set()
        ordered: list[str] = []
        for index in range(0, len(words) - size + 1):
            gram = " ".join(words[index : index + size])
            if gram not in seen:
                seen.add(gram)
                ordered.append(gram)
        grams[size] = ordered
    return grams


def fuzzy_contains(
    text: str,
    token: str,
    threshold: float | None = None,
    *,
    grams: dict[int, list[str]] | None = None,
) -> bool:
    """True when any 1..n word window of ``text`` is Jaro-Winkler-close to ``token``."""
    cutoff = threshold if threshold is not None else float(get_scoring_value("matching.fuzzy_threshold_lenient", 0.86))
    target = normalize_loose(token)
    if not target:
        return False

    max_n = int(get_scoring_value("matching.fuzzy_max_ngram", 5))
    size = min(max_n, max(1, len(target.split())))
    windows = grams if grams is not None else word_ngrams(text, size)
    for k in range(1, size + 1):
        choices = windows.get(k) or []
        if not choices:
            continue
        best = process.extractOne(
            target,
            choices,
            scorer=JaroWinkler.similarity,
            scorer_kwargs={"prefix_weight": 0.1},
            score_cutoff=cutoff,
        )
        if best is not None:
            return True
    return False
