from .embeddings import EmbeddingProvider, OpenAIEmbeddingProvider, SimpleEmbeddingProvider
from .matcher import (
    KeywordMatcher,
    MatchOutcome,
    SemanticKeywordMatcher,
    build_semantic_matcher,
    compute_keyword_match,
    compute_keyword_match_async,
)
from .similarity import fuzzy_contains, jaro_winkler

__all__ = [
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "SimpleEmbeddingProvider",
    "KeywordMatcher",
    "MatchOutcome",
    "SemanticKeywordMatcher",
    "build_semantic_matcher",
    "compute_keyword_match",
    "compute_keyword_match_async",
    "fuzzy_contains",
    "jaro_winkler",
]
