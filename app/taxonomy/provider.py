from __future__ import annotations

from typing import Protocol


class TaxonomyProvider(Protocol):
    def canonical(self, token: str) -> str:
        """Return the canonical spelling for a token, or the token unchanged."""

    def is_stopword(self, token: str) -> bool:
        """Return True when the lower-cased token is a generic filler word."""
