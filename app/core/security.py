from __future__ import annotations

import hmac

from fastapi import HTTPException, status

from app.core.config import settings

_AUTH_MESSAGES = {
    "en": "Please provide a valid API key to use the resume analyzer.",
    "de": "Bitte gib einen gültigen API-Schlüssel an, um die Lebenslauf-Analyse zu nutzen.",
    "fr": "Veuillez fournir une clé API valide pour utiliser l'analyse de CV.",
    "es": "Por favor, proporciona una clave API válida para usar el análisis de currículums.",
    "it": "Per favore, fornisci una chiave API valida per usare l'analisi del CV.",
}


def _preferred_language(accept_language: str | None) -> str:
    if not accept_language:
        return "en"
    first = accept_language.split(",")[0].strip().lower()
    return first.split("-")[0].split(";")[0] or "en"


def check_api_key(x_api_key: str | None, accept_language: str | None = None) -> None:
    """No-op when API_KEY is unset; otherwise the X-API-Key header must match."""
    if not settings.api_key:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key.encode("utf-8"), settings.api_key.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_AUTH_MESSAGES.get(_preferred_language(accept_language), _AUTH_MESSAGES["en"]),
        )
