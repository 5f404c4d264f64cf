from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from typing import Any

from openai import OpenAI

from app.core.config import settings

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def llm_enabled() -> bool:
    if not settings.llm_enabled:
        return False
    api_key = (settings.openai_api_key or "").strip()
    if not api_key or _looks_like_placeholder(api_key):
        return False
    return True


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(settings.openai_api_key or "").strip(),
        base_url=(settings.openai_base_url or None),
        timeout=settings.llm_timeout_s,
        max_retries=1,
    )


def _model() -> str:
    return settings.ai_model.strip()


def json_completion(
    *,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.0,
    max_output_tokens: int = 4000,
    purpose: str = "analysis",
) -> dict[str, Any] | None:
    """One JSON-mode chat completion; ``None`` on any failure so callers can degrade."""
    if not llm_enabled():
        logger.info("llm_skipped purpose=%s reason=disabled", purpose)
        return None

    started = time.perf_counter()
    try:
        response = _client().chat.completions.create(
            model=_model(),
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
            max_tokens=max_output_tokens,
        )
        content = response.choices[0].message.content if response.choices else ""
        latency_ms = int((time.perf_counter() - started) * 1000)
        if not content:
            logger.warning("llm_empty_response purpose=%s latency_ms=%s", purpose, latency_ms)
            return None
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            logger.warning("llm_invalid_schema purpose=%s type=%s", purpose, type(parsed).__name__)
            return None
        logger.info("llm_completed purpose=%s model=%s latency_ms=%s", purpose, _model(), latency_ms)
        return parsed
    except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
        logger.warning("llm_json_failed model=%s prompt_len=%s: %s", _model(), len(user_prompt), exc)
        return None


def json_completion_required(
    *,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.0,
    max_output_tokens: int = 4000,
    purpose: str = "analysis",
) -> dict[str, Any]:
    if not llm_enabled():
        raise LLMError("Model analysis was requested but OpenAI is not configured.", code="llm_disabled")

    payload = json_completion(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
        purpose=purpose,
    )
    if not payload:
        raise LLMError("Model analysis could not produce a valid response. Try again.", code="llm_invalid")
    return payload
