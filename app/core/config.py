from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    openai_api_key: str | None
    openai_base_url: str | None
    ai_model: str
    embedding_model: str
    llm_enabled: bool
    llm_timeout_s: float
    semantic_match_enabled: bool
    jd_keywords_extra: str | None
    resume_rules_json: str | None
    min_job_description_chars: int
    min_resume_words: int
    max_upload_bytes: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "10/minute") or "10/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    openai_api_key=_get_env("OPENAI_API_KEY"),
    openai_base_url=_get_env("OPENAI_BASE_URL"),
    ai_model=_get_env("AI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    embedding_model=_get_env("EMBEDDING_MODEL", "text-embedding-3-small") or "text-embedding-3-small",
    llm_enabled=_get_env_bool("LLM_ENABLED", True),
    llm_timeout_s=float(_get_env("LLM_TIMEOUT_S", "30") or "30"),
    semantic_match_enabled=_get_env_bool("ENABLE_SEMANTIC_MATCH", False),
    jd_keywords_extra=_get_env("JD_KEYWORDS_EXTRA"),
    resume_rules_json=_get_env("RESUME_RULES_JSON"),
    min_job_description_chars=_get_env_int("MIN_JOB_DESCRIPTION_CHARS", 20),
    min_resume_words=_get_env_int("MIN_RESUME_WORDS", 100),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
)
