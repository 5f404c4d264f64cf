from .jd_dictionary import (
    PROGRAMMING_LANGUAGE_TOKEN,
    build_jd_dictionary,
    build_jd_tokens,
    extract_noun_phrases,
    extract_triggered_lists,
    is_likely_keyword,
)
from .sections import ExtractionStrategy, detect_section_flags, extract_section, robust_slice
from .skill_tokens import extract_atomic_skills

__all__ = [
    "PROGRAMMING_LANGUAGE_TOKEN",
    "build_jd_dictionary",
    "build_jd_tokens",
    "extract_noun_phrases",
    "extract_triggered_lists",
    "is_likely_keyword",
    "ExtractionStrategy",
    "detect_section_flags",
    "extract_section",
    "robust_slice",
    "extract_atomic_skills",
]
