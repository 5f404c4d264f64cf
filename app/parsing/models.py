from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from app.schemas.analysis import SectionFlags


class DocumentExtractionError(ValueError):
    """The uploaded document has no usable text; surfaced to the user as a 400."""

    def __init__(self, message: str, *, code: str = "extraction_failed"):
        super().__init__(message)
        self.code = code


class ExtractedDocument(BaseModel):
    filename: str
    source_type: str
    text: str
    section_flags: SectionFlags
    parsing_warnings: list[str] = Field(default_factory=list)

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pdf", "docx", "txt"}:
            raise ValueError("source_type must be one of: pdf, docx, txt")
        return normalized
