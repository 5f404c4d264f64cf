from __future__ import annotations

import logging
from io import BytesIO
from pathlib import PurePath

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from app.features.sections import detect_section_flags
from app.normalize.text import normalize_document_text

from .models import DocumentExtractionError, ExtractedDocument

logger = logging.getLogger(__name__)

MIN_PDF_TEXT_CHARS = 50
SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt")


def _parse_txt(content: bytes) -> tuple[str, list[str]]:
    return content.decode("utf-8", errors="replace"), []


def _parse_pdf(content: bytes) -> tuple[str, list[str]]:
    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(content))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PdfReadError, ValueError, OSError) as exc:
        raise DocumentExtractionError(f"PDF parsing failed: {exc}", code="pdf_unreadable") from exc

    text = "\n".join(page for page in pages if page)
    if len(text.strip()) < MIN_PDF_TEXT_CHARS:
        raise DocumentExtractionError(
            "This PDF appears to be a scanned image with no extractable text. "
            "Upload a text-based PDF or a DOCX file.",
            code="pdf_scanned",
        )
    empty_pages = sum(1 for page in pages if not page)
    if empty_pages:
        warnings.append(f"{empty_pages} page(s) had no extractable text.")
    return text, warnings


def _parse_docx(content: bytes) -> tuple[str, list[str]]:
    try:
        document = Document(BytesIO(content))
    except Exception as exc:  # noqa: BLE001 - python-docx raises several unrelated types
        raise DocumentExtractionError(f"DOCX parsing failed: {exc}", code="docx_unreadable") from exc

    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
            if cells:
                paragraphs.append(" | ".join(cells))
    return "\n".join(paragraphs), []


def extract_document(content: bytes, filename: str) -> ExtractedDocument:
    """Plain text plus section flags from an uploaded résumé file."""
    name = PurePath(filename or "").name or "upload"
    extension = PurePath(name).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise DocumentExtractionError(
            f"Unsupported file type '{extension or name}'. Supported types: .pdf, .docx, .txt",
            code="unsupported_type",
        )
    if not content:
        raise DocumentExtractionError("The uploaded file is empty.", code="empty_file")

    if extension == ".pdf":
        raw_text, warnings = _parse_pdf(content)
    elif extension == ".docx":
        raw_text, warnings = _parse_docx(content)
    else:
        raw_text, warnings = _parse_txt(content)

    text = normalize_document_text(raw_text)
    if not text:
        raise DocumentExtractionError("No extractable text found in the document.", code="no_text")

    logger.info(
        "document_extracted type=%s chars=%s warnings=%s",
        extension.lstrip("."),
        len(text),
        len(warnings),
    )
    return ExtractedDocument(
        filename=name,
        source_type=extension.lstrip("."),
        text=text,
        section_flags=detect_section_flags(text),
        parsing_warnings=warnings,
    )
