from fastapi import APIRouter, File, Form, Header, HTTPException, Request, UploadFile, status
from pydantic import ValidationError

from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.core.security import check_api_key
from app.parsing.models import DocumentExtractionError
from app.parsing.parse import SUPPORTED_EXTENSIONS, extract_document
from app.schemas.analysis import AnalysisResponse, AnalyzeRequest
from app.services.analysis_service import AnalysisInputError, analyze_resume
from app.services.llm import LLMError

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(1024 * 64)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/analyze-resume", response_model=AnalysisResponse)
@rate_limit()
async def analyze_resume_text(
    request: Request,
    payload: AnalyzeRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    check_api_key(x_api_key, request.headers.get("accept-language"))
    try:
        return await analyze_resume(payload)
    except AnalysisInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except LLMError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("/analyze-resume/upload", response_model=AnalysisResponse)
@rate_limit()
async def analyze_resume_upload(
    request: Request,
    resume: UploadFile = File(...),
    job_description: str = Form(...),
    job_title: str = Form(default=""),
    company_name: str = Form(default=""),
    use_model: bool = Form(default=True),
    require_model: bool = Form(default=False),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    check_api_key(x_api_key, request.headers.get("accept-language"))
    filename = resume.filename or "resume"
    if not filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type. Allowed: {', '.join(SUPPORTED_EXTENSIONS)}.",
        )

    content = await _read_upload(resume)
    try:
        document = extract_document(content, filename)
        payload = AnalyzeRequest(
            resume_text=document.text,
            job_description_text=job_description,
            job_title=job_title,
            company_name=company_name,
            use_model=use_model,
            require_model=require_model,
        )
        return await analyze_resume(payload, section_flags=document.section_flags)
    except (DocumentExtractionError, AnalysisInputError, ValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except LLMError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
