from fastapi import APIRouter

from app.core.config import settings
from app.services.llm import llm_enabled

router = APIRouter()


@router.get("/health", summary="Health Check", description="Report service status and which optional collaborators are on.")
async def health_check():
    return {
        "status": "healthy",
        "llm_enabled": llm_enabled(),
        "semantic_match_enabled": settings.semantic_match_enabled,
    }
