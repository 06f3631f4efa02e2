"""Health check router."""

from fastapi import APIRouter, Depends

from zipreview.api.deps import get_settings
from zipreview.config import VERSION, Settings

router = APIRouter()


@router.get("/health")
async def health_check(current_settings: Settings = Depends(get_settings)) -> dict:
    """Return liveness plus whether AI review is available."""
    return {
        "status": "ok",
        "llm": "configured" if current_settings.llm_api_key else "disabled",
    }


@router.get("/health/version")
async def health_version(current_settings: Settings = Depends(get_settings)) -> dict:
    """Return application version and the configured LLM provider."""
    return {
        "version": VERSION,
        "llm_provider": current_settings.LLM_PROVIDER,
        "llm_model": current_settings.LLM_MODEL,
    }
