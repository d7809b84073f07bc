from fastapi import APIRouter

from ..settings import settings

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def health():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}
