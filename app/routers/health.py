from fastapi import APIRouter, Depends

from app.core.config import Settings
from app.routers.dependencies import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        "version": settings.version,
        "provider": settings.exchange_rate_provider,
    }
