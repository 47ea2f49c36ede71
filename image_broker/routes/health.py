# FILE: image_broker/routes/health.py
"""
Health check endpoint
"""
import logging
from fastapi import APIRouter

from image_broker import __version__
from image_broker.config import get_settings, load_provider_settings
from image_broker.providers.registry import select_provider

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check():
    """Liveness plus the provider a request would use right now"""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "provider": select_provider(load_provider_settings()),
        "history_enabled": settings.history_enabled,
    }
