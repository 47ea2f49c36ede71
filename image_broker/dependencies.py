# FILE: image_broker/dependencies.py
"""
FastAPI dependencies shared by routes
"""
import logging
from typing import Optional

import httpx
from fastapi import Request

from image_broker.config import get_settings
from image_broker.services.blob_mirror import BlobMirror
from image_broker.services.history_store import HistoryStore

logger = logging.getLogger(__name__)

_history_store: Optional[HistoryStore] = None


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Application-wide upstream client created in the lifespan hook"""
    return request.app.state.http_client


def get_history_store() -> Optional[HistoryStore]:
    """History store, or None when HISTORY_ENABLED is false"""
    global _history_store
    settings = get_settings()
    if not settings.history_enabled:
        return None
    if _history_store is None:
        _history_store = HistoryStore(settings.history_dir, limit=settings.history_limit)
    return _history_store


def get_blob_mirror(request: Request) -> Optional[BlobMirror]:
    """Blob mirror, or None when BLOB_MIRROR_URL is not set"""
    settings = get_settings()
    if not settings.blob_mirror_url:
        return None
    return BlobMirror(
        request.app.state.http_client,
        upload_url=settings.blob_mirror_url,
        token=settings.blob_mirror_token,
        hosted_marker=settings.blob_mirror_host
    )
