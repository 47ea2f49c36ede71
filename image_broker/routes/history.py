# FILE: image_broker/routes/history.py
"""
History endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from image_broker.dependencies import get_blob_mirror, get_history_store
from image_broker.models.history import HistoryWriteRequest
from image_broker.services.blob_mirror import BlobMirror
from image_broker.services.history_store import HistoryStore
from image_broker.services.telemetry import record_event

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/history")
async def list_history(
    collection_id: Optional[str] = Query(None, alias="collectionId"),
    store: Optional[HistoryStore] = Depends(get_history_store)
):
    """Newest-first history for one collection"""
    if not collection_id:
        return JSONResponse(status_code=400, content={"error": "Missing collectionId"})
    if store is None:
        return {"items": []}

    items = store.list_items(collection_id)
    return {"items": [item.model_dump(by_alias=True) for item in items]}


@router.post("/history")
async def write_history(
    request: Request,
    store: Optional[HistoryStore] = Depends(get_history_store),
    mirror: Optional[BlobMirror] = Depends(get_blob_mirror)
):
    """Store a batch of generated images, mirroring their URLs when configured"""
    if store is None:
        return JSONResponse(status_code=501, content={"error": "History store not configured"})

    try:
        payload = HistoryWriteRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid payload"})

    items = payload.items
    if mirror is not None:
        urls = await mirror.mirror_all([item.image_url for item in items])
        items = [item.model_copy(update={"image_url": url}) for item, url in zip(items, urls)]

    records = store.add_items(payload.collection_id, items)
    record_event("history_write", items=len(records), mirrored=mirror is not None)

    return {"ok": True}
