# FILE: image_broker/routes/generate.py
"""
Image generation endpoint
"""
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from image_broker.dependencies import get_http_client
from image_broker.services.correlation import get_correlation_id
from image_broker.services.dispatcher import GENERIC_FAILURE, GenerationFailed, generate
from image_broker.services.normalizer import InvalidGenerationRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/generate")
async def generate_endpoint(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    x_request_id: Optional[str] = Header(None)
):
    """
    Generate images.

    The body is read raw and normalized by the dispatcher, so unknown
    or out-of-range fields are clamped instead of rejected.
    """
    correlation_id = get_correlation_id(x_request_id)

    try:
        body = await request.json()
    except ValueError:
        logger.info(f"[{correlation_id}] Rejected unparsable generate body")
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        result = await generate(body, client=client, correlation_id=correlation_id)
    except InvalidGenerationRequest as e:
        logger.info(f"[{correlation_id}] Invalid generate request: {e.message}")
        return JSONResponse(status_code=400, content={"error": e.message})
    except GenerationFailed:
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE})

    return result.model_dump()
