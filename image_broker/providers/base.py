# FILE: image_broker/providers/base.py
"""
Base class for image providers
"""
import logging
from typing import Any, Dict, Optional

import httpx

from image_broker.models.generation import GenerationRequest, GenerationResult
from image_broker.services.dimensions import Dimensions

logger = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """Non-success response from an upstream provider"""

    def __init__(self, provider: str, status: int, body: str):
        super().__init__(f"{provider} error {status}: {body}")
        self.provider = provider
        self.status = status
        self.body = body


class ImageProvider:
    """Translates a GenerationRequest into one upstream call"""

    name = "base"

    async def invoke(self, request: GenerationRequest, dims: Dimensions) -> GenerationResult:
        raise NotImplementedError


class HttpImageProvider(ImageProvider):
    """Provider reached through a JSON POST"""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None
    ) -> Any:
        """POST payload, raise UpstreamError on non-2xx, return decoded JSON"""
        response = await self.client.post(url, json=payload, headers=headers, params=params)

        if not response.is_success:
            raise UpstreamError(self.name, response.status_code, response.text)

        return response.json()
