# FILE: image_broker/providers/google.py
"""
Google Imagen provider adapter

The generateImages payload and response fields differ between model
releases, so sizing hints are always sent and several base64 key
names are accepted on the way back.
"""
import logging
from typing import Any, List

import httpx

from image_broker.models.generation import GenerationRequest, GenerationResult, GeneratedImage
from image_broker.providers.base import HttpImageProvider
from image_broker.providers.extract import (
    as_list,
    collect_image_refs,
    first_present,
    png_data_uri,
)
from image_broker.services.dimensions import Dimensions

logger = logging.getLogger(__name__)

BASE64_PATHS = (
    ("image", "base64Data"),
    ("image", "bytesBase64Encoded"),
    ("base64Data",),
    ("bytesBase64Encoded",),
    ("content",),
)


def _explicit_base64(value: Any) -> Any:
    # values under base64 keys are wrapped without the head check
    if isinstance(value, str) and value and not value.startswith(("http://", "https://", "data:")):
        return png_data_uri(value)
    return value


def _base64_entries(data: Any) -> List[Any]:
    """images[] entries carrying base64 under one of the known keys"""
    if not isinstance(data, dict):
        return []
    return [_explicit_base64(first_present(entry, BASE64_PATHS)) for entry in as_list(data.get("images"))]


def _url_entries(data: Any) -> List[Any]:
    """images[] entries given as bare URLs or {url}"""
    if not isinstance(data, dict):
        return []
    out = []
    for entry in as_list(data.get("images")):
        if isinstance(entry, str):
            out.append(entry if entry.startswith("http") else None)
        elif isinstance(entry, dict):
            out.append(entry.get("url"))
    return out


def _predictions(data: Any) -> List[Any]:
    """Vertex-style predictions[].bytesBase64Encoded"""
    if not isinstance(data, dict):
        return []
    return [_explicit_base64(first_present(p, BASE64_PATHS)) for p in as_list(data.get("predictions"))]


GOOGLE_MATCHERS = (_base64_entries, _url_entries, _predictions)


class GoogleImagenProvider(HttpImageProvider):
    """Google AI Studio Images API"""

    name = "google"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str = "imagen-3.0-generate-002",
        base_url: str = "https://generativelanguage.googleapis.com"
    ):
        super().__init__(client)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        logger.info(f"Google image provider: model={model}")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateImages"

    def build_payload(self, request: GenerationRequest, dims: Dimensions) -> dict:
        return {
            "prompt": {"text": request.full_prompt},
            "imageGenerationConfig": {
                "numberOfImages": request.num_images,
                "seed": request.seed,
                "widthPx": dims.width,
                "heightPx": dims.height,
                # ignored by some models
                "guidanceStrength": request.cfg,
                "samplingSteps": request.steps,
            },
        }

    async def invoke(self, request: GenerationRequest, dims: Dimensions) -> GenerationResult:
        data = await self.post_json(
            self.endpoint,
            self.build_payload(request, dims),
            params={"key": self.api_key}
        )

        urls = collect_image_refs(data, GOOGLE_MATCHERS)
        if not urls:
            logger.warning("Google Images API returned no recognizable images")

        return GenerationResult(
            images=[GeneratedImage(url=u) for u in urls],
            seed=request.seed,
            width=dims.width,
            height=dims.height,
            provider=self.name
        )
