# FILE: image_broker/providers/banana.py
"""
Banana-style HTTP provider adapter

Deployments built on this pattern answer in a handful of shapes; all of
the common ones are scanned.
"""
import logging
from typing import Any, List, Optional

import httpx

from image_broker.models.generation import GenerationRequest, GenerationResult, GeneratedImage
from image_broker.providers.base import HttpImageProvider
from image_broker.providers.extract import as_list, collect_image_refs

logger = logging.getLogger(__name__)


def _top_level(key: str):
    def matcher(data: Any) -> List[Any]:
        return as_list(data.get(key)) if isinstance(data, dict) else []
    matcher.__name__ = f"top_level_{key}"
    return matcher


def _model_outputs(data: Any) -> List[Any]:
    """modelOutputs[].images[] and modelOutputs[].image_base64[]"""
    if not isinstance(data, dict):
        return []
    out = []
    for output in as_list(data.get("modelOutputs")):
        if isinstance(output, dict):
            out.extend(as_list(output.get("images")))
            out.extend(as_list(output.get("image_base64")))
    return out


def _single_image(data: Any) -> List[Any]:
    return [data.get("image")] if isinstance(data, dict) else []


BANANA_MATCHERS = (_top_level("images"), _top_level("output"), _model_outputs)
BANANA_FALLBACKS = (_single_image,)


class BananaProvider(HttpImageProvider):
    """Generic POST endpoint with flat generation fields"""

    name = "banana"

    def __init__(self, client: httpx.AsyncClient, url: str, api_key: Optional[str] = None):
        super().__init__(client)
        self.url = url
        self.api_key = api_key

    def build_payload(self, request: GenerationRequest, dims) -> dict:
        return {
            "prompt": request.full_prompt,
            "seed": request.seed,
            "steps": request.steps,
            "cfg": request.cfg,
            "width": dims.width,
            "height": dims.height,
            "num_images": request.num_images,
            "model": request.route,
        }

    async def invoke(self, request: GenerationRequest, dims) -> GenerationResult:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        data = await self.post_json(self.url, self.build_payload(request, dims), headers=headers)

        urls = collect_image_refs(data, BANANA_MATCHERS, fallbacks=BANANA_FALLBACKS)
        if not urls:
            logger.warning("Banana response contained no recognizable images")

        return GenerationResult(
            images=[GeneratedImage(url=u) for u in urls],
            seed=request.seed,
            width=dims.width,
            height=dims.height,
            provider=self.name
        )
