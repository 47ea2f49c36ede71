# FILE: image_broker/providers/fal.py
"""
fal.ai provider adapter (primary backend)
"""
import logging
import math
from typing import Any, List, Optional

import httpx

from image_broker.models.generation import GenerationRequest, GenerationResult, GeneratedImage
from image_broker.providers.base import HttpImageProvider
from image_broker.providers.extract import any_string_ref, as_list, collect_image_refs
from image_broker.services.dimensions import Dimensions

logger = logging.getLogger(__name__)


def _entry_url(entry: Any) -> Any:
    return entry if isinstance(entry, str) else (entry.get("url") if isinstance(entry, dict) else None)


def _plural_images(data: Any) -> List[Any]:
    if not isinstance(data, dict):
        return []
    return [_entry_url(entry) for entry in as_list(data.get("images"))]


def _singular_image(data: Any) -> List[Any]:
    # `images` wins whenever it is a list, even an empty one
    if not isinstance(data, dict) or isinstance(data.get("images"), list):
        return []
    return [_entry_url(data.get("image"))]


FAL_MATCHERS = (_plural_images, _singular_image)


def _response_seed(data: Any, fallback: int) -> int:
    seed = data.get("seed") if isinstance(data, dict) else None
    if isinstance(seed, bool) or not isinstance(seed, (int, float)):
        return fallback
    if not math.isfinite(seed) or seed != int(seed):
        return fallback
    return int(seed)


class FalProvider(HttpImageProvider):
    """fal.ai synchronous REST endpoint"""

    name = "fal"

    def __init__(self, client: httpx.AsyncClient, api_key: Optional[str], base_url: str = "https://fal.run"):
        super().__init__(client)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def build_payload(self, request: GenerationRequest, dims: Dimensions) -> dict:
        return {
            "prompt": request.full_prompt,
            "seed": request.seed,
            "num_inference_steps": request.steps,
            "guidance_scale": request.cfg,
            "width": dims.width,
            "height": dims.height,
            "num_images": request.num_images,
            "enable_safety_checker": True,
        }

    async def invoke(self, request: GenerationRequest, dims: Dimensions) -> GenerationResult:
        if not self.api_key:
            logger.warning("FAL_KEY not configured; returning demo result")
            return GenerationResult(
                images=[],
                seed=request.seed,
                width=dims.width,
                height=dims.height,
                provider=self.name,
                demo=True
            )

        data = await self.post_json(
            f"{self.base_url}/{request.route}",
            self.build_payload(request, dims),
            headers={"Authorization": f"Key {self.api_key}"}
        )

        urls = collect_image_refs(data, FAL_MATCHERS, to_ref=any_string_ref)
        return GenerationResult(
            images=[GeneratedImage(url=u) for u in urls],
            seed=_response_seed(data, request.seed),
            width=dims.width,
            height=dims.height,
            provider=self.name
        )
