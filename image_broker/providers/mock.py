# FILE: image_broker/providers/mock.py
"""
Offline placeholder provider

Renders one gradient SVG per requested image, coloured by seed + index.
No network, no state.
"""
import logging
from urllib.parse import quote

from image_broker.models.generation import GenerationRequest, GenerationResult, GeneratedImage
from image_broker.providers.base import ImageProvider
from image_broker.services.dimensions import Dimensions

logger = logging.getLogger(__name__)

MAX_LABEL_CHARS = 80


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;")


def make_placeholder_svg(width: int, height: int, seed: int, text: str) -> str:
    """Self-contained SVG data URI showing the seed and a prompt excerpt"""
    hue1 = seed % 360
    hue2 = (seed * 3) % 360
    label = _escape(text[:MAX_LABEL_CHARS])
    svg = (
        "<?xml version='1.0' encoding='UTF-8'?>"
        f"<svg xmlns='http://www.w3.org/2000/svg' width='{width}' height='{height}'>"
        "<defs>"
        "<linearGradient id='g' x1='0' y1='0' x2='1' y2='1'>"
        f"<stop offset='0%' stop-color='hsl({hue1} 75% 52%)'/>"
        f"<stop offset='100%' stop-color='hsl({hue2} 75% 42%)'/>"
        "</linearGradient>"
        "</defs>"
        "<rect width='100%' height='100%' fill='url(#g)'/>"
        "<text x='12' y='28' font-family='system-ui, sans-serif' font-size='14' "
        f"fill='white' opacity='.9'>Seed: {seed}</text>"
        "<text x='12' y='48' font-family='system-ui, sans-serif' font-size='12' "
        f"fill='white' opacity='.8'>{label}</text>"
        "</svg>"
    )
    return "data:image/svg+xml;utf8," + quote(svg, safe="!~*'()")


class MockProvider(ImageProvider):
    """Deterministic offline provider used when nothing is configured"""

    name = "mock"

    async def invoke(self, request: GenerationRequest, dims: Dimensions) -> GenerationResult:
        text = request.full_prompt or "Preview"
        logger.debug(f"Mock provider: {request.num_images} placeholder(s) seed={request.seed}")

        images = [
            GeneratedImage(url=make_placeholder_svg(dims.width, dims.height, request.seed + i, text))
            for i in range(request.num_images)
        ]

        return GenerationResult(
            images=images,
            seed=request.seed,
            width=dims.width,
            height=dims.height,
            provider=self.name,
            mocked=True
        )
