# FILE: image_broker/services/normalizer.py
"""
Request normalization

Turns an untrusted request body into a GenerationRequest.
Only prompt and modelId can fail; every other field is clamped or
falls back to its default.
"""
import math
import random
from typing import Any, Mapping, Optional

from image_broker.models.generation import (
    GenerationRequest,
    MODEL_ROUTE,
    SUPPORTED_ASPECTS,
    MIN_RESOLUTION,
    MAX_RESOLUTION,
    MIN_CFG,
    MAX_CFG,
    MIN_STEPS,
    MAX_STEPS,
    MIN_SEED,
    MAX_SEED,
    MIN_IMAGES,
    MAX_IMAGES,
)
from image_broker.services.dimensions import round_half_up

DEFAULT_ASPECT = "1:1"
DEFAULT_RESOLUTION = 768
DEFAULT_CFG = 7
DEFAULT_STEPS = 30
DEFAULT_NUM_IMAGES = 4


class InvalidGenerationRequest(ValueError):
    """Request cannot be normalized; message is safe to show to the client"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _to_number(value: Any) -> Optional[float]:
    """Best-effort numeric coercion; None when value is not a finite number"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def clamp_number(value: Any, low: float, high: float, fallback: float) -> float:
    """Clamp into [low, high]; non-numeric input yields the fallback unchanged"""
    n = _to_number(value)
    if n is None:
        return fallback
    return min(high, max(low, n))


def random_seed() -> int:
    return random.randrange(MIN_SEED, MAX_SEED)


def normalize_generate_payload(body: Any, fallback_seed: Optional[int] = None) -> GenerationRequest:
    """
    Validate and normalize a raw /generate body.

    Args:
        body: Decoded JSON of any shape.
        fallback_seed: Seed used when the body has none (random if omitted).

    Raises:
        InvalidGenerationRequest: prompt missing or modelId unsupported.
    """
    payload: Mapping[str, Any] = body if isinstance(body, Mapping) else {}
    if fallback_seed is None:
        fallback_seed = random_seed()
    fallback_seed = min(MAX_SEED, max(MIN_SEED, int(fallback_seed)))

    prompt_raw = payload.get("prompt")
    prompt = prompt_raw.strip() if isinstance(prompt_raw, str) else ""
    if not prompt:
        raise InvalidGenerationRequest("Prompt is required")

    model_id = payload.get("modelId")
    if not isinstance(model_id, str) or model_id not in MODEL_ROUTE:
        shown = "" if model_id is None else model_id
        raise InvalidGenerationRequest(f"Unsupported modelId: {shown}")

    aspect = payload.get("aspect")
    if not isinstance(aspect, str) or aspect not in SUPPORTED_ASPECTS:
        aspect = DEFAULT_ASPECT

    resolution = round_half_up(
        clamp_number(payload.get("resolution"), MIN_RESOLUTION, MAX_RESOLUTION, DEFAULT_RESOLUTION)
    )
    cfg = clamp_number(payload.get("cfg"), MIN_CFG, MAX_CFG, DEFAULT_CFG)
    steps = round_half_up(clamp_number(payload.get("steps"), MIN_STEPS, MAX_STEPS, DEFAULT_STEPS))
    seed = int(math.floor(clamp_number(payload.get("seed"), MIN_SEED, MAX_SEED, fallback_seed)))
    num_images = round_half_up(
        clamp_number(payload.get("numImages"), MIN_IMAGES, MAX_IMAGES, DEFAULT_NUM_IMAGES)
    )

    style_raw = payload.get("style")
    style = style_raw.strip() if isinstance(style_raw, str) else ""

    return GenerationRequest(
        prompt=prompt,
        style=style or None,
        model_id=model_id,
        aspect=aspect,
        resolution=resolution,
        cfg=cfg,
        steps=steps,
        seed=seed,
        num_images=num_images,
        route=MODEL_ROUTE[model_id],
    )
