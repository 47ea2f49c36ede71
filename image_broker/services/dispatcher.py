# FILE: image_broker/services/dispatcher.py
"""
Generation dispatcher

normalize -> dimensions -> select provider -> invoke adapter.
Single pass: no retry, no fallback to another provider.
"""
import logging
import time
from typing import Any, Optional

import httpx

from image_broker.config import ProviderSettings, get_settings, load_provider_settings
from image_broker.models.generation import GenerationResult
from image_broker.providers.base import UpstreamError
from image_broker.providers.registry import ProviderConfigError, build_provider, select_provider
from image_broker.services.correlation import generate_correlation_id
from image_broker.services.dimensions import dims_from_aspect
from image_broker.services.normalizer import normalize_generate_payload
from image_broker.services.telemetry import record_event

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Generation failed"


class GenerationFailed(RuntimeError):
    """Upstream or configuration failure; the message is safe for clients"""

    def __init__(self, provider: str):
        super().__init__(GENERIC_FAILURE)
        self.provider = provider


async def generate(
    body: Any,
    *,
    client: Optional[httpx.AsyncClient] = None,
    provider_settings: Optional[ProviderSettings] = None,
    fallback_seed: Optional[int] = None,
    correlation_id: Optional[str] = None
) -> GenerationResult:
    """
    Run one generation request end to end.

    Raises:
        InvalidGenerationRequest: body failed validation (no upstream call made).
        GenerationFailed: provider failed; details are logged, not returned.
    """
    correlation_id = correlation_id or generate_correlation_id()
    request = normalize_generate_payload(body, fallback_seed=fallback_seed)
    dims = dims_from_aspect(request.aspect, request.resolution)

    settings = provider_settings or load_provider_settings()
    provider_name = select_provider(settings)
    logger.info(
        f"[{correlation_id}] Generating with {provider_name}: model={request.model_id} "
        f"{dims.width}x{dims.height} n={request.num_images} seed={request.seed}"
    )

    start = time.perf_counter()
    try:
        if client is None and provider_name != "mock":
            async with httpx.AsyncClient(timeout=get_settings().provider_timeout) as owned:
                result = await build_provider(provider_name, settings, owned).invoke(request, dims)
        else:
            result = await build_provider(provider_name, settings, client).invoke(request, dims)
    except UpstreamError as e:
        logger.error(f"[{correlation_id}] {provider_name} returned {e.status}: {e.body}")
        record_event("generation_failed", provider=provider_name, status=e.status, correlation_id=correlation_id)
        raise GenerationFailed(provider_name) from e
    except (httpx.HTTPError, ValueError, ProviderConfigError) as e:
        logger.error(f"[{correlation_id}] {provider_name} failed: {e!r}", exc_info=True)
        record_event("generation_failed", provider=provider_name, status=None, correlation_id=correlation_id)
        raise GenerationFailed(provider_name) from e

    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.info(f"[{correlation_id}] {provider_name} returned {len(result.images)} image(s) in {duration_ms}ms")
    record_event(
        "generation",
        provider=provider_name,
        model_id=request.model_id,
        images=len(result.images),
        demo=result.demo,
        duration_ms=duration_ms,
        correlation_id=correlation_id
    )
    return result
