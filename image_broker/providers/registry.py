# FILE: image_broker/providers/registry.py
"""
Provider selection and construction
"""
import logging
from typing import Optional

import httpx

from image_broker.config import ProviderSettings
from image_broker.providers.banana import BananaProvider
from image_broker.providers.base import ImageProvider
from image_broker.providers.fal import FalProvider
from image_broker.providers.google import GoogleImagenProvider
from image_broker.providers.mock import MockProvider

logger = logging.getLogger(__name__)

PROVIDER_NAMES = ("google", "banana", "fal", "mock")


def select_provider(settings: ProviderSettings) -> str:
    """
    Pick the provider for one request.

    Order: explicit GEN_PROVIDER override, then the first configured
    credential (google, banana, fal), else mock.
    """
    override = (settings.gen_provider or "").lower()
    if override in PROVIDER_NAMES:
        return override
    if override:
        logger.warning(f"Ignoring unknown GEN_PROVIDER={settings.gen_provider!r}")

    if settings.google_api_key:
        return "google"
    if settings.banana_url:
        return "banana"
    if settings.fal_key:
        return "fal"
    return "mock"


class ProviderConfigError(RuntimeError):
    """Provider chosen by override lacks required configuration"""


def build_provider(name: str, settings: ProviderSettings, client: Optional[httpx.AsyncClient]) -> ImageProvider:
    """Instantiate the adapter for `name` bound to this settings snapshot"""
    if name == "mock":
        return MockProvider()

    if client is None:
        raise ValueError(f"Provider {name} needs an HTTP client")

    if name == "fal":
        return FalProvider(client, api_key=settings.fal_key, base_url=settings.fal_base_url)

    if name == "google":
        if not settings.google_api_key:
            raise ProviderConfigError("Missing GOOGLE_API_KEY")
        return GoogleImagenProvider(
            client,
            api_key=settings.google_api_key,
            model=settings.google_image_model,
            base_url=settings.google_api_base
        )

    if name == "banana":
        if not settings.banana_url:
            raise ProviderConfigError("Missing BANANA_URL")
        return BananaProvider(client, url=settings.banana_url, api_key=settings.banana_key)

    raise ValueError(f"Unknown image provider: {name}")
