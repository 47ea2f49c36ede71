# FILE: tests/test_dispatcher.py
"""End-to-end dispatch: normalize, size, select, invoke"""
import httpx
import pytest

from image_broker.providers.base import UpstreamError
from image_broker.services.dispatcher import GenerationFailed, generate
from image_broker.services.normalizer import InvalidGenerationRequest


def _no_network(request):
    raise AssertionError("network must not be used")


@pytest.mark.asyncio
async def test_unconfigured_uses_mock(provider_settings):
    result = await generate(
        {"prompt": "cat", "modelId": "flux-pro", "numImages": 3, "aspect": "3:4", "resolution": 800},
        provider_settings=provider_settings(),
        fallback_seed=10,
    )

    assert result.provider == "mock"
    assert result.mocked is True
    assert len(result.images) == 3
    assert (result.seed, result.width, result.height) == (10, 600, 800)


@pytest.mark.asyncio
async def test_validation_error_skips_network(provider_settings, mock_client):
    async with mock_client(_no_network) as client:
        with pytest.raises(InvalidGenerationRequest, match="Prompt is required"):
            await generate(
                {"prompt": "", "modelId": "flux-pro"},
                client=client,
                provider_settings=provider_settings(fal_key="k"),
            )


@pytest.mark.asyncio
async def test_upstream_error_becomes_generic_failure(provider_settings, mock_client):
    def handler(request):
        return httpx.Response(500, text="stack trace with secrets")

    async with mock_client(handler) as client:
        with pytest.raises(GenerationFailed) as exc:
            await generate(
                {"prompt": "cat", "modelId": "flux-pro"},
                client=client,
                provider_settings=provider_settings(banana_url="https://banana.test/run"),
            )

    assert str(exc.value) == "Generation failed"
    assert exc.value.provider == "banana"
    assert isinstance(exc.value.__cause__, UpstreamError)
    assert "secrets" not in str(exc.value)


@pytest.mark.asyncio
async def test_network_error_becomes_generic_failure(provider_settings, mock_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(GenerationFailed):
            await generate(
                {"prompt": "cat", "modelId": "flux-pro"},
                client=client,
                provider_settings=provider_settings(fal_key="k"),
            )


@pytest.mark.asyncio
async def test_unparsable_upstream_body_becomes_generic_failure(provider_settings, mock_client):
    def handler(request):
        return httpx.Response(200, text="<html>not json</html>")

    async with mock_client(handler) as client:
        with pytest.raises(GenerationFailed):
            await generate(
                {"prompt": "cat", "modelId": "flux-pro"},
                client=client,
                provider_settings=provider_settings(google_api_key="g"),
            )


@pytest.mark.asyncio
async def test_override_without_credentials_fails_generically(provider_settings, mock_client):
    async with mock_client(_no_network) as client:
        with pytest.raises(GenerationFailed):
            await generate(
                {"prompt": "cat", "modelId": "flux-pro"},
                client=client,
                provider_settings=provider_settings(gen_provider="google"),
            )


@pytest.mark.asyncio
async def test_fal_override_without_key_is_demo(provider_settings, mock_client):
    async with mock_client(_no_network) as client:
        result = await generate(
            {"prompt": "cat", "modelId": "flux-schnell", "seed": 5},
            client=client,
            provider_settings=provider_settings(gen_provider="FAL"),
        )

    assert result.demo is True
    assert result.images == []
    assert result.seed == 5
    assert (result.width, result.height) == (768, 768)


@pytest.mark.asyncio
async def test_successful_upstream_call(provider_settings, mock_client):
    def handler(request):
        assert request.url.path == "/fal-ai/flux/dev"
        return httpx.Response(200, json={"images": [{"url": "https://fal.test/x.png"}]})

    async with mock_client(handler) as client:
        result = await generate(
            {"prompt": "cat", "modelId": "flux-dev", "seed": 9},
            client=client,
            provider_settings=provider_settings(fal_key="k"),
        )

    assert result.provider == "fal"
    assert [img.url for img in result.images] == ["https://fal.test/x.png"]
    assert result.seed == 9
