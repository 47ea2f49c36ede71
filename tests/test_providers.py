# FILE: tests/test_providers.py
"""Provider adapters against in-process upstream fakes"""
import json
from urllib.parse import unquote

import httpx
import pytest

from image_broker.providers.banana import BananaProvider
from image_broker.providers.base import UpstreamError
from image_broker.providers.fal import FalProvider
from image_broker.providers.google import GoogleImagenProvider
from image_broker.providers.mock import MockProvider, make_placeholder_svg
from image_broker.services.dimensions import dims_from_aspect
from image_broker.services.normalizer import normalize_generate_payload


@pytest.fixture
def request_and_dims(sample_payload):
    req = normalize_generate_payload(sample_payload)
    return req, dims_from_aspect(req.aspect, req.resolution)


def _svg(url: str) -> str:
    prefix = "data:image/svg+xml;utf8,"
    assert url.startswith(prefix)
    return unquote(url[len(prefix):])


@pytest.mark.asyncio
async def test_mock_provider_is_deterministic(request_and_dims):
    req, dims = request_and_dims
    provider = MockProvider()

    first = await provider.invoke(req, dims)
    second = await provider.invoke(req, dims)

    assert first == second
    assert first.mocked is True
    assert first.provider == "mock"
    assert len(first.images) == req.num_images
    assert (first.seed, first.width, first.height) == (123, 1024, 576)

    svgs = [_svg(img.url) for img in first.images]
    assert "Seed: 123" in svgs[0]
    assert "Seed: 124" in svgs[1]
    assert "width='1024'" in svgs[0] and "height='576'" in svgs[0]
    assert "neon tiger, cinematic" in svgs[0]


def test_placeholder_escapes_and_truncates_text():
    svg = unquote(make_placeholder_svg(64, 64, 1, "a<b & c" + "x" * 200).split(",", 1)[1])
    assert "a&lt;b &amp; c" in svg
    assert "x" * 73 in svg
    assert "x" * 74 not in svg


@pytest.mark.asyncio
async def test_fal_builds_payload_and_normalizes_images(request_and_dims, mock_client):
    req, dims = request_and_dims
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"images": [{"url": "https://fal.test/1.png"}, "https://fal.test/2.png", {}], "seed": 777},
        )

    async with mock_client(handler) as client:
        result = await FalProvider(client, api_key="fal-secret").invoke(req, dims)

    assert seen["url"] == "https://fal.run/fal-ai/flux-pro"
    assert seen["auth"] == "Key fal-secret"
    assert seen["body"] == {
        "prompt": "neon tiger, cinematic",
        "seed": 123,
        "num_inference_steps": 40,
        "guidance_scale": 9.0,
        "width": 1024,
        "height": 576,
        "num_images": 2,
        "enable_safety_checker": True,
    }
    assert [img.url for img in result.images] == ["https://fal.test/1.png", "https://fal.test/2.png"]
    assert result.seed == 777
    assert result.provider == "fal"
    assert result.demo is False


@pytest.mark.asyncio
async def test_fal_keeps_request_seed_when_upstream_omits_it(request_and_dims, mock_client):
    req, dims = request_and_dims

    def handler(request):
        return httpx.Response(200, json={"image": {"url": "https://fal.test/only.png"}, "seed": "abc"})

    async with mock_client(handler) as client:
        result = await FalProvider(client, api_key="k").invoke(req, dims)

    assert result.seed == 123
    assert [img.url for img in result.images] == ["https://fal.test/only.png"]


@pytest.mark.asyncio
async def test_fal_without_key_returns_demo_without_network(request_and_dims, mock_client):
    req, dims = request_and_dims

    def handler(request):
        raise AssertionError("network must not be used")

    async with mock_client(handler) as client:
        result = await FalProvider(client, api_key=None).invoke(req, dims)

    assert result.demo is True
    assert result.images == []
    assert (result.seed, result.width, result.height) == (123, 1024, 576)


@pytest.mark.asyncio
async def test_google_payload_and_base64_images(request_and_dims, mock_client):
    req, dims = request_and_dims
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"images": [{"image": {"bytesBase64Encoded": "QUJD"}}, {"content": ""}]})

    async with mock_client(handler) as client:
        provider = GoogleImagenProvider(client, api_key="g-key", model="imagen-test")
        result = await provider.invoke(req, dims)

    assert seen["path"] == "/v1beta/models/imagen-test:generateImages"
    assert seen["key"] == "g-key"
    assert seen["body"] == {
        "prompt": {"text": "neon tiger, cinematic"},
        "imageGenerationConfig": {
            "numberOfImages": 2,
            "seed": 123,
            "widthPx": 1024,
            "heightPx": 576,
            "guidanceStrength": 9.0,
            "samplingSteps": 40,
        },
    }
    assert [img.url for img in result.images] == ["data:image/png;base64,QUJD"]
    assert result.provider == "google"
    assert result.seed == 123


@pytest.mark.asyncio
async def test_banana_payload_headers_and_images(request_and_dims, mock_client):
    req, dims = request_and_dims
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"modelOutputs": [{"images": ["https://banana.test/a.png"]}]})

    async with mock_client(handler) as client:
        provider = BananaProvider(client, url="https://banana.test/run", api_key="b-key")
        result = await provider.invoke(req, dims)

    assert seen["url"] == "https://banana.test/run"
    assert seen["auth"] == "Bearer b-key"
    assert seen["body"] == {
        "prompt": "neon tiger, cinematic",
        "seed": 123,
        "steps": 40,
        "cfg": 9.0,
        "width": 1024,
        "height": 576,
        "num_images": 2,
        "model": "fal-ai/flux-pro",
    }
    assert [img.url for img in result.images] == ["https://banana.test/a.png"]


@pytest.mark.asyncio
async def test_banana_without_key_sends_no_auth(request_and_dims, mock_client):
    req, dims = request_and_dims
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={})

    async with mock_client(handler) as client:
        result = await BananaProvider(client, url="https://banana.test/run").invoke(req, dims)

    assert seen["auth"] is None
    assert result.images == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "make_provider",
    [
        lambda c: FalProvider(c, api_key="k"),
        lambda c: GoogleImagenProvider(c, api_key="k"),
        lambda c: BananaProvider(c, url="https://banana.test/run"),
    ],
)
async def test_non_2xx_raises_upstream_error(request_and_dims, mock_client, make_provider):
    req, dims = request_and_dims

    def handler(request):
        return httpx.Response(503, text="model overloaded")

    async with mock_client(handler) as client:
        with pytest.raises(UpstreamError) as exc:
            await make_provider(client).invoke(req, dims)

    assert exc.value.status == 503
    assert exc.value.body == "model overloaded"
    assert "503" in str(exc.value)


@pytest.mark.asyncio
async def test_fal_passes_through_non_http_references(request_and_dims, mock_client):
    req, dims = request_and_dims

    def handler(request):
        return httpx.Response(200, json={"images": [{"url": "/storage/out/1.png"}, "https://fal.test/2.png"]})

    async with mock_client(handler) as client:
        result = await FalProvider(client, api_key="k").invoke(req, dims)

    assert [img.url for img in result.images] == ["/storage/out/1.png", "https://fal.test/2.png"]
