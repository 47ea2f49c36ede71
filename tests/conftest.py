# FILE: tests/conftest.py

import os
import sys
import tempfile
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Process settings are read once at import; point them at scratch dirs first
_scratch = Path(tempfile.mkdtemp(prefix="image-broker-tests-"))
os.environ["LOGS_DIR"] = str(_scratch / "logs")
os.environ["HISTORY_DIR"] = str(_scratch / "history")
os.environ["RATE_LIMIT_ENABLED"] = "false"

PROVIDER_ENV_VARS = (
    "GEN_PROVIDER",
    "FAL_KEY",
    "FAL_BASE_URL",
    "GOOGLE_API_KEY",
    "GOOGLE_IMAGE_MODEL",
    "GOOGLE_API_BASE",
    "BANANA_URL",
    "BANANA_KEY",
)

import httpx
import pytest

from image_broker.config import ProviderSettings


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch):
    """Every test starts with no provider credentials configured"""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def provider_settings():
    """Build a ProviderSettings snapshot that ignores any .env file"""
    def make(**overrides):
        return ProviderSettings(_env_file=None, **overrides)
    return make


@pytest.fixture
def mock_client():
    """AsyncClient factory backed by an in-process handler"""
    def make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return make


@pytest.fixture
def sample_payload():
    """Well-formed generate body"""
    return {
        "prompt": " neon tiger ",
        "style": " Cinematic ",
        "modelId": "flux-pro",
        "aspect": "16:9",
        "resolution": 1024,
        "cfg": 9,
        "steps": 40,
        "seed": 123,
        "numImages": 2,
    }
