# FILE: image_broker/models/generation.py
"""
Canonical generation models
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Aspect",
    "SUPPORTED_ASPECTS",
    "MODEL_ROUTE",
    "GenerationRequest",
    "GeneratedImage",
    "GenerationResult",
]

Aspect = Literal["1:1", "3:4", "4:3", "16:9"]

SUPPORTED_ASPECTS = ("1:1", "3:4", "4:3", "16:9")

# modelId -> provider route. Also the allow-list for modelId.
MODEL_ROUTE = {
    "flux-pro": "fal-ai/flux-pro",
    "flux-dev": "fal-ai/flux/dev",
    "flux-schnell": "fal-ai/flux-schnell",
}

MIN_RESOLUTION = 512
MAX_RESOLUTION = 1536
MIN_CFG = 1
MAX_CFG = 20
MIN_STEPS = 4
MAX_STEPS = 60
MIN_SEED = 0
MAX_SEED = 1_000_000
MIN_IMAGES = 1
MAX_IMAGES = 6


class GenerationRequest(BaseModel):
    """Validated generation request, independent of any provider"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    prompt: str = Field(min_length=1)
    style: Optional[str] = None
    model_id: str = Field(alias="modelId")
    aspect: Aspect = "1:1"
    resolution: int = Field(default=768, ge=MIN_RESOLUTION, le=MAX_RESOLUTION)
    cfg: float = Field(default=7, ge=MIN_CFG, le=MAX_CFG)
    steps: int = Field(default=30, ge=MIN_STEPS, le=MAX_STEPS)
    seed: int = Field(ge=MIN_SEED, le=MAX_SEED)
    num_images: int = Field(default=4, alias="numImages", ge=MIN_IMAGES, le=MAX_IMAGES)
    route: str

    @property
    def full_prompt(self) -> str:
        """Prompt as sent upstream, with the style appended in lower case"""
        suffix = f", {self.style.lower()}" if self.style else ""
        return f"{self.prompt}{suffix}".strip()


class GeneratedImage(BaseModel):
    """One generated image reference (http URL or data URI)"""
    model_config = ConfigDict(frozen=True)

    url: str


class GenerationResult(BaseModel):
    """Provider-independent generation result"""

    model_config = ConfigDict(frozen=True)

    images: List[GeneratedImage] = Field(default_factory=list)
    seed: int
    width: int
    height: int
    provider: str
    mocked: bool = False
    demo: bool = False
