# FILE: image_broker/models/history.py
"""
History models
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

__all__ = ["HistoryItemIn", "HistoryWriteRequest", "HistoryItem"]


class HistoryItemIn(BaseModel):
    """One generated image to remember"""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    prompt: str
    style: Optional[str] = None
    model_id: str = Field(alias="modelId")
    aspect: str
    seed: int
    width: int
    height: int
    image_url: str = Field(alias="imageUrl")
    created_at: Optional[int] = Field(default=None, alias="createdAt", description="ms since epoch")


class HistoryWriteRequest(BaseModel):
    """Batch of history items for one collection"""

    model_config = ConfigDict(populate_by_name=True)

    collection_id: str = Field(alias="collectionId", min_length=1)
    items: List[HistoryItemIn] = Field(min_length=1)


class HistoryItem(BaseModel):
    """Stored history record"""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: str
    collection_id: str = Field(alias="collectionId")
    created_at: int = Field(alias="createdAt")
    prompt: str = ""
    style: Optional[str] = None
    model_id: str = Field(default="", alias="modelId")
    aspect: str = "1:1"
    seed: int = 0
    width: int = 0
    height: int = 0
    image_url: str = Field(default="", alias="imageUrl")
