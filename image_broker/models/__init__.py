# FILE: image_broker/models/__init__.py
"""
Pydantic models for request/response validation
"""
from image_broker.models.generation import *
from image_broker.models.history import *
