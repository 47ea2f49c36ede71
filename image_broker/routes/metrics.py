# FILE: image_broker/routes/metrics.py
"""
Metrics endpoint
"""
from fastapi import APIRouter

from image_broker.services.telemetry import get_telemetry_summary

router = APIRouter()


@router.get("")
async def get_metrics():
    """In-memory telemetry summary"""
    return get_telemetry_summary()
