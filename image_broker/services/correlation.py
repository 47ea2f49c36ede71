# FILE: image_broker/services/correlation.py
"""
Correlation ID utilities
"""
import re
import uuid
from typing import Optional

_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def generate_correlation_id() -> str:
    """Generate unique correlation ID"""
    return str(uuid.uuid4())


def get_correlation_id(header_value: Optional[str] = None) -> str:
    """Use the caller's X-Request-ID when it is log-safe, else a fresh one"""
    if header_value and _SAFE_ID.match(header_value):
        return header_value
    return generate_correlation_id()
