# FILE: image_broker/services/dimensions.py
"""
Aspect ratio -> pixel dimensions
"""
import math
from dataclasses import dataclass

ASPECT_RATIOS = {
    "1:1": (1, 1),
    "3:4": (3, 4),
    "4:3": (4, 3),
    "16:9": (16, 9),
}

MIN_SIDE = 64


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positives"""
    return int(math.floor(value + 0.5))


def round8(n: float) -> int:
    """Nearest multiple of 8, never below 64"""
    return max(MIN_SIDE, round_half_up(n / 8) * 8)


def dims_from_aspect(aspect: str, resolution: int) -> Dimensions:
    """
    Resolve output size.

    `resolution` is the longer side; the shorter side follows the ratio.
    Both sides are snapped to multiples of 8.
    """
    w_ratio, h_ratio = ASPECT_RATIOS[aspect]
    long_is_width = w_ratio >= h_ratio
    long_side = resolution
    short_side = round_half_up(resolution * min(w_ratio, h_ratio) / max(w_ratio, h_ratio))

    width = long_side if long_is_width else short_side
    height = short_side if long_is_width else long_side
    return Dimensions(width=round8(width), height=round8(height))
