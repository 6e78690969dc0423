"""RGB <-> HSV conversion for color dicts."""

import colorsys
from typing import Dict, Tuple


def rgb_to_hsv(color: Dict[str, int]) -> Tuple[float, float, float]:
    """
    Convert {r, g, b} (0-255) to (hue 0-360, saturation 0-1, value 0-1).
    """
    h, s, v = colorsys.rgb_to_hsv(color["r"] / 255.0, color["g"] / 255.0, color["b"] / 255.0)
    return (h * 360.0, s, v)


def hsv_to_rgb(hue: float, saturation: float, value: float) -> Dict[str, int]:
    """
    Convert (hue 0-360, saturation 0-1, value 0-1) to {r, g, b} (0-255).
    """
    r, g, b = colorsys.hsv_to_rgb((hue % 360.0) / 360.0, saturation, value)
    return {
        "r": int(round(r * 255)),
        "g": int(round(g * 255)),
        "b": int(round(b * 255)),
    }
