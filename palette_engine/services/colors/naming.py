"""
Display names for extracted colors.

A coarse, hue-ring based vocabulary: enough to label a swatch, not a
full color-naming dictionary.
"""

from palette_engine.services.colors.color_model import RGBColor

# Color bin definitions
BIN_RING = ["red", "orange", "yellow", "green", "teal", "blue", "purple", "pink"]  # 8 bins on hue ring
ALL_BINS = BIN_RING + ["brown", "black", "white", "gray"]

# Bin boundaries in degrees (upper bound exclusive); red wraps around 0
_HUE_EDGES = [
    (15.0, "red"),
    (45.0, "orange"),
    (70.0, "yellow"),
    (160.0, "green"),
    (195.0, "teal"),
    (260.0, "blue"),
    (290.0, "purple"),
    (340.0, "pink"),
    (360.0, "red"),
]


def hue_to_bin(h_deg: float) -> str:
    """Map hue degree (0-360) to its color bin on the hue ring."""
    h = h_deg % 360
    for upper, name in _HUE_EDGES:
        if h < upper:
            return name
    return "red"


def color_family(rgb: RGBColor) -> str:
    """
    Classify a color into one of ALL_BINS.

    Very dark, very light and low-saturation colors are neutrals; dark
    oranges and yellows read as brown.
    """
    hsl = rgb.to_hsl()
    if hsl.lightness < 12:
        return "black"
    if hsl.lightness > 92:
        return "white"
    if hsl.saturation < 12:
        return "gray"

    family = hue_to_bin(hsl.hue)
    if family in ("orange", "yellow") and hsl.lightness < 40:
        return "brown"
    return family


def describe_color(rgb: RGBColor) -> str:
    """Human-readable name such as 'Dark Blue' or 'Gray'."""
    family = color_family(rgb)
    if family in ("black", "white"):
        return family.title()

    lightness = rgb.to_hsl().lightness
    if lightness >= 70:
        return f"Light {family.title()}"
    if lightness <= 30:
        return f"Dark {family.title()}"
    return family.title()
