"""
Color manipulation and harmony helpers.

Operates in HSL for lightness, saturation and hue adjustments and in RGB
for interpolation. All functions return new colors; inputs are immutable.
"""

from typing import List, Sequence

from palette_engine.services.colors.color_model import HSLColor, RGBColor


def adjust_lightness(color: RGBColor, amount: float) -> RGBColor:
    """Shift lightness by amount (percentage points), clamped to [0, 100]."""
    hsl = color.to_hsl()
    return HSLColor(hsl.hue, hsl.saturation, hsl.lightness + amount).to_rgb()


def adjust_saturation(color: RGBColor, amount: float) -> RGBColor:
    """Shift saturation by amount (percentage points), clamped to [0, 100]."""
    hsl = color.to_hsl()
    return HSLColor(hsl.hue, hsl.saturation + amount, hsl.lightness).to_rgb()


def adjust_hue(color: RGBColor, degrees: float) -> RGBColor:
    """Rotate hue by degrees, wrapping around the color wheel."""
    hsl = color.to_hsl()
    return HSLColor(hsl.hue + degrees, hsl.saturation, hsl.lightness).to_rgb()


def lighter(color: RGBColor, amount: float = 10) -> RGBColor:
    return adjust_lightness(color, amount)


def darker(color: RGBColor, amount: float = 10) -> RGBColor:
    return adjust_lightness(color, -amount)


def more_saturated(color: RGBColor, amount: float = 10) -> RGBColor:
    return adjust_saturation(color, amount)


def less_saturated(color: RGBColor, amount: float = 10) -> RGBColor:
    return adjust_saturation(color, -amount)


def complementary(color: RGBColor) -> RGBColor:
    return adjust_hue(color, 180)


def triadic(color: RGBColor) -> List[RGBColor]:
    return [color, adjust_hue(color, 120), adjust_hue(color, 240)]


def tetradic(color: RGBColor) -> List[RGBColor]:
    return [color, adjust_hue(color, 90), adjust_hue(color, 180), adjust_hue(color, 270)]


def analogous(color: RGBColor) -> List[RGBColor]:
    return [adjust_hue(color, -30), color, adjust_hue(color, 30)]


def split_complementary(color: RGBColor) -> List[RGBColor]:
    return [color, adjust_hue(color, 150), adjust_hue(color, 210)]


def interpolate(start: RGBColor, end: RGBColor, fraction: float) -> RGBColor:
    """Linear RGB blend; fraction is clamped to [0, 1]."""
    t = max(0.0, min(1.0, fraction))
    return RGBColor(
        start.red + (end.red - start.red) * t,
        start.green + (end.green - start.green) * t,
        start.blue + (end.blue - start.blue) * t,
    )


def smooth_gradient(colors: Sequence[RGBColor], steps: int = 10) -> List[RGBColor]:
    """
    Interpolate a multi-stop gradient.

    Each segment between consecutive stops contributes steps // segments
    colors (at least one); the last stop is always appended.
    """
    if len(colors) < 2:
        return list(colors)

    segment_count = len(colors) - 1
    steps_per_segment = max(1, steps // segment_count)

    result = []
    for start, end in zip(colors[:-1], colors[1:]):
        for step in range(steps_per_segment):
            result.append(interpolate(start, end, step / steps_per_segment))

    result.append(colors[-1])
    return result
