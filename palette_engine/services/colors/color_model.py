"""
Color Model

RGB and HSL value objects, hex formatting and parsing, and the public
ExtractedColor result type. Derived representations (hex, HSL of an RGB
color, RGB of an HSL color) are computed on demand and never stored.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from palette_engine.utils.ids import generate_color_id


def _clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]; NaN maps to lo."""
    if math.isnan(value):
        return lo
    return lo if value < lo else hi if value > hi else value


def _wrap_hue(value: float) -> float:
    """Wrap degrees into [0, 360); non-finite input maps to 0."""
    if not math.isfinite(value):
        return 0.0
    hue = value % 360.0
    # Tiny negative inputs round up to exactly 360.0
    return 0.0 if hue >= 360.0 else hue


@dataclass(frozen=True)
class RGBColor:
    """RGB color with channels clamped to [0, 255]."""
    red: float
    green: float
    blue: float

    def __post_init__(self):
        object.__setattr__(self, "red", _clamp(float(self.red), 0.0, 255.0))
        object.__setattr__(self, "green", _clamp(float(self.green), 0.0, 255.0))
        object.__setattr__(self, "blue", _clamp(float(self.blue), 0.0, 255.0))

    @classmethod
    def from_hex(cls, hex_color: str) -> "RGBColor":
        """
        Parse a hex color string.

        Accepts '#RGB', '#RRGGBB' and '#AARRGGBB' (alpha is ignored), with or
        without the leading '#', case-insensitive.

        Raises:
            ValueError: If the string is not a valid hex color
        """
        digits = hex_color.strip().lstrip("#")
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        elif len(digits) == 8:
            digits = digits[2:]
        if len(digits) != 6:
            raise ValueError(f"Invalid hex color: {hex_color!r}")
        try:
            r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            raise ValueError(f"Invalid hex color: {hex_color!r}")
        return cls(r, g, b)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    def to_hex(self) -> str:
        """Uppercase '#RRGGBB', each channel rounded to the nearest integer."""
        r, g, b = (int(round(c)) for c in self.as_tuple())
        return f"#{r:02X}{g:02X}{b:02X}"

    @property
    def hex_code(self) -> str:
        return self.to_hex()

    def to_hsl(self) -> "HSLColor":
        """
        Convert to HSL.

        Hue is reported as 0 for achromatic colors.
        """
        r = self.red / 255.0
        g = self.green / 255.0
        b = self.blue / 255.0

        c_max = max(r, g, b)
        c_min = min(r, g, b)
        delta = c_max - c_min
        lightness = (c_max + c_min) / 2

        if delta == 0:
            return HSLColor(0.0, 0.0, lightness * 100)

        if lightness > 0.5:
            saturation = delta / (2 - c_max - c_min)
        else:
            saturation = delta / (c_max + c_min)

        if c_max == r:
            hue = (g - b) / delta + (6 if g < b else 0)
        elif c_max == g:
            hue = (b - r) / delta + 2
        else:
            hue = (r - g) / delta + 4
        hue /= 6

        return HSLColor(hue * 360, saturation * 100, lightness * 100)

    @property
    def hsl(self) -> "HSLColor":
        return self.to_hsl()

    @property
    def relative_luminance(self) -> float:
        """WCAG relative luminance (sRGB linearised, BT.709 weights)."""
        def linearize(value: float) -> float:
            return value / 12.92 if value <= 0.03928 else ((value + 0.055) / 1.055) ** 2.4

        r, g, b = (linearize(c / 255.0) for c in self.as_tuple())
        return 0.2126 * r + 0.7152 * g + 0.0722 * b

    @property
    def contrasting_text_color(self) -> "RGBColor":
        """Black on light colors, white on dark ones."""
        if self.relative_luminance > 0.5:
            return RGBColor(0, 0, 0)
        return RGBColor(255, 255, 255)


@dataclass(frozen=True)
class HSLColor:
    """HSL color: hue in [0, 360), saturation and lightness in [0, 100]."""
    hue: float
    saturation: float
    lightness: float

    def __post_init__(self):
        object.__setattr__(self, "hue", _wrap_hue(float(self.hue)))
        object.__setattr__(self, "saturation", _clamp(float(self.saturation), 0.0, 100.0))
        object.__setattr__(self, "lightness", _clamp(float(self.lightness), 0.0, 100.0))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.hue, self.saturation, self.lightness)

    def to_rgb(self) -> RGBColor:
        h = self.hue / 360.0
        s = self.saturation / 100.0
        l = self.lightness / 100.0

        if s == 0:
            gray = l * 255
            return RGBColor(gray, gray, gray)

        c = (1 - abs(2 * l - 1)) * s
        x = c * (1 - abs((h * 6) % 2 - 1))
        m = l - c / 2

        sextant = int(h * 6)
        if sextant == 0:
            r, g, b = c, x, 0.0
        elif sextant == 1:
            r, g, b = x, c, 0.0
        elif sextant == 2:
            r, g, b = 0.0, c, x
        elif sextant == 3:
            r, g, b = 0.0, x, c
        elif sextant == 4:
            r, g, b = x, 0.0, c
        else:
            r, g, b = c, 0.0, x

        return RGBColor((r + m) * 255, (g + m) * 255, (b + m) * 255)

    @property
    def rgb(self) -> RGBColor:
        return self.to_rgb()


@dataclass(frozen=True)
class ExtractedColor:
    """
    One dominant color of an image.

    hex_code and hsl are derived from rgb at construction through
    from_rgb(); percentage is the share of qualifying samples in [0, 100].
    """
    hex_code: str
    rgb: RGBColor
    hsl: HSLColor
    percentage: float
    name: Optional[str] = None
    id: str = field(default_factory=generate_color_id)

    def __post_init__(self):
        if not 0.0 <= self.percentage <= 100.0:
            raise ValueError(f"percentage must lie in [0, 100], got {self.percentage}")

    @classmethod
    def from_rgb(cls, rgb: RGBColor, percentage: float,
                 name: Optional[str] = None,
                 color_id: Optional[str] = None) -> "ExtractedColor":
        """Build a color whose hex and HSL both come from the same RGB value."""
        return cls(
            hex_code=rgb.to_hex(),
            rgb=rgb,
            hsl=rgb.to_hsl(),
            percentage=float(percentage),
            name=name,
            id=color_id or generate_color_id(),
        )

    def with_name(self, name: Optional[str]) -> "ExtractedColor":
        """Return a copy carrying a display name."""
        return replace(self, name=name)
