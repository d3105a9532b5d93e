"""
Palette Engine Configuration
Manages environment variables and defaults for the color extraction engine.
"""
import numbers
import os
from enum import Enum
from typing import Optional, Union


class ExtractionQuality(str, Enum):
    """Quality tier selecting the preprocessor's maximum image dimension."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def max_dimension(self) -> int:
        return {
            ExtractionQuality.LOW: 256,
            ExtractionQuality.MEDIUM: 512,
            ExtractionQuality.HIGH: 1024,
        }[self]

    @property
    def display_name(self) -> str:
        return {
            ExtractionQuality.LOW: "Low (fast)",
            ExtractionQuality.MEDIUM: "Standard",
            ExtractionQuality.HIGH: "High (slow)",
        }[self]

    @classmethod
    def parse(cls, value: Optional[Union["ExtractionQuality", str]]) -> "ExtractionQuality":
        """
        Resolve a tier from an enum member, its string value, or None.

        None resolves to the configured default tier.

        Raises:
            ValueError: If the string is not a known tier
        """
        if value is None:
            value = config.DEFAULT_QUALITY
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(q.value for q in cls)
            raise ValueError(f"Unknown extraction quality '{value}'. Supported: {valid}")


class Config:
    """Configuration class for the palette engine."""

    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTE_LOG_LEVEL", "INFO")
    LOG_JSON: bool = bool(int(os.environ.get("PALETTE_LOG_JSON", "0")))

    # Extraction defaults
    DEFAULT_QUALITY: str = os.environ.get("PALETTE_DEFAULT_QUALITY", "medium")
    DEFAULT_COLOR_COUNT: int = int(os.environ.get("PALETTE_DEFAULT_COLOR_COUNT", "5"))
    MIN_COLOR_COUNT: int = 1
    MAX_COLOR_COUNT: int = 10

    # Sampling: a pixel qualifies when its alpha is strictly above this value
    ALPHA_THRESHOLD: int = int(os.environ.get("PALETTE_ALPHA_THRESHOLD", "128"))

    # K-means
    MAX_ITERATIONS: int = int(os.environ.get("PALETTE_MAX_ITERATIONS", "50"))
    CONVERGENCE_TOLERANCE: float = float(os.environ.get("PALETTE_CONVERGENCE_TOLERANCE", "1.0"))
    KMEANS_CHUNK_SIZE: int = int(os.environ.get("PALETTE_KMEANS_CHUNK_SIZE", "65536"))

    # Result assembly (percent)
    MATERIALITY_THRESHOLD: float = float(os.environ.get("PALETTE_MATERIALITY_THRESHOLD", "0.1"))

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("PALETTE_METRICS_ENABLED", "1")))

    @classmethod
    def validate_color_count(cls, color_count: int) -> bool:
        """Validate requested number of colors (any integral type except bool)."""
        return bool(
            isinstance(color_count, numbers.Integral)
            and not isinstance(color_count, bool)
            and cls.MIN_COLOR_COUNT <= color_count <= cls.MAX_COLOR_COUNT
        )

    @classmethod
    def validate_quality(cls, quality: str) -> bool:
        """Validate quality tier name."""
        return quality in [q.value for q in ExtractionQuality]


# Global config instance
config = Config()
