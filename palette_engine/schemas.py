"""
Palette Engine Schemas
Pydantic models for serializing extraction results and run metadata.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from palette_engine.services.colors.color_model import ExtractedColor


class ColorEntry(BaseModel):
    """Single extracted color with its image coverage."""
    id: str = Field(..., description="Identifier of this extracted color")
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-F]{6}$",
        description="Uppercase hex color code in format #RRGGBB"
    )
    rgb: List[float] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="RGB channels, each in [0, 255]"
    )
    hsl: List[float] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="Hue [0, 360), saturation and lightness [0, 100]"
    )
    percentage: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Share of qualifying pixels assigned to this color (0-100)"
    )
    name: Optional[str] = Field(None, description="Optional display name")

    @classmethod
    def from_color(cls, color: ExtractedColor) -> "ColorEntry":
        return cls(
            id=color.id,
            hex=color.hex_code,
            rgb=list(color.rgb.as_tuple()),
            hsl=list(color.hsl.as_tuple()),
            percentage=color.percentage,
            name=color.name,
        )


class ExtractionMetadata(BaseModel):
    """Processing details of one extraction run."""
    extraction_id: str = Field(..., description="Identifier for log correlation")
    color_count_requested: int = Field(..., ge=1, le=10)
    quality: str = Field(..., description="Quality tier used ('low', 'medium', 'high')")
    source_width: int = Field(..., ge=0)
    source_height: int = Field(..., ge=0)
    processed_width: int = Field(..., ge=0)
    processed_height: int = Field(..., ge=0)
    sample_count: int = Field(..., ge=0, description="Pixels that passed the alpha filter")
    iterations: int = Field(..., ge=0, description="K-means iterations performed")
    converged: bool = Field(..., description="Whether centroids settled within tolerance")
    duration_ms: float = Field(..., ge=0.0)


class ExtractionReport(BaseModel):
    """Extraction result with metadata, ordered by percentage descending."""
    colors: List[ColorEntry] = Field(..., description="Extracted colors")
    metadata: ExtractionMetadata
