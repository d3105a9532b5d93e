"""
palette_engine package.

Purpose:
  Extract a small, percentage-weighted set of dominant colors from a bitmap.

Public API:
  extract_colors            : RawImageBuffer + color count -> List[ExtractedColor]
  extract_report            : same pipeline, pydantic report with run metadata
  extract_colors_from_source: decode bytes/path/PIL image first, then extract
  extract_colors_async      : off-thread extraction with cooperative cancellation
  RawImageBuffer            : width x height RGBA input buffer
  RGBColor, HSLColor        : color model value objects
  ExtractedColor            : public result type

Quick start:
  from palette_engine import extract_colors_from_source
  colors = extract_colors_from_source("photo.jpg", color_count=5)
"""

__version__ = "1.0.0"

from .config import config, ExtractionQuality  # noqa: F401
from .services.colors.color_model import RGBColor, HSLColor, ExtractedColor  # noqa: F401
from .services.colors.errors import (  # noqa: F401
    ExtractionError,
    DecodeFailure,
    EmptyImageError,
    InvalidColorCountError,
    ExtractionCancelledError,
)
from .services.colors.extraction import (  # noqa: F401
    extract_colors,
    extract_report,
    extract_colors_from_source,
    extract_colors_async,
)
from .services.imaging import RawImageBuffer, decode_image  # noqa: F401
from .services.reliability import CancellationToken  # noqa: F401

__all__ = [
    "__version__",
    "config",
    "ExtractionQuality",
    "RGBColor",
    "HSLColor",
    "ExtractedColor",
    "ExtractionError",
    "DecodeFailure",
    "EmptyImageError",
    "InvalidColorCountError",
    "ExtractionCancelledError",
    "extract_colors",
    "extract_report",
    "extract_colors_from_source",
    "extract_colors_async",
    "RawImageBuffer",
    "decode_image",
    "CancellationToken",
]
