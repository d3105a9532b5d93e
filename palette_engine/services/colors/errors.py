"""
Error taxonomy for color extraction.

Every failure is terminal for the call that raised it; the engine never
retries internally.
"""


class ExtractionError(Exception):
    """Base class for color extraction failures."""
    pass


class DecodeFailure(ExtractionError):
    """The source image could not be turned into a raw RGBA buffer."""
    pass


class EmptyImageError(ExtractionError):
    """No pixel qualified for sampling (transparent or zero-sized image)."""
    pass


class InvalidColorCountError(ExtractionError, ValueError):
    """Requested color count is outside the supported bounds."""

    def __init__(self, color_count, minimum: int, maximum: int):
        self.color_count = color_count
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Invalid color count {color_count!r}: must be an integer in [{minimum}, {maximum}]"
        )


class ExtractionCancelledError(ExtractionError):
    """The caller abandoned the extraction before it finished."""
    pass
