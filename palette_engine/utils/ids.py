"""
Palette Engine ID Utilities
Generate identifiers for extraction runs and extracted colors.
"""
import uuid
from datetime import datetime


def generate_extraction_id() -> str:
    """
    Generate a unique extraction ID for log correlation.

    Returns:
        Unique extraction ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"ext-{timestamp}-{short_uuid}"


def extract_timestamp_from_extraction_id(extraction_id: str) -> str:
    """
    Extract timestamp from extraction ID.

    Args:
        extraction_id: Extraction ID string

    Returns:
        Timestamp string or empty if not found
    """
    parts = extraction_id.split("-")
    if len(parts) >= 3 and parts[0] == "ext":
        return parts[1]
    return ""


def generate_color_id() -> str:
    """Generate an identifier for one extracted color."""
    return str(uuid.uuid4())
