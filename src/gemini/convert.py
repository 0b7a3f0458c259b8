"""
Image preparation for Gemini.

Downsamples contact-list screenshots so uploads stay small while names remain
legible, and re-encodes formats Gemini does not accept as JPEG.

File: gemini/convert.py
Created: 2025-12-27
Last Modified: 2026-01-19
"""

import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .content_types import CONVERT_TO_JPEG

log = logging.getLogger(__name__)

# Screenshots are tall; keep enough resolution for small text
MAX_IMAGE_SIZE = 1536


def downsample_image(image_bytes: bytes, max_size: int = MAX_IMAGE_SIZE) -> Tuple[bytes, str]:
    """
    Downsample image to fit within max_size while preserving aspect ratio.

    Args:
        image_bytes: Encoded image
        max_size: Maximum dimension (width or height)

    Returns:
        Tuple of (jpeg_bytes, "image/jpeg")

    Raises:
        ValueError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            # Convert to RGB if necessary (handles RGBA, P mode, etc.)
            if img.mode != "RGB":
                img = img.convert("RGB")

            if img.width > max_size or img.height > max_size:
                img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

            buffer = io.BytesIO()
            img.save(buffer, format="JPEG", quality=90)
            return buffer.getvalue(), "image/jpeg"
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unreadable image: {e}") from e


def prepare_image(image_bytes: bytes, mime_type: str) -> Tuple[bytes, str]:
    """
    Prepare a screenshot for upload.

    Args:
        image_bytes: Encoded image
        mime_type: MIME type reported for the image

    Returns:
        Tuple of (bytes, mime_type) to send
    """
    mime_lower = (mime_type or "").lower()
    try:
        return downsample_image(image_bytes)
    except ValueError as e:
        log.warning(f"Failed to downsample image: {e}")
        # Gemini won't accept these raw
        if mime_lower in CONVERT_TO_JPEG:
            raise
        # For other image types, try raw bytes (Gemini might accept)
        return image_bytes, mime_type
