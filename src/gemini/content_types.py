"""
MIME type handling for files handed to Gemini (screenshots, voice memos).

File: gemini/content_types.py
Created: 2025-12-27
Last Modified: 2026-01-19
"""

import mimetypes
from pathlib import Path
from typing import Optional, Union


# MIME types that Gemini can process directly
GEMINI_IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp"}
GEMINI_AUDIO_TYPES = {
    "audio/aac",
    "audio/flac",
    "audio/mpeg",
    "audio/mp3",
    "audio/x-m4a",
    "audio/m4a",
    "audio/wav",
    "audio/x-wav",
    "audio/ogg",
    "audio/opus",
    "audio/webm",
}

# Images Pillow can open and re-encode as JPEG before upload
CONVERT_TO_JPEG = {"image/gif", "image/bmp", "image/tiff"}

# Suffixes mimetypes doesn't know on every platform
_EXTRA_SUFFIXES = {
    ".m4a": "audio/x-m4a",
    ".opus": "audio/opus",
    ".webp": "image/webp",
}


def guess_mime_type(path: Union[str, Path]) -> Optional[str]:
    """
    Guess a file's MIME type from its suffix.

    Args:
        path: File path

    Returns:
        MIME type string, or None if unknown
    """
    suffix = Path(path).suffix.lower()
    if suffix in _EXTRA_SUFFIXES:
        return _EXTRA_SUFFIXES[suffix]
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type


def is_supported_image(mime_type: Optional[str]) -> bool:
    """True if the image can be sent to Gemini, directly or after conversion."""
    if not mime_type:
        return False
    mime_lower = mime_type.lower()
    return mime_lower in GEMINI_IMAGE_TYPES or mime_lower in CONVERT_TO_JPEG


def is_supported_audio(mime_type: Optional[str]) -> bool:
    """True if Gemini accepts the audio format as-is."""
    if not mime_type:
        return False
    return mime_type.lower() in GEMINI_AUDIO_TYPES
