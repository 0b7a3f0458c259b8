"""
Gemini integration: greeting generation, contact screenshot parsing and
voice memo transcription.

File: gemini/__init__.py
Created: 2025-12-27
"""

from .client import GeminiClient, parse_names, strip_code_fences
from .content_types import guess_mime_type, is_supported_audio, is_supported_image
from .convert import downsample_image, prepare_image

__all__ = [
    "GeminiClient",
    "parse_names",
    "strip_code_fences",
    "guess_mime_type",
    "is_supported_audio",
    "is_supported_image",
    "downsample_image",
    "prepare_image",
]
