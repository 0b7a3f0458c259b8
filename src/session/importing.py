"""
Contact import and voice memo helpers.

Text import is parsed locally. Screenshot import and voice memos go to Gemini,
but oversized or unsupported payloads are rejected here before any network
call is made.

File: session/importing.py
Created: 2026-01-17
Last Modified: 2026-01-21
"""

import logging
import re
from typing import List, Optional

from ..gemini import is_supported_audio, is_supported_image, prepare_image
from ..models import InputValidationError
from .ports import NameReader, Transcriber

log = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024

# Newline, ASCII comma, full-width comma, ideographic enumeration comma
_NAME_SEPARATORS = re.compile(r"[\n,，、]")


def parse_names_text(text: str) -> List[str]:
    """
    Split pasted text into contact names.

    Args:
        text: Names separated by newlines or commas

    Returns:
        Trimmed, non-empty names in input order

    Raises:
        InputValidationError: If no name remains
    """
    names = [part.strip() for part in _NAME_SEPARATORS.split(text or "")]
    names = [name for name in names if name]
    if not names:
        raise InputValidationError("Enter at least one name")
    return names


def validate_image(image_bytes: bytes, mime_type: Optional[str]) -> None:
    """
    Reject screenshots that must not be uploaded.

    Raises:
        InputValidationError: If the image is empty, too large or not an image
    """
    if not image_bytes:
        raise InputValidationError("Image is empty")
    if len(image_bytes) > MAX_IMAGE_BYTES:
        raise InputValidationError("Image is too large, please upload one under 5MB")
    if not is_supported_image(mime_type):
        raise InputValidationError(f"Unsupported image type: {mime_type or 'unknown'}")


async def read_names_from_image(
    image_bytes: bytes,
    mime_type: Optional[str],
    reader: NameReader,
) -> List[str]:
    """
    Recognize contact names in a screenshot.

    Returns:
        Names found; an empty list means nothing was recognized

    Raises:
        InputValidationError: If the image is rejected before upload
        GeminiError: If recognition itself failed
    """
    validate_image(image_bytes, mime_type)
    try:
        payload, payload_mime = prepare_image(image_bytes, mime_type)
    except ValueError as e:
        raise InputValidationError(f"Could not read image: {e}") from e
    return await reader.parse_contacts_image(payload, payload_mime)


def append_transcript(memories: Optional[str], transcript: Optional[str]) -> str:
    """Append a transcript to existing memories on a new line."""
    memories = memories or ""
    transcript = (transcript or "").strip()
    if not transcript:
        return memories
    if not memories:
        return transcript
    return f"{memories}\n{transcript}"


def revise_memories(current: Optional[str], action: str, text: Optional[str] = "") -> str:
    """
    Apply one edit to a contact's memory notes.

    Args:
        current: Notes stored so far
        action: "keep", "add" (append on a new line), "replace" or "clear"
        text: New text for "add" and "replace"

    Raises:
        ValueError: If the action is unknown
    """
    if action == "keep":
        return current or ""
    if action == "add":
        return append_transcript(current, text)
    if action == "replace":
        return (text or "").strip()
    if action == "clear":
        return ""
    raise ValueError(f"Unknown memory action: {action}")


async def transcribe_memo(
    audio_bytes: bytes,
    mime_type: Optional[str],
    memories: Optional[str],
    transcriber: Transcriber,
) -> str:
    """
    Transcribe a voice memo and append it to the memories.

    Returns:
        The updated memories text

    Raises:
        InputValidationError: If the audio is empty or of an unsupported type
        GeminiError: If transcription failed
    """
    if not audio_bytes:
        raise InputValidationError("Voice memo is empty")
    if not is_supported_audio(mime_type):
        raise InputValidationError(f"Unsupported audio type: {mime_type or 'unknown'}")

    transcript = await transcriber.transcribe_audio(audio_bytes, mime_type)
    if not transcript.strip():
        log.info("Voice memo produced an empty transcript")
    return append_transcript(memories, transcript)
