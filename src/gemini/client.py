"""
Gemini API client for greeting generation, contact-list OCR and voice memos.

Handles rate limiting and retries. Every call either returns a complete result
or raises GeminiError, so callers can tell "nothing produced" apart from an
empty answer.

File: gemini/client.py
Created: 2025-12-27
Last Modified: 2026-01-21
"""

import asyncio
import json
import logging
import os
import re
import time
from typing import Any, List, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError

from ..models import GeminiError, GeneratedGreetings

log = logging.getLogger(__name__)

# Rate limiting: 600 req/min = 100ms between requests
MIN_REQUEST_INTERVAL = 0.1  # seconds

# Retry settings
MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0  # seconds

# Model configuration
MODEL_NAME = "gemini-3-flash-preview"
GREETING_TEMPERATURE = 0.8

PROMPTS = {
    "greetings": """你是一位中国新年祝福和社交礼仪大师。

重要背景信息:
- 当前年份: 2026年
- 生肖年: 马年（丙午年）
- 所有祝福必须围绕2026马年来写，多使用与"马"相关的成语和吉祥话，如：马到成功、龙马精神、一马当先、万马奔腾、马上有福等。

收信人姓名: {name}
与收信人的关系: {relationship}
特别回忆/背景: {memories}

任务: 根据提供的回忆，为此人生成3种不同类型的2026马年新年祝福（中文）。

1. "formal" (正式书面版): 优雅、尊敬、适合长辈或专业联系人。融入马年元素和相关成语。
2. "casual" (日常口语版): 温暖、友好、真实，适合微信发给亲密朋友。自然地融入马年元素。
3. "creative" (花式创意版): 提供3个不同的创意选项。
   - 重要: 其中一个选项必须是使用"{name}"的字作为每行开头的"姓名藏头诗"，并融入马年主题。
   - 其他两个可以是马年主题短诗、幽默段子或与马相关的谐音祝福。

只输出JSON。""",
    "contacts_image": (
        "Extract all the names of people visible in this contact list screenshot. "
        'Return ONLY a valid JSON array of strings, e.g., ["张三", "李四"]. '
        "Do not include phone numbers or other text. Do not use markdown code blocks."
    ),
    "audio": (
        "Please transcribe the speech in this audio exactly as it is spoken. "
        "The language is likely Chinese (Mandarin). Provide only the spoken words."
    ),
}

GREETINGS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "formal": types.Schema(type=types.Type.STRING),
        "casual": types.Schema(type=types.Type.STRING),
        "creative": types.Schema(
            type=types.Type.ARRAY,
            min_items=3,
            max_items=3,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "id": types.Schema(type=types.Type.STRING),
                    "title": types.Schema(type=types.Type.STRING),
                    "content": types.Schema(type=types.Type.STRING),
                    "tags": types.Schema(
                        type=types.Type.ARRAY,
                        items=types.Schema(type=types.Type.STRING),
                    ),
                },
                required=["id", "title", "content", "tags"],
            ),
        ),
    },
    required=["formal", "casual", "creative"],
)

_CODE_FENCE = re.compile(r"```(?:json)?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences models like to wrap JSON in."""
    return _CODE_FENCE.sub("", text).strip()


def parse_names(text: str) -> List[str]:
    """
    Parse the contact-list OCR answer into names.

    Args:
        text: Raw model output, expected to be a JSON array of strings

    Returns:
        Trimmed, non-empty names in answer order (may be empty)

    Raises:
        GeminiError: If the answer is not a JSON array
    """
    try:
        data = json.loads(strip_code_fences(text) or "[]")
    except json.JSONDecodeError as e:
        raise GeminiError(f"Gemini returned malformed name list: {e}") from e

    if not isinstance(data, list):
        raise GeminiError("Gemini returned a name list that is not an array")

    return [item.strip() for item in data if isinstance(item, str) and item.strip()]


class GeminiClient:
    """
    Client for the Gemini API with rate limiting and retries.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = MAX_RETRIES,
        initial_backoff: float = INITIAL_BACKOFF,
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Gemini API key. If not provided, reads from GEMINI_API_KEY env var.
            model: Model name (defaults to MODEL_NAME)
            max_retries: Attempts per call before giving up
            initial_backoff: First retry delay in seconds, doubled each retry

        Raises:
            ValueError: If no API key provided or found in environment
        """
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Gemini API key required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.client = genai.Client(api_key=self.api_key)
        self.model = model or MODEL_NAME
        self.max_retries = max(1, max_retries)
        self.initial_backoff = initial_backoff
        self._last_request_time = 0.0
        self._request_count = 0

    async def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        now = time.time()
        elapsed = now - self._last_request_time
        if elapsed < MIN_REQUEST_INTERVAL:
            await asyncio.sleep(MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.time()

    async def _call_with_retry(
        self,
        contents: Any,
        config: Optional[types.GenerateContentConfig] = None,
    ) -> str:
        """
        Call Gemini API with exponential backoff retry.

        Args:
            contents: Prompt string or list of content parts
            config: Optional generation config (schema, temperature)

        Returns:
            Generated text response (may be empty)

        Raises:
            GeminiError: On invalid requests or when all retries failed
        """
        backoff = self.initial_backoff
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            await self._rate_limit()
            self._request_count += 1

            try:
                response = await asyncio.to_thread(
                    self.client.models.generate_content,
                    model=self.model,
                    contents=contents,
                    config=config,
                )
                return (response.text or "").strip()

            except Exception as e:
                last_error = e
                error_str = str(e).lower()

                # Check for rate limiting
                if "resource exhausted" in error_str or "429" in error_str:
                    log.warning(f"Rate limited (attempt {attempt + 1}): {e}")
                # Check for invalid request, retrying won't help
                elif "invalid" in error_str or "400" in error_str:
                    log.error(f"Invalid request to Gemini: {e}")
                    raise GeminiError(f"Invalid request to Gemini: {e}") from e
                else:
                    log.error(f"Gemini API error (attempt {attempt + 1}): {e}")

                if attempt < self.max_retries - 1:
                    await asyncio.sleep(backoff)
                    backoff *= 2

        log.error(f"All {self.max_retries} retries failed")
        raise GeminiError(f"Gemini request failed after {self.max_retries} attempts: {last_error}")

    async def generate_greetings(
        self,
        name: str,
        relationship: str,
        memories: str,
    ) -> GeneratedGreetings:
        """
        Generate a greeting bundle for one person.

        Args:
            name: Recipient name
            relationship: Relationship label (already normalized by the caller)
            memories: Memory notes (already normalized by the caller)

        Returns:
            A complete GeneratedGreetings bundle

        Raises:
            GeminiError: If the call fails or the answer does not fit the schema
        """
        prompt = PROMPTS["greetings"].format(
            name=name, relationship=relationship, memories=memories
        )
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=GREETINGS_SCHEMA,
            temperature=GREETING_TEMPERATURE,
        )

        text = await self._call_with_retry(prompt, config)
        if not text:
            raise GeminiError(f"Empty greeting response for {name}")

        try:
            return GeneratedGreetings.model_validate_json(strip_code_fences(text))
        except ValidationError as e:
            log.warning(f"Malformed greeting response for {name}: {e}")
            raise GeminiError(f"Malformed greeting response: {e.error_count()} errors") from e

    async def parse_contacts_image(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
    ) -> List[str]:
        """
        Read the names off a contact-list screenshot.

        Args:
            image_bytes: Raw image bytes (size already checked by the caller)
            mime_type: MIME type of the image

        Returns:
            Names in reading order; empty when nothing was recognized
        """
        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            PROMPTS["contacts_image"],
        ]
        text = await self._call_with_retry(contents)
        names = parse_names(text)
        log.info(f"Recognized {len(names)} names in contact screenshot")
        return names

    async def transcribe_audio(
        self,
        audio_bytes: bytes,
        mime_type: str = "audio/wav",
    ) -> str:
        """
        Transcribe a voice memo.

        Args:
            audio_bytes: Raw audio bytes
            mime_type: MIME type of the audio

        Returns:
            Transcription text, possibly empty
        """
        contents = [
            types.Part.from_bytes(data=audio_bytes, mime_type=mime_type),
            PROMPTS["audio"],
        ]
        return await self._call_with_retry(contents)

    @property
    def request_count(self) -> int:
        """Number of API requests made."""
        return self._request_count
