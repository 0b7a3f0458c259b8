"""
Tests for the Gemini client with the SDK replaced by a mock.
"""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from src.gemini import GeminiClient, parse_names, strip_code_fences
from src.models import GeminiError

from conftest import make_greetings


@pytest.fixture
def sdk(monkeypatch):
    """Mocked genai.Client instance used by every GeminiClient in the test."""
    instance = MagicMock()
    monkeypatch.setattr("src.gemini.client.genai.Client", MagicMock(return_value=instance))
    return instance


@pytest.fixture
def client(sdk):
    return GeminiClient(api_key="test-key", max_retries=3, initial_backoff=0)


def _response(text):
    return MagicMock(text=text)


def run(coro):
    return asyncio.run(coro)


# =============================================================================
# Construction
# =============================================================================

def test_missing_api_key_raises(sdk, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError):
        GeminiClient()


def test_api_key_from_environment(sdk, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    assert GeminiClient().api_key == "env-key"


# =============================================================================
# Greetings
# =============================================================================

def test_generate_greetings_parses_bundle(client, sdk):
    payload = make_greetings("张三").model_dump_json()
    sdk.models.generate_content.return_value = _response(f"```json\n{payload}\n```")

    greetings = run(client.generate_greetings("张三", "同事", "一起加班"))

    assert greetings == make_greetings("张三")
    kwargs = sdk.models.generate_content.call_args.kwargs
    assert "张三" in kwargs["contents"]
    assert "同事" in kwargs["contents"]
    assert kwargs["config"].response_mime_type == "application/json"


def test_generate_greetings_rejects_incomplete_bundle(client, sdk):
    payload = json.dumps({"formal": "a", "casual": "b", "creative": []})
    sdk.models.generate_content.return_value = _response(payload)

    with pytest.raises(GeminiError):
        run(client.generate_greetings("张三", "同事", "x"))


def test_generate_greetings_rejects_empty_answer(client, sdk):
    sdk.models.generate_content.return_value = _response(None)
    with pytest.raises(GeminiError):
        run(client.generate_greetings("张三", "同事", "x"))


# =============================================================================
# Retries
# =============================================================================

def test_transient_error_is_retried(client, sdk):
    sdk.models.generate_content.side_effect = [
        RuntimeError("503 unavailable"),
        _response("hello"),
    ]

    assert run(client.transcribe_audio(b"RIFF", "audio/wav")) == "hello"
    assert client.request_count == 2


def test_invalid_request_is_not_retried(client, sdk):
    sdk.models.generate_content.side_effect = RuntimeError("400 INVALID_ARGUMENT")

    with pytest.raises(GeminiError):
        run(client.transcribe_audio(b"RIFF", "audio/wav"))

    assert sdk.models.generate_content.call_count == 1


def test_gives_up_after_max_retries(client, sdk):
    sdk.models.generate_content.side_effect = RuntimeError("429 resource exhausted")

    with pytest.raises(GeminiError):
        run(client.transcribe_audio(b"RIFF", "audio/wav"))

    assert sdk.models.generate_content.call_count == 3


# =============================================================================
# Contact screenshots
# =============================================================================

def test_parse_contacts_image(client, sdk):
    sdk.models.generate_content.return_value = _response('["张三", "李四"]')
    assert run(client.parse_contacts_image(b"\xff\xd8", "image/jpeg")) == ["张三", "李四"]


def test_parse_names_filters_junk():
    assert parse_names('```json\n["张三", " ", 3, " 李四 "]\n```') == ["张三", "李四"]


def test_parse_names_empty_answer():
    assert parse_names("") == []


@pytest.mark.parametrize("text", ['{"names": ["张三"]}', "张三，李四"])
def test_parse_names_rejects_non_array(text):
    with pytest.raises(GeminiError):
        parse_names(text)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
