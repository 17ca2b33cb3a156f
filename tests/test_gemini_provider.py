"""
Tests for the Gemini few-shot STT provider and its request builder.

requests.post is mocked; no network access.
"""

from unittest.mock import patch

import pytest
import requests

from capture.codec import AudioBlob, encode
from providers.stt.base import CredentialError, InvalidCredentialError, TranscriptionError
from providers.stt.gemini_provider import GeminiTranscriber, MSG_INVALID_KEY
from providers.stt.gemini_request import (
    EXAMPLE_PROMPT,
    FALLBACK_MIME_TYPE,
    FEW_SHOT_PROMPT,
    SYSTEM_INSTRUCTION,
    ZERO_SHOT_PROMPT,
    build_request,
)
from tests.fakes import INVALID_KEY_BODY, gemini_response
from training.models import TrainingExample

POST = "providers.stt.gemini_provider.requests.post"

TARGET = AudioBlob(b"target-audio", "audio/webm")


def _example(text, data=b"ex", mime="audio/webm"):
    return TrainingExample(audio=AudioBlob(data, mime), text=text)


# ---------------------------------------------------------------------------
# Request builder
# ---------------------------------------------------------------------------

class TestBuildRequest:
    def test_zero_examples_single_turn(self):
        req = build_request(TARGET, [])
        assert req.example_count == 0
        assert len(req.turns) == 1
        turn = req.turns[0]
        assert turn.role == "user"
        assert turn.text == ZERO_SHOT_PROMPT
        assert turn.audio.data == encode(TARGET)
        assert turn.audio.mime_type == "audio/webm"

    def test_examples_alternate_in_order(self):
        examples = [_example("Ich habe Durst.", b"a"), _example("Mir ist kalt.", b"b")]
        req = build_request(TARGET, examples)
        assert [t.role for t in req.turns] == ["user", "model", "user", "model", "user"]
        assert req.turns[0].text == EXAMPLE_PROMPT
        assert req.turns[0].audio.data == encode(AudioBlob(b"a"))
        assert req.turns[1].text == "Ich habe Durst."
        assert req.turns[1].audio is None
        assert req.turns[2].audio.data == encode(AudioBlob(b"b"))
        assert req.turns[3].text == "Mir ist kalt."
        assert req.turns[-1].text == FEW_SHOT_PROMPT
        assert req.example_count == 2

    def test_missing_mime_type_uses_fallback(self):
        req = build_request(AudioBlob(b"x", ""), [_example("Hallo", mime="")])
        assert req.turns[0].audio.mime_type == FALLBACK_MIME_TYPE
        assert req.turns[-1].audio.mime_type == FALLBACK_MIME_TYPE

    def test_payload_shape(self):
        payload = build_request(TARGET, [_example("Hallo")]).to_payload()
        assert payload["systemInstruction"] == {"parts": [{"text": SYSTEM_INSTRUCTION}]}
        first = payload["contents"][0]
        assert first["role"] == "user"
        assert first["parts"][0] == {"text": EXAMPLE_PROMPT}
        assert first["parts"][1]["inlineData"]["mimeType"] == "audio/webm"
        assert payload["contents"][1] == {"role": "model", "parts": [{"text": "Hallo"}]}


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

@pytest.fixture
def gemini():
    return GeminiTranscriber({"api_key": "AIza-test", "model": "gemini-test", "timeout_s": 12})


class TestGeminiTranscriber:
    def test_missing_key_fails_before_network(self):
        with patch(POST) as post:
            with pytest.raises(CredentialError):
                GeminiTranscriber({}).transcribe(b"audio")
        post.assert_not_called()

    def test_blank_key_counts_as_missing(self):
        with patch(POST) as post:
            with pytest.raises(CredentialError):
                GeminiTranscriber({"api_key": "   "}).transcribe(b"audio")
        post.assert_not_called()

    def test_success_returns_stripped_text(self, gemini):
        with patch(POST, return_value=gemini_response("  Ich habe Hunger.\n")):
            result = gemini.transcribe(b"audio", mime_type="audio/webm")
        assert result.text == "Ich habe Hunger."
        assert result.provider == "gemini"
        assert result.model == "gemini-test"
        assert result.example_count == 0

    def test_request_sent_to_model_endpoint(self, gemini):
        with patch(POST, return_value=gemini_response()) as post:
            gemini.transcribe(b"audio", examples=[_example("Hallo")])
        args, kwargs = post.call_args
        assert args[0].endswith("/models/gemini-test:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "AIza-test"
        assert kwargs["timeout"] == 12
        assert len(kwargs["json"]["contents"]) == 3

    def test_multiple_text_parts_joined(self, gemini):
        body = {"candidates": [{"content": {"parts": [{"text": "Ich "}, {"text": "habe Durst."}]}}]}
        with patch(POST, return_value=gemini_response(body=body)):
            assert gemini.transcribe(b"audio").text == "Ich habe Durst."

    def test_invalid_key_is_distinct(self, gemini):
        with patch(POST, return_value=gemini_response(status_code=400, body=INVALID_KEY_BODY)):
            with pytest.raises(InvalidCredentialError) as excinfo:
                gemini.transcribe(b"audio")
        assert excinfo.value.user_message == MSG_INVALID_KEY

    def test_invalid_key_detected_by_reason_only(self, gemini):
        body = {"error": {"message": "bad", "details": [{"reason": "API_KEY_INVALID"}]}}
        with patch(POST, return_value=gemini_response(status_code=400, body=body)):
            with pytest.raises(InvalidCredentialError):
                gemini.transcribe(b"audio")

    @pytest.mark.parametrize("status,body", [
        (429, {"error": {"message": "Resource has been exhausted"}}),
        (500, {"error": {"message": "Internal error"}}),
        (400, {"error": {"message": "Invalid audio"}}),
    ])
    def test_other_http_errors_are_generic(self, gemini, status, body):
        with patch(POST, return_value=gemini_response(status_code=status, body=body)):
            with pytest.raises(TranscriptionError):
                gemini.transcribe(b"audio")

    def test_network_error_is_generic(self, gemini):
        with patch(POST, side_effect=requests.ConnectionError("down")):
            with pytest.raises(TranscriptionError):
                gemini.transcribe(b"audio")

    def test_non_json_error_body(self, gemini):
        resp = gemini_response(status_code=502)
        resp.json.side_effect = ValueError("no json")
        with patch(POST, return_value=resp):
            with pytest.raises(TranscriptionError):
                gemini.transcribe(b"audio")

    @pytest.mark.parametrize("body", [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"finishReason": "SAFETY"}]},
    ])
    def test_malformed_response(self, gemini, body):
        with patch(POST, return_value=gemini_response(body=body)):
            with pytest.raises(TranscriptionError):
                gemini.transcribe(b"audio")

    def test_availability_follows_key(self, gemini):
        assert gemini.is_available() is True
        assert GeminiTranscriber({}).is_available() is False
        assert gemini.get_info()["model"] == "gemini-test"
