"""
Gemini few-shot STT provider.

Sends the target recording, primed with the speaker's own labelled
recordings, to the generateContent REST endpoint and returns the model's
answer as the transcription. No retries: the caller decides what to do
with a failure.
"""

import logging
import time
from typing import Any, Dict, Optional, Sequence

import requests

from capture.codec import AudioBlob
from providers.registry import ProviderType, registry
from providers.stt.base import (
    CredentialError,
    InvalidCredentialError,
    STTProvider,
    TranscriptionError,
    TranscriptionResult,
)
from providers.stt.gemini_request import FALLBACK_MIME_TYPE, TranscriptionRequest, build_request
from training.models import TrainingExample

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

MSG_MISSING_KEY = "Es ist kein API-Schlüssel hinterlegt."
MSG_INVALID_KEY = "Der API-Schlüssel ist ungültig. Bitte überprüfen Sie ihn."
MSG_FAILED = "Die Transkription durch die KI ist fehlgeschlagen."


def _is_invalid_key_error(body: Any) -> bool:
    """True when an error body says the API key itself was rejected."""
    if not isinstance(body, dict):
        return False
    error = body.get("error") or {}
    if not isinstance(error, dict):
        return False
    if "API key not valid" in str(error.get("message", "")):
        return True
    for detail in error.get("details") or []:
        if isinstance(detail, dict) and detail.get("reason") == "API_KEY_INVALID":
            return True
    return False


def _extract_text(body: Dict[str, Any]) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        raise ValueError("response has no candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        raise ValueError("response has no text parts")
    return "".join(texts)


class GeminiTranscriber(STTProvider):
    """Few-shot dysarthric speech transcription via Gemini."""

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self.api_key = (self._config.get("api_key") or "").strip()
        self.model = self._config.get("model") or DEFAULT_MODEL
        self.base_url = (self._config.get("base_url") or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = float(self._config.get("timeout_s", 60))
        self.encode_workers = int(self._config.get("encode_workers", 4))

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def transcribe(
        self,
        audio_data: bytes,
        language: Optional[str] = None,
        mime_type: str = FALLBACK_MIME_TYPE,
        examples: Sequence[TrainingExample] = (),
        **kwargs,
    ) -> TranscriptionResult:
        if not self.api_key:
            raise CredentialError("gemini", "API key is not provided.", MSG_MISSING_KEY)

        request = build_request(
            AudioBlob(audio_data, mime_type),
            list(examples),
            max_workers=self.encode_workers,
        )
        start = time.time()
        body = self._send(request)
        try:
            text = _extract_text(body)
        except (AttributeError, TypeError, ValueError) as exc:
            logger.error("Malformed transcription response: %s", exc)
            raise TranscriptionError("gemini", f"Malformed response: {exc}", MSG_FAILED) from exc

        return TranscriptionResult(
            text=text.strip(),
            language=language or "de",
            duration_ms=(time.time() - start) * 1000,
            provider="gemini",
            model=self.model,
            example_count=request.example_count,
            raw_response=body,
        )

    def _send(self, request: TranscriptionRequest) -> Dict[str, Any]:
        try:
            resp = requests.post(
                self.endpoint,
                headers={
                    "x-goog-api-key": self.api_key,
                    "Content-Type": "application/json",
                },
                json=request.to_payload(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Error transcribing audio with Gemini: %s", exc)
            raise TranscriptionError("gemini", f"API request failed: {exc}", MSG_FAILED) from exc

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code >= 400:
            if _is_invalid_key_error(body):
                logger.warning("Gemini rejected the API key")
                raise InvalidCredentialError("gemini", "API key not valid", MSG_INVALID_KEY)
            logger.error("Gemini returned HTTP %s: %s", resp.status_code, body)
            raise TranscriptionError("gemini", f"HTTP {resp.status_code}", MSG_FAILED)

        if not isinstance(body, dict):
            raise TranscriptionError("gemini", "Response is not a JSON object", MSG_FAILED)
        return body

    def is_available(self) -> bool:
        return bool(self.api_key)

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["name"] = self._config.get("name", "Gemini few-shot")
        info["model"] = self.model
        info["status"] = "active" if self.is_available() else "inactive"
        return info


# Auto-register when this module is imported
registry.register(ProviderType.STT, "gemini", GeminiTranscriber)
