"""
HTTP blueprints. Every error body has the same shape:

    {"error": "<message for the user>", "code": "<machine code>"}
"""

import logging
from typing import Optional, Tuple

from flask import jsonify, request

from capture.codec import AudioBlob
from providers.stt.base import CredentialError, InvalidCredentialError, STTError

logger = logging.getLogger(__name__)


def api_error(message: str, code: str, status: int):
    return jsonify({"error": message, "code": code}), status


def stt_error_response(exc: STTError):
    """Map a transcription failure to a single user-facing response.

    An invalid credential has already been cleared by the service; the
    client must ask for a new one.
    """
    if isinstance(exc, InvalidCredentialError):
        return api_error(exc.user_message, "invalid_credential", 401)
    if isinstance(exc, CredentialError):
        return api_error(exc.user_message, "credential_missing", 428)
    return api_error(exc.user_message, "transcription_failed", 502)


def read_audio_upload(field: str = "audio") -> Tuple[Optional[AudioBlob], Optional[tuple]]:
    """Return (blob, None) from a multipart upload, or (None, error response)."""
    upload = request.files.get(field)
    if upload is None:
        return None, api_error(f"Missing '{field}' file", "audio_missing", 400)
    data = upload.read()
    if not data:
        return None, api_error("Audio upload is empty", "audio_empty", 400)
    return AudioBlob(data=data, mime_type=upload.mimetype or ""), None
