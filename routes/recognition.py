"""
routes/recognition.py — transcribe an uploaded recording

POST /api/recognize  — multipart: audio file
  200 {"text": "..."}
  401 invalid_credential   (stored key was cleared; ask for a new one)
  428 credential_missing
  502 transcription_failed
"""

import logging

from flask import Blueprint, jsonify

from providers.stt.base import STTError
from routes import read_audio_upload, stt_error_response
from services.container import get_services

logger = logging.getLogger(__name__)

recognition_bp = Blueprint("recognition", __name__)


@recognition_bp.route("/api/recognize", methods=["POST"])
def recognize():
    blob, error = read_audio_upload()
    if error:
        return error
    try:
        text = get_services().transcription.recognize(blob)
    except STTError as exc:
        return stt_error_response(exc)
    return jsonify({"text": text})
