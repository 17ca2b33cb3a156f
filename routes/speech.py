"""
routes/speech.py — speak text with a platform voice

GET  /api/voices  — German voices installed on this machine
POST /api/speak   — body {"text": "...", "gender": "male"|"female"}; 202, fire-and-forget
"""

import logging

from flask import Blueprint, jsonify, request

from providers.tts.base import TTSError
from routes import api_error
from services.container import get_services

logger = logging.getLogger(__name__)

speech_bp = Blueprint("speech", __name__)


@speech_bp.route("/api/voices", methods=["GET"])
def list_voices():
    services = get_services()
    if services.voice_output is None:
        return api_error("Speech output is not available", "speech_unavailable", 503)
    try:
        voices = services.voice_output.voices()
    except TTSError as exc:
        return api_error(exc.user_message, "speech_unavailable", 503)
    return jsonify({
        "voices": [v.to_dict() for v in voices],
        "default_gender": services.default_gender,
    })


@speech_bp.route("/api/speak", methods=["POST"])
def speak():
    services = get_services()
    if services.voice_output is None:
        return api_error("Speech output is not available", "speech_unavailable", 503)

    data = request.get_json(silent=True) or {}
    text = (data.get("text") or "").strip()
    if not text:
        return api_error("No text to speak", "text_missing", 400)
    gender = data.get("gender") or services.default_gender

    try:
        voice = services.voice_output.speak(text, gender)
    except ValueError as exc:
        return api_error(str(exc), "invalid_gender", 400)
    except TTSError as exc:
        return api_error(exc.user_message, "speech_unavailable", 503)
    return jsonify({"voice": voice.to_dict() if voice else None}), 202
