"""
routes/capture.py — record from the service machine's own microphone

Only served when the 'server_capture' feature flag is on (kiosk setup).

GET  /api/capture/state  — recorder state, active view, selected phrase
POST /api/capture/start  — body {"view": "training"|"recognition", "phrase_id": N}
POST /api/capture/stop   — stop and commit: training saves, recognition transcribes
"""

import logging

from flask import Blueprint, jsonify, request

from capture.recorder import CaptureError, MicrophonePermissionError, RecorderStateError
from providers.stt.base import STTError
from routes import api_error, stt_error_response
from services.container import get_services
from services.session import View

logger = logging.getLogger(__name__)

capture_bp = Blueprint("capture", __name__)


@capture_bp.before_request
def require_capture_enabled():
    if not get_services().capture_enabled:
        return api_error("Server-side capture is disabled", "capture_disabled", 404)


@capture_bp.route("/api/capture/state", methods=["GET"])
def capture_state():
    return jsonify(get_services().session.to_dict())


@capture_bp.route("/api/capture/start", methods=["POST"])
def start_capture():
    session = get_services().session
    data = request.get_json(silent=True) or {}

    try:
        if "view" in data:
            session.set_view(View(data["view"]))
        if data.get("phrase_id") is not None:
            session.select_phrase(int(data["phrase_id"]))
    except KeyError:
        return api_error(f"Phrase {data.get('phrase_id')} not found", "not_found", 404)
    except (TypeError, ValueError):
        return api_error("Invalid 'view' or 'phrase_id'", "invalid_body", 400)

    try:
        session.start_capture()
    except MicrophonePermissionError:
        return api_error(
            "Kein Zugriff auf das Mikrofon. Bitte erlauben Sie den Zugriff und versuchen Sie es erneut.",
            "microphone_denied",
            403,
        )
    except RecorderStateError as exc:
        return api_error(str(exc), "invalid_state", 409)
    except ValueError as exc:
        return api_error(str(exc), "phrase_missing", 400)
    return jsonify(session.to_dict())


@capture_bp.route("/api/capture/stop", methods=["POST"])
def stop_capture():
    session = get_services().session
    try:
        outcome = session.finish_capture()
    except RecorderStateError as exc:
        return api_error(str(exc), "invalid_state", 409)
    except CaptureError as exc:
        logger.error("Capture failed: %s", exc)
        return api_error("Die Aufnahme ist fehlgeschlagen.", "capture_failed", 500)
    except STTError as exc:
        return stt_error_response(exc)
    except ValueError as exc:
        return api_error(str(exc), "phrase_missing", 400)
    return jsonify(outcome.to_dict())
