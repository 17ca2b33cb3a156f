"""
routes/recordings.py — training recordings and their playback

GET    /api/recordings[?phrase_id=N] — decoded recordings with playback URLs;
                                       URLs from the previous listing are released
POST   /api/recordings               — multipart: audio file + phrase_id
DELETE /api/recordings/<id>
GET    /api/audio/<token>            — play one decoded recording
"""

import logging

from flask import Blueprint, Response, jsonify, request

from routes import api_error, read_audio_upload
from services.container import get_services

logger = logging.getLogger(__name__)

recordings_bp = Blueprint("recordings", __name__)


@recordings_bp.route("/api/recordings", methods=["GET"])
def list_recordings():
    services = get_services()
    phrase_id = request.args.get("phrase_id", type=int)
    recordings = services.store.display_recordings(services.handles, services.display, phrase_id)
    return jsonify({"recordings": [r.to_dict() for r in recordings]})


@recordings_bp.route("/api/recordings", methods=["POST"])
def save_recording():
    phrase_id = request.form.get("phrase_id", type=int)
    if phrase_id is None:
        return api_error("Missing or invalid 'phrase_id'", "phrase_missing", 400)
    blob, error = read_audio_upload()
    if error:
        return error
    recording = get_services().store.add_recording(phrase_id, blob)
    return jsonify({
        "id": recording.id,
        "phraseId": recording.phrase_id,
        "mimeType": recording.mime_type,
    }), 201


@recordings_bp.route("/api/recordings/<recording_id>", methods=["DELETE"])
def delete_recording(recording_id):
    if not get_services().store.delete_recording(recording_id):
        return api_error(f"Recording '{recording_id}' not found", "not_found", 404)
    return "", 204


@recordings_bp.route("/api/audio/<token>", methods=["GET"])
def play_audio(token):
    blob = get_services().handles.resolve(token)
    if blob is None:
        return api_error("Audio handle expired", "not_found", 404)
    return Response(blob.data, mimetype=blob.mime_type or "application/octet-stream")
