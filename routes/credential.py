"""
routes/credential.py — the transcription service API key

GET    /api/credential  — {"configured": bool}; the key itself is never returned
PUT    /api/credential  — body {"api_key": "..."}
DELETE /api/credential  — forget the key (forces re-entry)
"""

import logging

from flask import Blueprint, jsonify, request

from routes import api_error
from services.container import get_services

logger = logging.getLogger(__name__)

credential_bp = Blueprint("credential", __name__)


@credential_bp.route("/api/credential", methods=["GET"])
def credential_status():
    return jsonify({"configured": bool(get_services().store.get_credential())})


@credential_bp.route("/api/credential", methods=["PUT", "POST"])
def set_credential():
    data = request.get_json(silent=True) or {}
    try:
        get_services().store.set_credential(data.get("api_key", ""))
    except ValueError:
        return api_error("Bitte geben Sie einen API-Schlüssel ein.", "credential_missing", 400)
    return jsonify({"configured": True})


@credential_bp.route("/api/credential", methods=["DELETE"])
def clear_credential():
    get_services().store.clear_credential()
    return "", 204
