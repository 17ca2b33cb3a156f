"""
routes/phrases.py — trainable phrases

GET    /api/phrases        — all phrases plus recording counts per phrase
POST   /api/phrases        — body {"text": "...", "lang": "de"|"ch"}; new phrase is listed first
DELETE /api/phrases/<id>   — remove a phrase; its recordings are kept
"""

import logging

from flask import Blueprint, jsonify, request

from routes import api_error
from services.container import get_services

logger = logging.getLogger(__name__)

phrases_bp = Blueprint("phrases", __name__)


@phrases_bp.route("/api/phrases", methods=["GET"])
def list_phrases():
    store = get_services().store
    counts = store.count_by_phrase()
    return jsonify({
        "phrases": [
            {**p.to_dict(), "recordings": counts.get(p.id, 0)}
            for p in store.list_phrases()
        ],
    })


@phrases_bp.route("/api/phrases", methods=["POST"])
def add_phrase():
    data = request.get_json(silent=True)
    if not data:
        return api_error("Request body must be JSON", "invalid_body", 400)
    try:
        phrase = get_services().store.add_phrase(data.get("text", ""), data.get("lang", "de"))
    except ValueError as exc:
        return api_error(str(exc), "invalid_phrase", 400)
    return jsonify(phrase.to_dict()), 201


@phrases_bp.route("/api/phrases/<int:phrase_id>", methods=["DELETE"])
def remove_phrase(phrase_id):
    if not get_services().store.remove_phrase(phrase_id):
        return api_error(f"Phrase {phrase_id} not found", "not_found", 404)
    return "", 204
