"""
routes/health.py — liveness and readiness probes

GET /health/live   — 200 while the process runs
GET /health/ready  — 200 when store + credential are ready, else 503
"""

from flask import Blueprint, jsonify

from services.container import get_services

health_bp = Blueprint("health", __name__)


@health_bp.route("/health/live", methods=["GET"])
def live():
    result = get_services().health.liveness()
    return jsonify(result.__dict__), 200


@health_bp.route("/health/ready", methods=["GET"])
def ready():
    result = get_services().health.readiness()
    return jsonify(result.__dict__), 200 if result.healthy else 503
