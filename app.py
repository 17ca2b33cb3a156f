"""
Flask application factory for the dysarthria voice trainer.

Usage:
    from app import create_app
    app = create_app()

The factory wires the trainer services (slot store, recorder, transcription,
speech output), registers every blueprint and accepts a config_override
dict so tests can inject a temp data dir, fake capture source or a
recording speech sink.
"""
import logging
import os
import secrets

from flask import Flask, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import RequestEntityTooLarge

from config.loader import config as default_config
from providers.registry import registry
from services.container import EXTENSION_KEY, build_services

logger = logging.getLogger(__name__)

# Upper bound for one audio upload.
_MAX_UPLOAD_BYTES = 25 * 1024 * 1024  # 25 MB


def create_app(config_override: dict = None, cfg=None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_override: Optional dict of Flask config values to apply.
                         Primarily used in tests (TESTING, DATA_DIR,
                         SPEECH_SINK, CAPTURE_SOURCE, RNG, SERVER_CAPTURE).
        cfg:             Optional Config instance; defaults to the module
                         singleton from config.loader.

    Returns:
        Flask: the configured app.
    """
    cfg = cfg or default_config
    app = Flask(__name__, static_folder=None)

    secret_key = os.getenv("SECRET_KEY")
    if not secret_key:
        secret_key = secrets.token_hex(32)
        logger.debug("No SECRET_KEY set — generated a random key for this process")
    app.config["SECRET_KEY"] = secret_key
    app.config["MAX_CONTENT_LENGTH"] = _MAX_UPLOAD_BYTES

    # Apply test / caller overrides last so they take precedence
    if config_override:
        app.config.update(config_override)

    # The browser front end may be served from a dev server on another port.
    _extra_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
    CORS(app, origins=[
        r"^http://localhost:\d+$",
        r"^http://127\.0\.0\.1:\d+$",
        *_extra_origins,
    ])

    # ── Rate limiting ─────────────────────────────────────────────────────────
    # Recognition hits the paid remote API: stricter limit on that blueprint.
    # Disable for tests: config_override={'RATELIMIT_ENABLED': False}.
    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[os.getenv("RATELIMIT_DEFAULT", "200 per minute")],
        storage_uri="memory://",
    )
    app.limiter = limiter

    # Import provider modules listed in config/providers.yaml
    registry.autodiscover()

    app.extensions[EXTENSION_KEY] = build_services(cfg, app.config)

    from routes.capture import capture_bp
    from routes.credential import credential_bp
    from routes.health import health_bp
    from routes.phrases import phrases_bp
    from routes.recognition import recognition_bp
    from routes.recordings import recordings_bp
    from routes.speech import speech_bp

    limiter.limit(os.getenv("RATELIMIT_RECOGNIZE", "20 per minute"))(recognition_bp)

    for blueprint in (
        health_bp,
        credential_bp,
        phrases_bp,
        recordings_bp,
        recognition_bp,
        speech_bp,
        capture_bp,
    ):
        app.register_blueprint(blueprint)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_exc):
        return jsonify({"error": "Audio upload too large", "code": "payload_too_large"}), 413

    # ── Security headers ──────────────────────────────────────────────────────
    @app.after_request
    def add_security_headers(response):
        """Add HTTP security headers to every response."""
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        # Only the microphone is allowed.
        response.headers.setdefault(
            "Permissions-Policy", "camera=(), microphone=(self), geolocation=()"
        )
        return response

    return app
