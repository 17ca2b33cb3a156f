#!/usr/bin/env python3
"""
Voice Trainer Server — Entry Point

Loads .env, configures logging and starts the Flask app built by
app.create_app(). All HTTP endpoints live in the blueprints under routes/.

Start:
    python3 server.py

Environment (see config/loader.py for the full list):
    GEMINI_API_KEY  seeds the transcription credential on first start
    PORT / HOST     bind address (default 127.0.0.1:5050)
    DATA_DIR        where the JSON slots are kept
"""

import faulthandler
import logging
import os
import signal
from pathlib import Path

from dotenv import load_dotenv

faulthandler.enable()  # print traceback on hard crashes (SIGSEGV etc.)

# Load environment variables before the config singleton is imported
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from config.loader import config  # noqa: E402

logging.basicConfig(
    level=getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from app import create_app  # noqa: E402

app = create_app()


if __name__ == "__main__":
    port = int(config.get("server.port", 5050))
    host = config.get("server.host", "127.0.0.1")

    # Clean SIGTERM shutdown so systemd stop/restart works correctly.
    def _handle_sigterm(signum, frame):
        logger.info("SIGTERM received — shutting down.")
        os._exit(0)

    signal.signal(signal.SIGTERM, _handle_sigterm)

    logger.info(f"Voice trainer starting on port {port}")
    logger.info(f"  Health    → http://{host}:{port}/health/ready")
    logger.info(f"  Phrases   → http://{host}:{port}/api/phrases")

    app.run(host=host, port=port, debug=False, threaded=True)
