"""
pytest fixtures for the voice trainer test suite.

Modules are tested in isolation where possible; endpoint tests use a Flask
test client built by create_app() with a temp data dir, a scripted capture
source and a speech sink that only records what it was asked to say.
"""

import os
import random
import sys

import pytest

# Ensure project root is on sys.path so imports work
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tests.fakes import FakeCaptureSource, RecordingSink  # noqa: E402


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def slot_store(data_dir):
    from storage.slot_store import SlotStore
    return SlotStore(data_dir)


@pytest.fixture
def store(slot_store):
    from training.store import TrainingStore
    return TrainingStore(slot_store)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def capture_source():
    return FakeCaptureSource()


@pytest.fixture
def speech_sink():
    return RecordingSink()


@pytest.fixture
def trainer_config(monkeypatch):
    """A Config read with no credential in the environment."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("DATA_DIR", raising=False)
    from config.loader import Config
    return Config()


@pytest.fixture
def flask_app(trainer_config, data_dir, capture_source, speech_sink, rng):
    """Return a configured Flask test app via the create_app() factory."""
    from app import create_app
    return create_app(
        config_override={
            "TESTING": True,
            "RATELIMIT_ENABLED": False,
            "DATA_DIR": str(data_dir),
            "CAPTURE_SOURCE": capture_source,
            "SPEECH_SINK": speech_sink,
            "RNG": rng,
            "SERVER_CAPTURE": True,
        },
        cfg=trainer_config,
    )


@pytest.fixture
def client(flask_app):
    """Return a Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def services(flask_app):
    from services.container import EXTENSION_KEY
    return flask_app.extensions[EXTENSION_KEY]

