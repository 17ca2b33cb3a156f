"""
services/container.py — wiring of the trainer's long-lived objects

create_app() builds one TrainerServices and stores it in
``app.extensions["voice_trainer"]``; route handlers reach it through
get_services(). Tests inject fakes through the Flask config:

    SPEECH_SINK     SpeechSink instance (default: registry 'speech.provider')
    CAPTURE_SOURCE  CaptureSource instance (default: SoundDeviceSource)
    RNG             random.Random used for example sampling
    DATA_DIR        slot directory (default: config storage.data_dir)
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from flask import current_app

from capture.recorder import CaptureSource, Recorder
from capture.sounddevice_source import SoundDeviceSource
from config.loader import Config
from providers.registry import ProviderType, registry
from providers.tts.base import SpeechSink
from services.health import HealthChecker
from services.paths import resolve_data_dir
from services.playback import DisplayList, PlaybackHandles
from services.session import TrainerSession
from services.transcription import TranscriptionService
from services.voice_output import VoiceOutput
from storage.slot_store import SlotStore
from training.store import TrainingStore

logger = logging.getLogger(__name__)

EXTENSION_KEY = "voice_trainer"


@dataclass
class TrainerServices:
    slot_store: SlotStore
    store: TrainingStore
    handles: PlaybackHandles
    display: DisplayList
    transcription: TranscriptionService
    voice_output: Optional[VoiceOutput]
    session: TrainerSession
    health: HealthChecker
    capture_enabled: bool = False
    default_gender: str = "male"


def _speech_sink(cfg: Config, app_config: Mapping[str, Any]) -> Optional[SpeechSink]:
    if app_config.get("SPEECH_SINK") is not None:
        return app_config["SPEECH_SINK"]
    provider_id = cfg.get("speech.provider")
    try:
        return registry.get_provider(ProviderType.TTS, provider_id)
    except ValueError as exc:
        logger.warning("Speech output disabled: %s", exc)
        return None


def _capture_source(cfg: Config, app_config: Mapping[str, Any]) -> CaptureSource:
    if app_config.get("CAPTURE_SOURCE") is not None:
        return app_config["CAPTURE_SOURCE"]
    return SoundDeviceSource(
        sample_rate=int(cfg.get("capture.sample_rate", 16000)),
        channels=int(cfg.get("capture.channels", 1)),
    )


def build_services(cfg: Config, app_config: Mapping[str, Any]) -> TrainerServices:
    data_dir = resolve_data_dir(app_config.get("DATA_DIR") or cfg.get("storage.data_dir"))
    slot_store = SlotStore(data_dir)
    store = TrainingStore(slot_store)
    logger.info("Training data in %s", data_dir)

    seed_key = cfg.get("transcription.api_key")
    if seed_key and not store.get_credential():
        store.set_credential(seed_key)

    transcription_cfg = cfg.section("transcription")
    transcription = TranscriptionService(
        store,
        provider_id=transcription_cfg.pop("provider", "gemini"),
        provider_config={
            k: v
            for k, v in transcription_cfg.items()
            if k in ("model", "base_url", "timeout_s", "encode_workers")
        },
        max_examples=int(transcription_cfg.get("max_examples", 5)),
        rng=app_config.get("RNG") or random.Random(),
    )

    sink = _speech_sink(cfg, app_config)
    voice_output = None
    if sink is not None:
        voice_output = VoiceOutput(
            sink,
            language_prefix=cfg.get("speech.language_prefix", "de"),
            locale=cfg.get("speech.locale", "de-DE"),
            rate=float(cfg.get("speech.rate", 0.9)),
        )

    recorder = Recorder(
        _capture_source(cfg, app_config),
        default_mime_type=cfg.get("capture.default_mime_type", "audio/wav"),
        finalize_timeout_s=float(cfg.get("capture.finalize_timeout_s", 5.0)),
    )
    capture_enabled = app_config.get("SERVER_CAPTURE")
    if capture_enabled is None:
        capture_enabled = cfg.flag("server_capture")

    handles = PlaybackHandles()
    services = TrainerServices(
        slot_store=slot_store,
        store=store,
        handles=handles,
        display=DisplayList(handles),
        transcription=transcription,
        voice_output=voice_output,
        session=TrainerSession(recorder, store, transcription),
        health=HealthChecker(),
        capture_enabled=bool(capture_enabled),
        default_gender=cfg.get("speech.default_gender", "male"),
    )
    services.health.services = services
    return services


def get_services() -> TrainerServices:
    """Return the TrainerServices of the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]
