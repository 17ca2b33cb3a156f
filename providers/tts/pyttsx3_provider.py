"""
Platform voices via pyttsx3 (SAPI5 / NSSpeechSynthesizer / eSpeak).

pyttsx3's runAndWait() blocks, so utterances are played by one worker
thread that owns the loop; speak() only enqueues.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Dict, List, Optional, Tuple

import pyttsx3

from providers.registry import ProviderType, registry
from providers.tts.base import SpeechSink, TTSError, TTSVoice, Utterance

logger = logging.getLogger(__name__)


def _language_tag(languages: Any) -> str:
    """Normalize a pyttsx3 language entry to a BCP-47-ish tag ('de-DE').

    eSpeak reports bytes prefixed with a priority byte (b'\\x05de'),
    SAPI and NSSpeech report strings like 'de_DE'.
    """
    for lang in languages or []:
        if isinstance(lang, bytes):
            lang = lang.decode("latin-1")
        tag = "".join(ch for ch in str(lang) if ch.isprintable()).strip()
        if tag:
            return tag.replace("_", "-")
    return ""


def _to_voice(v: Any) -> TTSVoice:
    return TTSVoice(
        id=v.id,
        name=v.name or v.id,
        language=_language_tag(getattr(v, "languages", None)),
        gender=(getattr(v, "gender", None) or None),
    )


class Pyttsx3Sink(SpeechSink):
    """Fire-and-forget speech through the machine's installed voices.

    The engine is created, queried and driven only by the worker thread;
    SAPI5 and NSSpeech objects are bound to the thread that created them.
    Other threads talk to it through the job queue and the cancel
    generation counter.
    """

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self.driver = self._config.get("driver") or None
        # pyttsx3 rate is words per minute; Utterance.rate scales this.
        self.base_rate = int(self._config.get("base_rate", 200))
        self.startup_timeout_s = float(self._config.get("startup_timeout_s", 5.0))
        self._jobs: "queue.Queue[Tuple[int, Utterance]]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._worker_lock = threading.Lock()
        self._ready = threading.Event()
        self._generation = 0
        self._speaking_generation: Optional[int] = None
        # Set by the worker only.
        self._engine = None
        self._engine_error: Optional[TTSError] = None
        self._voices: List[TTSVoice] = []

    # ------------------------------------------------------------------
    # Request-thread side
    # ------------------------------------------------------------------

    def _wait_ready(self) -> None:
        self._ensure_worker()
        if not self._ready.wait(self.startup_timeout_s):
            raise TTSError("pyttsx3", "Speech engine did not start in time")
        if self._engine_error is not None:
            raise self._engine_error

    def list_voices(self) -> List[TTSVoice]:
        self._wait_ready()
        return list(self._voices)

    def speak(self, utterance: Utterance) -> None:
        self.validate_text(utterance.text)
        with self._worker_lock:
            generation = self._generation
        self._jobs.put((generation, utterance))
        self._ensure_worker()

    def cancel_all(self) -> None:
        """Drop queued utterances; the worker stops the one playing at its next word."""
        with self._worker_lock:
            self._generation += 1
        dropped = 0
        while True:
            try:
                self._jobs.get_nowait()
                dropped += 1
            except queue.Empty:
                break
        if dropped:
            logger.debug("Cancelled %d pending utterance(s)", dropped)

    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(target=self._run, name="speech-output", daemon=True)
                self._worker.start()

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _start_engine(self) -> None:
        try:
            engine = pyttsx3.init(self.driver)
            self._voices = [_to_voice(v) for v in engine.getProperty("voices") or []]
        except Exception as exc:
            self._engine_error = TTSError("pyttsx3", f"Speech engine unavailable: {exc}")
            logger.error("pyttsx3 engine failed to start: %s", exc)
            return
        engine.connect("started-word", self._on_word)
        self._engine = engine
        logger.info("pyttsx3 engine initialised (driver=%s)", self.driver or "default")

    def _on_word(self, name, location, length) -> None:
        # Runs inside runAndWait() on the worker thread.
        if self._speaking_generation is not None and self._speaking_generation != self._generation:
            self._engine.stop()

    def _run(self) -> None:
        self._start_engine()
        self._ready.set()
        while True:
            generation, utterance = self._jobs.get()
            if self._engine is None or generation != self._generation:
                continue
            try:
                self._speaking_generation = generation
                if utterance.voice_id:
                    self._engine.setProperty("voice", utterance.voice_id)
                self._engine.setProperty("rate", int(self.base_rate * utterance.rate))
                self._engine.say(utterance.text)
                self._engine.runAndWait()
            except Exception as exc:
                # Nobody waits on an utterance; log and keep the worker alive.
                logger.error("Speech output failed: %s", exc)
            finally:
                self._speaking_generation = None

    def is_available(self) -> bool:
        try:
            self._wait_ready()
            return True
        except TTSError:
            return False

    def get_info(self) -> Dict[str, Any]:
        available = self.is_available()
        return {
            "name": self._config.get("name", "Platform voices (pyttsx3)"),
            "driver": self.driver or "default",
            "status": "active" if available else "inactive",
            "available": available,
        }


# Auto-register when this module is imported
registry.register(ProviderType.TTS, "pyttsx3", Pyttsx3Sink)
