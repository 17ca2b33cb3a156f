"""
services/session.py — one trainer session on the local microphone

When a capture stops, the audio goes down exactly one path, decided by the
active view:
  training     -> saved as a recording of the selected phrase
  recognition  -> transcribed
There is no way to stop a capture without committing it. The recorder is
reset after either path, whether it succeeded or not, so the next capture
can only begin once the previous one has settled.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from capture.recorder import Recorder, RecorderStateError
from services.transcription import TranscriptionService
from training.models import Phrase, StoredRecording
from training.store import TrainingStore

logger = logging.getLogger(__name__)


class View(str, Enum):
    TRAINING = "training"
    RECOGNITION = "recognition"


@dataclass
class CaptureOutcome:
    view: View
    recording: Optional[StoredRecording] = None
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"view": self.view.value}
        if self.recording is not None:
            data["recording"] = {
                "id": self.recording.id,
                "phraseId": self.recording.phrase_id,
                "mimeType": self.recording.mime_type,
            }
        if self.text is not None:
            data["text"] = self.text
        return data


class TrainerSession:
    def __init__(
        self,
        recorder: Recorder,
        store: TrainingStore,
        transcription: TranscriptionService,
    ) -> None:
        self.recorder = recorder
        self.store = store
        self.transcription = transcription
        self.view = View.RECOGNITION
        self._selected_phrase_id: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def selected_phrase(self) -> Optional[Phrase]:
        """The selected phrase, falling back to the first one when it is gone."""
        phrases = self.store.list_phrases()
        if not phrases:
            self._selected_phrase_id = None
            return None
        for phrase in phrases:
            if phrase.id == self._selected_phrase_id:
                return phrase
        self._selected_phrase_id = phrases[0].id
        return phrases[0]

    def select_phrase(self, phrase_id: int) -> Phrase:
        phrase = self.store.get_phrase(phrase_id)
        if phrase is None:
            raise KeyError(phrase_id)
        self._selected_phrase_id = phrase.id
        return phrase

    def set_view(self, view: View) -> None:
        self.view = View(view)

    def start_capture(self) -> None:
        """Raises MicrophonePermissionError / RecorderStateError from the recorder."""
        with self._lock:
            if self.view == View.TRAINING and self.selected_phrase is None:
                raise ValueError("No phrase selected for training")
            self.recorder.start()

    def finish_capture(self) -> CaptureOutcome:
        """Stop the capture and commit it to the active view's path."""
        with self._lock:
            blob = self.recorder.stop()
            if blob is None:
                raise RecorderStateError("No capture in progress")
            view = self.view
            try:
                if view == View.TRAINING:
                    phrase = self.selected_phrase
                    if phrase is None:
                        raise ValueError("No phrase selected for training")
                    return CaptureOutcome(view, recording=self.store.add_recording(phrase.id, blob))
                return CaptureOutcome(view, text=self.transcription.recognize(blob))
            finally:
                self.recorder.reset()

    def to_dict(self) -> Dict[str, Any]:
        phrase = self.selected_phrase
        return {
            "state": self.recorder.state.value,
            "view": self.view.value,
            "selected_phrase": phrase.to_dict() if phrase else None,
        }
