"""Test doubles shared by the suite: scripted microphone, recording speech sink, Gemini responses."""

from typing import List, Optional
from unittest.mock import MagicMock

from capture.recorder import (
    AudioChunk,
    CaptureSource,
    CaptureStream,
    ChunkEvent,
    FinalizeEvent,
    MicrophonePermissionError,
)
from providers.tts.base import SpeechSink, TTSVoice


# ---------------------------------------------------------------------------
# Capture doubles
# ---------------------------------------------------------------------------

class FakeStream(CaptureStream):
    """Scripted microphone stream.

    ``early`` chunks are emitted as soon as the stream starts, ``late`` ones
    when the recorder asks to stop, followed by the finalize signal unless
    ``finalize`` is False.
    """

    def __init__(self, early=(), late=(), finalize=True, fail_start=False):
        self.early = list(early)
        self.late = list(late)
        self.finalize = finalize
        self.fail_start = fail_start
        self.emit = None
        self.release_count = 0
        self.stop_requests = 0

    @property
    def released(self) -> bool:
        return self.release_count > 0

    def start(self, emit):
        if self.fail_start:
            raise RuntimeError("device busy")
        self.emit = emit
        for chunk in self.early:
            emit(ChunkEvent(chunk))

    def request_stop(self):
        self.stop_requests += 1
        for chunk in self.late:
            self.emit(ChunkEvent(chunk))
        if self.finalize:
            self.emit(FinalizeEvent())

    def release(self):
        self.release_count += 1


class FakeCaptureSource(CaptureSource):
    """Hands out FakeStreams; ``deny=True`` simulates a refused permission."""

    def __init__(self, chunks=None, deny=False):
        self.chunks = chunks if chunks is not None else [AudioChunk(b"RIFFfake", "audio/wav")]
        self.deny = deny
        self.streams: List[FakeStream] = []

    def open_stream(self):
        if self.deny:
            raise MicrophonePermissionError("Permission denied")
        stream = FakeStream(late=self.chunks)
        self.streams.append(stream)
        return stream


# ---------------------------------------------------------------------------
# Speech double
# ---------------------------------------------------------------------------

GERMAN_VOICES = [
    TTSVoice(id="de-anna", name="Anna (Female)", language="de-DE"),
    TTSVoice(id="de-markus", name="Markus (Male)", language="de-DE"),
    TTSVoice(id="en-david", name="David", language="en-US"),
]


class RecordingSink(SpeechSink):
    """SpeechSink that remembers utterances instead of playing them."""

    def __init__(self, voices: Optional[List[TTSVoice]] = None):
        super().__init__({"name": "recording"})
        self.voices = list(GERMAN_VOICES if voices is None else voices)
        self.spoken = []
        self.cancel_count = 0

    def list_voices(self):
        return list(self.voices)

    def speak(self, utterance):
        self.validate_text(utterance.text)
        self.spoken.append(utterance)

    def cancel_all(self):
        self.cancel_count += 1


# ---------------------------------------------------------------------------
# Gemini HTTP double
# ---------------------------------------------------------------------------

def gemini_response(text="Ich habe Durst.", status_code=200, body=None):
    """Build a fake requests.Response for a generateContent call."""
    resp = MagicMock()
    resp.status_code = status_code
    if body is None:
        body = {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}
    resp.json.return_value = body
    return resp


INVALID_KEY_BODY = {
    "error": {
        "code": 400,
        "message": "API key not valid. Please pass a valid API key.",
        "status": "INVALID_ARGUMENT",
        "details": [{"reason": "API_KEY_INVALID", "domain": "googleapis.com"}],
    }
}

