"""
Audio capture state machine.

    IDLE -> REQUESTING_PERMISSION -> RECORDING -> STOPPED
                      \\                  \\
                       +-> ERROR          +-> ERROR (finalize failed)

A CaptureSource stands for the platform microphone API: open_stream() is
the permission request, the returned CaptureStream pushes ChunkEvents and
finally one FinalizeEvent into the recorder's event queue (from whatever
thread the platform calls back on). The recorder drains that queue on its
own control thread, so chunk order is exactly arrival order.

Usage:
    recorder = Recorder(SoundDeviceSource())
    recorder.start()
    ...
    blob = recorder.stop()     # AudioBlob, microphone already released
    recorder.reset()
"""

import logging
import queue
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from capture.codec import AudioBlob

logger = logging.getLogger(__name__)


class RecorderState(str, Enum):
    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    RECORDING = "recording"
    STOPPED = "stopped"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CaptureError(Exception):
    """Base exception for capture failures."""
    pass


class MicrophonePermissionError(CaptureError):
    """Microphone access was denied or no input device is usable."""
    pass


class RecorderStateError(CaptureError):
    """Operation is not valid in the recorder's current state."""
    pass


# ---------------------------------------------------------------------------
# Events + platform boundary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AudioChunk:
    data: bytes
    mime_type: str = ""


@dataclass(frozen=True)
class ChunkEvent:
    chunk: AudioChunk


@dataclass(frozen=True)
class FinalizeEvent:
    pass


CaptureEvent = Union[ChunkEvent, FinalizeEvent]


class CaptureStream(ABC):
    """A live microphone stream handed out after permission was granted."""

    @abstractmethod
    def start(self, emit: Callable[[CaptureEvent], None]) -> None:
        """Begin capturing; deliver events through ``emit``."""
        pass

    @abstractmethod
    def request_stop(self) -> None:
        """Ask the platform to finalize: flush chunks, then emit FinalizeEvent."""
        pass

    @abstractmethod
    def release(self) -> None:
        """Stop every underlying hardware track. Must be idempotent."""
        pass


class CaptureSource(ABC):
    """Platform microphone API."""

    @abstractmethod
    def open_stream(self) -> CaptureStream:
        """Request microphone access.

        Raises:
            MicrophonePermissionError: access denied or no device.
        """
        pass

    def is_available(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------

class Recorder:
    """Holds at most one in-flight capture session."""

    def __init__(
        self,
        source: CaptureSource,
        default_mime_type: str = "audio/wav",
        finalize_timeout_s: float = 5.0,
    ) -> None:
        self._source = source
        self._default_mime_type = default_mime_type
        self._finalize_timeout_s = finalize_timeout_s
        self._state = RecorderState.IDLE
        self._blob: Optional[AudioBlob] = None
        self._stream: Optional[CaptureStream] = None
        self._chunks: List[AudioChunk] = []
        self._events: "queue.Queue[CaptureEvent]" = queue.Queue()
        self._lock = threading.RLock()

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def audio_blob(self) -> Optional[AudioBlob]:
        return self._blob

    @property
    def buffered_chunks(self) -> int:
        return len(self._chunks)

    def start(self) -> None:
        """Request the microphone and begin buffering chunks.

        Raises:
            RecorderStateError: a session is already in progress.
            MicrophonePermissionError: access denied; state is ERROR.
        """
        with self._lock:
            if self._state in (RecorderState.REQUESTING_PERMISSION, RecorderState.RECORDING):
                raise RecorderStateError("A capture session is already in progress")

            self._state = RecorderState.REQUESTING_PERMISSION
            self._blob = None
            self._chunks = []
            self._events = queue.Queue()

            try:
                stream = self._source.open_stream()
            except MicrophonePermissionError as exc:
                logger.error("Error accessing microphone: %s", exc)
                self._state = RecorderState.ERROR
                raise
            except Exception as exc:
                logger.error("Error accessing microphone: %s", exc)
                self._state = RecorderState.ERROR
                raise MicrophonePermissionError(f"Microphone unavailable: {exc}") from exc

            self._stream = stream
            try:
                stream.start(self._events.put)
            except Exception as exc:
                logger.error("Could not start capture: %s", exc)
                self._release_stream()
                self._state = RecorderState.ERROR
                raise MicrophonePermissionError(f"Could not start capture: {exc}") from exc

            self._state = RecorderState.RECORDING
            logger.info("Recording started")

    def pump(self) -> None:
        """Move already-delivered events into the buffer without blocking.

        A FinalizeEvent the platform sends on its own (device unplugged)
        completes the session here.
        """
        with self._lock:
            if self._state != RecorderState.RECORDING:
                return
            while True:
                try:
                    event = self._events.get_nowait()
                except queue.Empty:
                    return
                if self._handle(event):
                    self._complete()
                    return

    def stop(self) -> Optional[AudioBlob]:
        """Finalize the session and return the audio; no-op unless RECORDING."""
        with self._lock:
            if self._state != RecorderState.RECORDING:
                return None
            try:
                self._stream.request_stop()
                self._drain_until_finalized()
            except CaptureError:
                self._state = RecorderState.ERROR
                self._release_stream()
                raise
            except Exception as exc:
                self._state = RecorderState.ERROR
                self._release_stream()
                raise CaptureError(f"Could not finalize capture: {exc}") from exc
            return self._complete()

    def reset(self) -> None:
        """Drop the produced audio and return to IDLE."""
        with self._lock:
            if self._state in (RecorderState.REQUESTING_PERMISSION, RecorderState.RECORDING):
                raise RecorderStateError("Cannot reset while a capture is in progress")
            self._blob = None
            self._chunks = []
            self._state = RecorderState.IDLE

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _handle(self, event: CaptureEvent) -> bool:
        """Buffer a chunk; return True on the finalize signal."""
        if isinstance(event, FinalizeEvent):
            return True
        self._chunks.append(event.chunk)
        return False

    def _drain_until_finalized(self) -> None:
        deadline = time.monotonic() + self._finalize_timeout_s
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise CaptureError("Timed out waiting for the capture to finalize")
            try:
                event = self._events.get(timeout=remaining)
            except queue.Empty:
                raise CaptureError("Timed out waiting for the capture to finalize")
            if self._handle(event):
                return

    def _complete(self) -> AudioBlob:
        # Free the microphone before anything happens to the data.
        self._release_stream()
        mime_type = self._chunks[0].mime_type if self._chunks else ""
        self._blob = AudioBlob(
            data=b"".join(chunk.data for chunk in self._chunks),
            mime_type=mime_type or self._default_mime_type,
        )
        self._chunks = []
        self._state = RecorderState.STOPPED
        logger.info("Recording stopped: %d bytes (%s)", len(self._blob), self._blob.mime_type)
        return self._blob

    def _release_stream(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.release()
        except Exception as exc:
            logger.warning("Failed to release capture stream: %s", exc)


__all__ = [
    "RecorderState",
    "CaptureError",
    "MicrophonePermissionError",
    "RecorderStateError",
    "AudioChunk",
    "ChunkEvent",
    "FinalizeEvent",
    "CaptureStream",
    "CaptureSource",
    "Recorder",
]
