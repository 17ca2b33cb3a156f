"""
Local microphone capture via sounddevice (PortAudio).

Behaves like a browser MediaRecorder started without a timeslice: PCM
frames are buffered internally and handed over as a single WAV chunk when
the recorder asks for finalization.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Callable, List, Optional

import numpy as np
import soundfile as sf

from capture.recorder import (
    AudioChunk,
    CaptureEvent,
    CaptureSource,
    CaptureStream,
    ChunkEvent,
    FinalizeEvent,
    MicrophonePermissionError,
)

logger = logging.getLogger(__name__)

_WAV_MIME = "audio/wav"


def _sounddevice():
    # Importing sounddevice loads PortAudio.
    try:
        import sounddevice as sd  # type: ignore
    except (ImportError, OSError) as exc:
        raise MicrophonePermissionError(f"sounddevice unavailable: {exc}") from exc
    return sd


class SoundDeviceStream(CaptureStream):
    def __init__(self, sd: Any, sample_rate: int, channels: int, device: Any = None) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._frames: List[np.ndarray] = []
        self._emit: Optional[Callable[[CaptureEvent], None]] = None
        self._released = False
        self._input = sd.InputStream(
            samplerate=sample_rate,
            channels=channels,
            dtype="int16",
            device=device,
            callback=self._on_audio,
        )

    def _on_audio(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("Input stream status: %s", status)
        self._frames.append(indata.copy())

    def start(self, emit: Callable[[CaptureEvent], None]) -> None:
        self._emit = emit
        self._input.start()

    def request_stop(self) -> None:
        # stop() returns once pending callbacks have run, so _frames is final.
        self._input.stop()
        self._emit(ChunkEvent(AudioChunk(self.to_wav(), _WAV_MIME)))
        self._emit(FinalizeEvent())

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._input.close()

    def to_wav(self) -> bytes:
        if self._frames:
            pcm = np.concatenate(self._frames)
        else:
            pcm = np.zeros((0, self.channels), dtype="int16")
        buf = io.BytesIO()
        sf.write(buf, pcm, self.sample_rate, format="WAV", subtype="PCM_16")
        return buf.getvalue()


class SoundDeviceSource(CaptureSource):
    """Default input device of the machine running the service."""

    def __init__(self, sample_rate: int = 16000, channels: int = 1, device: Any = None) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device

    def open_stream(self) -> CaptureStream:
        sd = _sounddevice()
        try:
            sd.check_input_settings(
                device=self.device,
                channels=self.channels,
                samplerate=self.sample_rate,
                dtype="int16",
            )
            stream = SoundDeviceStream(sd, self.sample_rate, self.channels, self.device)
        except (sd.PortAudioError, ValueError) as exc:
            raise MicrophonePermissionError(f"No usable input device: {exc}") from exc
        logger.info("Microphone opened (%d Hz, %d ch)", self.sample_rate, self.channels)
        return stream

    def is_available(self) -> bool:
        try:
            sd = _sounddevice()
            sd.check_input_settings(device=self.device, channels=self.channels)
            return True
        except Exception:
            return False
