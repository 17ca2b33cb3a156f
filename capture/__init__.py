"""Audio capture: recorder state machine and the binary <-> text codec."""

from capture.codec import AudioBlob, AudioDecodeError, decode, encode, encode_many
from capture.recorder import (
    AudioChunk,
    CaptureError,
    CaptureSource,
    CaptureStream,
    ChunkEvent,
    FinalizeEvent,
    MicrophonePermissionError,
    Recorder,
    RecorderState,
    RecorderStateError,
)

__all__ = [
    "AudioBlob",
    "AudioDecodeError",
    "decode",
    "encode",
    "encode_many",
    "AudioChunk",
    "CaptureError",
    "CaptureSource",
    "CaptureStream",
    "ChunkEvent",
    "FinalizeEvent",
    "MicrophonePermissionError",
    "Recorder",
    "RecorderState",
    "RecorderStateError",
]
