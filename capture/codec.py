"""
Binary <-> text codec for audio blobs.

Stored recordings keep their audio as base64 text so the whole collection
can live in one JSON slot; the remote transcription API takes inline audio
the same way.

Usage:
    from capture.codec import AudioBlob, encode, decode

    text = encode(blob)
    same = decode(text, blob.mime_type)   # same == blob
"""

import base64
import binascii
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Sequence


@dataclass(frozen=True)
class AudioBlob:
    """Finished audio object: raw container bytes plus their MIME type."""
    data: bytes
    mime_type: str = ""

    def __len__(self) -> int:
        return len(self.data)


class AudioDecodeError(ValueError):
    """Stored audio text is not valid base64."""
    pass


def encode(blob: AudioBlob) -> str:
    """Return the standard base64 text of the blob's exact bytes."""
    return base64.b64encode(blob.data).decode("ascii")


def decode(text: str, mime_type: str) -> AudioBlob:
    """Rebuild a byte-identical blob tagged with ``mime_type``.

    Raises:
        AudioDecodeError: if ``text`` is not a string of valid base64.
    """
    if not isinstance(text, str):
        raise AudioDecodeError(f"Expected base64 text, got {type(text).__name__}")
    try:
        data = base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise AudioDecodeError(f"Invalid base64 audio payload: {exc}") from exc
    return AudioBlob(data=data, mime_type=mime_type)


def encode_many(blobs: Sequence[AudioBlob], max_workers: int = 4) -> List[str]:
    """Encode several blobs concurrently; results keep the input order."""
    if not blobs:
        return []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        return list(pool.map(encode, blobs))


__all__ = ["AudioBlob", "AudioDecodeError", "encode", "decode", "encode_many"]
