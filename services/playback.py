"""
Transient playback handles for decoded audio.

A handle is a short-lived URL (``/api/audio/<token>``) that serves one
decoded blob, the server-side equivalent of a browser object URL. Handles
are owned by the display list that created them and are revoked when that
list is replaced, so rendering the recordings over and over does not pile
up decoded audio in memory.
"""

import logging
import secrets
import threading
from typing import Dict, List, Optional

from capture.codec import AudioBlob

logger = logging.getLogger(__name__)

URL_PREFIX = "/api/audio/"


class PlaybackHandles:
    """Token -> blob map with explicit release."""

    def __init__(self) -> None:
        self._blobs: Dict[str, AudioBlob] = {}
        self._lock = threading.Lock()

    def create(self, blob: AudioBlob) -> str:
        token = secrets.token_urlsafe(16)
        with self._lock:
            self._blobs[token] = blob
        return URL_PREFIX + token

    def resolve(self, token: str) -> Optional[AudioBlob]:
        with self._lock:
            return self._blobs.get(token)

    def revoke(self, url: str) -> None:
        token = url[len(URL_PREFIX):] if url.startswith(URL_PREFIX) else url
        with self._lock:
            self._blobs.pop(token, None)

    def revoke_all(self) -> None:
        with self._lock:
            self._blobs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)


class DisplayList:
    """The currently rendered recordings and the handles they hold."""

    def __init__(self, handles: PlaybackHandles) -> None:
        self._handles = handles
        self._urls: List[str] = []
        self._lock = threading.Lock()

    def replace(self, urls: List[str]) -> None:
        """Adopt ``urls`` as the new list, releasing the previous one first."""
        with self._lock:
            previous, self._urls = self._urls, list(urls)
        for url in previous:
            self._handles.revoke(url)
        if previous:
            logger.debug("Released %d playback handles", len(previous))

    def discard(self) -> None:
        self.replace([])

    def __len__(self) -> int:
        return len(self._urls)
