"""
Phrase/recording store — the trainer's data model on top of JSON slots.

Slots:
  phrases         list of phrase dicts (seeded on first start)
  recordings      list of stored recording dicts
  gemini-api-key  the transcription credential, a bare string

Removing a phrase never touches its recordings; readers have to tolerate
recordings whose phrase no longer exists.
"""

import logging
import time
import uuid
from collections import Counter
from typing import Dict, List, Optional

from capture.codec import AudioBlob, AudioDecodeError, encode
from services.playback import DisplayList, PlaybackHandles
from storage.slot_store import PersistentSlot, SlotStore
from training.models import PHRASE_LANGUAGES, Phrase, Recording, StoredRecording
from training.seed import SEED_PHRASES

logger = logging.getLogger(__name__)

PHRASES_SLOT = "phrases"
RECORDINGS_SLOT = "recordings"
CREDENTIAL_SLOT = "gemini-api-key"


class TrainingStore:
    def __init__(self, slot_store: SlotStore, seed_phrases: Optional[List[Dict]] = None) -> None:
        self._phrases: PersistentSlot[List[Dict]] = PersistentSlot(
            slot_store,
            PHRASES_SLOT,
            SEED_PHRASES if seed_phrases is None else seed_phrases,
            expected_type=list,
        )
        self._recordings: PersistentSlot[List[Dict]] = PersistentSlot(
            slot_store, RECORDINGS_SLOT, list, expected_type=list
        )
        self._credential: PersistentSlot[Optional[str]] = PersistentSlot(
            slot_store, CREDENTIAL_SLOT, None, expected_type=str
        )

    # ------------------------------------------------------------------
    # Phrases
    # ------------------------------------------------------------------

    def list_phrases(self) -> List[Phrase]:
        phrases = []
        for item in self._phrases.load() or []:
            try:
                phrases.append(Phrase.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed phrase %r: %s", item, exc)
        return phrases

    def phrase_index(self) -> Dict[int, Phrase]:
        return {p.id: p for p in self.list_phrases()}

    def get_phrase(self, phrase_id: int) -> Optional[Phrase]:
        return self.phrase_index().get(phrase_id)

    def add_phrase(self, text: str, lang: str = "de") -> Phrase:
        """Prepend a new phrase; the id is the creation time in ms."""
        text = (text or "").strip()
        if not text:
            raise ValueError("Phrase text cannot be empty")
        if lang not in PHRASE_LANGUAGES:
            raise ValueError(f"lang must be one of {PHRASE_LANGUAGES}, got {lang!r}")

        existing = set(self.phrase_index())
        phrase_id = int(time.time() * 1000)
        while phrase_id in existing:
            phrase_id += 1

        phrase = Phrase(id=phrase_id, text=text, lang=lang)
        self._phrases.mutate(lambda items: [phrase.to_dict()] + list(items or []))
        logger.info("Added phrase %d: %s", phrase.id, phrase.text)
        return phrase

    def remove_phrase(self, phrase_id: int) -> bool:
        """Drop a phrase from the list. Its recordings stay (orphaned)."""
        if phrase_id not in self.phrase_index():
            return False
        self._phrases.mutate(
            lambda items: [p for p in items or [] if p.get("id") != phrase_id]
        )
        logger.info("Removed phrase %d", phrase_id)
        return True

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    def list_recordings(self, phrase_id: Optional[int] = None) -> List[StoredRecording]:
        recordings = []
        for item in self._recordings.load() or []:
            try:
                rec = StoredRecording.from_dict(item)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed recording entry: %s", exc)
                continue
            if phrase_id is None or rec.phrase_id == phrase_id:
                recordings.append(rec)
        return recordings

    def add_recording(self, phrase_id: int, blob: AudioBlob) -> StoredRecording:
        """Persist a finished capture as a training recording for ``phrase_id``."""
        recording = StoredRecording(
            id=str(uuid.uuid4()),
            phrase_id=phrase_id,
            audio_base64=encode(blob),
            mime_type=blob.mime_type,
        )
        self._recordings.mutate(lambda items: list(items or []) + [recording.to_dict()])
        logger.info("Saved recording %s for phrase %d (%d bytes)", recording.id, phrase_id, len(blob))
        return recording

    def delete_recording(self, recording_id: str) -> bool:
        if not any(r.id == recording_id for r in self.list_recordings()):
            return False
        self._recordings.mutate(
            lambda items: [r for r in items or [] if r.get("id") != recording_id]
        )
        logger.info("Deleted recording %s", recording_id)
        return True

    def count_by_phrase(self) -> Dict[int, int]:
        return dict(Counter(r.phrase_id for r in self.list_recordings()))

    def display_recordings(
        self,
        handles: PlaybackHandles,
        display: DisplayList,
        phrase_id: Optional[int] = None,
    ) -> List[Recording]:
        """Decode recordings for playback, replacing the previous display list.

        Each record is decoded on its own; a corrupt one is logged and left out.
        """
        recordings = []
        for stored in self.list_recordings(phrase_id):
            try:
                blob = stored.decode_audio()
            except AudioDecodeError as exc:
                logger.error("Failed to decode recording %s: %s", stored.id, exc)
                continue
            recordings.append(
                Recording(
                    id=stored.id,
                    phrase_id=stored.phrase_id,
                    audio_blob=blob,
                    audio_url=handles.create(blob),
                )
            )
        display.replace([r.audio_url for r in recordings])
        return recordings

    # ------------------------------------------------------------------
    # Credential
    # ------------------------------------------------------------------

    def get_credential(self) -> Optional[str]:
        value = self._credential.load()
        return value if isinstance(value, str) and value else None

    def set_credential(self, key: str) -> None:
        key = (key or "").strip()
        if not key:
            raise ValueError("API key cannot be empty")
        self._credential.set(key)
        logger.info("Transcription credential stored")

    def clear_credential(self) -> None:
        self._credential.clear()
        logger.info("Transcription credential cleared")
