"""
Training data model: phrases, stored recordings and their display form.

Stored shapes use the camelCase keys of the persisted JSON slots:
  phrases:    [{"id": 1, "text": "Ich habe Durst.", "lang": "de"}, ...]
  recordings: [{"id": "<uuid>", "phraseId": 1, "audioBase64": "...", "mimeType": "audio/webm"}, ...]
"""

from dataclasses import dataclass
from typing import Any, Dict

from capture.codec import AudioBlob, decode

PHRASE_LANGUAGES = ("de", "ch")


@dataclass(frozen=True)
class Phrase:
    id: int
    text: str
    lang: str = "de"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Phrase":
        return cls(id=int(data["id"]), text=str(data["text"]), lang=data.get("lang", "de"))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "lang": self.lang}


@dataclass(frozen=True)
class StoredRecording:
    id: str
    phrase_id: int
    audio_base64: str
    mime_type: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredRecording":
        return cls(
            id=str(data["id"]),
            phrase_id=int(data["phraseId"]),
            audio_base64=data.get("audioBase64", ""),
            mime_type=data.get("mimeType", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "phraseId": self.phrase_id,
            "audioBase64": self.audio_base64,
            "mimeType": self.mime_type,
        }

    def decode_audio(self) -> AudioBlob:
        """Raises AudioDecodeError when the stored text is corrupt."""
        return decode(self.audio_base64, self.mime_type)


@dataclass(frozen=True)
class Recording:
    """Display form: decoded audio plus a transient playback URL."""
    id: str
    phrase_id: int
    audio_blob: AudioBlob
    audio_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "phraseId": self.phrase_id,
            "mimeType": self.audio_blob.mime_type,
            "size": len(self.audio_blob),
            "audioUrl": self.audio_url,
        }


@dataclass(frozen=True)
class TrainingExample:
    """Prior audio and the text it should have been transcribed to."""
    audio: AudioBlob
    text: str
