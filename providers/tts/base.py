"""
Speech output abstract base class.

A SpeechSink speaks text through platform voices. Speaking is
fire-and-forget: speak() returns immediately and nothing reports
completion. cancel_all() drops whatever is queued or playing.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from providers.base import BaseProvider, ProviderError


@dataclass
class TTSVoice:
    id: str
    name: str
    language: str = "de-DE"
    gender: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "gender": self.gender,
            "description": self.description,
        }


@dataclass(frozen=True)
class Utterance:
    text: str
    lang: str = "de-DE"
    rate: float = 0.9
    voice_id: Optional[str] = None


class SpeechSink(BaseProvider):
    """Abstract base class for speech output (pyttsx3, test doubles, ...)."""

    @abstractmethod
    def list_voices(self) -> List[TTSVoice]:
        """Return the installed voices."""
        pass

    @abstractmethod
    def speak(self, utterance: Utterance) -> None:
        """Queue ``utterance`` for playback and return immediately."""
        pass

    @abstractmethod
    def cancel_all(self) -> None:
        """Stop the current utterance and drop pending ones."""
        pass

    def validate_text(self, text: str) -> None:
        if text is None:
            raise ValueError("Text cannot be None")
        if not isinstance(text, str):
            raise ValueError(f"Text must be str, got {type(text).__name__}")
        if not text.strip():
            raise ValueError("Text cannot be empty or whitespace-only")

    def is_available(self) -> bool:
        return self.get_info().get("status", "inactive") == "active"

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self._config.get("name", self.__class__.__name__),
            "status": "active",
            "available": True,
        }


class TTSError(ProviderError):
    """Speech output error."""
    pass


__all__ = ["SpeechSink", "TTSVoice", "Utterance", "TTSError"]
