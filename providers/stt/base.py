"""
STT provider abstract base class and the transcription error taxonomy.

  STTError
   ├── CredentialError          no credential configured (raised before any network call)
   ├── InvalidCredentialError   the service rejected the credential
   └── TranscriptionError       anything else: network, quota, malformed response
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from providers.base import BaseProvider, ProviderError


@dataclass
class TranscriptionResult:
    text: str
    language: str = "de"
    duration_ms: float = 0.0
    provider: str = ""
    model: str = ""
    example_count: int = 0
    raw_response: Optional[Dict] = field(default=None, repr=False)


class STTProvider(BaseProvider):
    """Abstract base class for speech-to-text providers."""

    @abstractmethod
    def transcribe(
        self,
        audio_data: bytes,
        language: Optional[str] = None,
        **kwargs,
    ) -> TranscriptionResult:
        """Transcribe audio bytes to text."""
        pass

    def list_languages(self) -> List[str]:
        return self._config.get("languages", ["de-DE", "de-CH"])

    def is_available(self) -> bool:
        return self.get_info().get("status", "inactive") == "active"

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self._config.get("name", self.__class__.__name__),
            "languages": self.list_languages(),
            "status": "active",
        }


class STTError(ProviderError):
    """STT-specific provider error."""
    pass


class CredentialError(STTError):
    """No credential is configured for the transcription service."""
    pass


class InvalidCredentialError(STTError):
    """The transcription service rejected the configured credential."""
    pass


class TranscriptionError(STTError):
    """Any other failure talking to the transcription service."""
    pass


__all__ = [
    "STTProvider",
    "TranscriptionResult",
    "STTError",
    "CredentialError",
    "InvalidCredentialError",
    "TranscriptionError",
]
