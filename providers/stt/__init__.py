"""STT provider package.

Importing this package registers all STT providers with the registry.
"""

from providers.stt.base import (
    CredentialError,
    InvalidCredentialError,
    STTError,
    STTProvider,
    TranscriptionError,
    TranscriptionResult,
)

# Import concrete providers so their registry.register() calls fire
from providers.stt import gemini_provider  # noqa: F401

__all__ = [
    "STTProvider",
    "TranscriptionResult",
    "STTError",
    "CredentialError",
    "InvalidCredentialError",
    "TranscriptionError",
]
