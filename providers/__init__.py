"""
Provider package — abstract base classes + registry.

Sub-packages:
  providers.stt      — STTProvider base class + the Gemini few-shot transcriber
  providers.tts      — SpeechSink base class + the pyttsx3 platform-voice sink
  providers.registry — ProviderRegistry singleton
"""

from providers.base import (
    BaseProvider,
    ProviderError,
)
from providers.registry import (
    ProviderRegistry,
    ProviderType,
    registry,
)

__all__ = [
    # Base classes
    "BaseProvider",
    "ProviderError",
    # Registry
    "ProviderRegistry",
    "ProviderType",
    "registry",
]
