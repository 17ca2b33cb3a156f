"""Speech output provider package.

Importing this package registers all speech sinks with the registry.
"""

from providers.tts.base import SpeechSink, TTSError, TTSVoice, Utterance

# Import concrete providers so their registry.register() calls fire
from providers.tts import pyttsx3_provider  # noqa: F401

__all__ = ["SpeechSink", "TTSError", "TTSVoice", "Utterance"]
