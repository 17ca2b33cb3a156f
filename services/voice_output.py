"""
services/voice_output.py — speak recognised text aloud

Voice choice, in order:
  1. a voice whose name signals the requested gender
  2. (male only) any voice whose name does not signal female
  3. a voice tagged with the target locale
  4. the first voice
"""

import logging
import re
from typing import List, Optional

from providers.tts.base import SpeechSink, TTSVoice, Utterance

logger = logging.getLogger(__name__)

GENDERS = ("male", "female")

# "female" contains "male"; only a standalone "male" counts.
_MALE_RE = re.compile(r"(?<!fe)male|männlich", re.IGNORECASE)
_FEMALE_RE = re.compile(r"female|weiblich", re.IGNORECASE)


def signals_gender(name: str, gender: str) -> bool:
    pattern = _MALE_RE if gender == "male" else _FEMALE_RE
    return bool(pattern.search(name or ""))


def _normalize_tag(tag: str) -> str:
    return (tag or "").replace("_", "-").lower()


def filter_language(voices: List[TTSVoice], language_prefix: str = "de") -> List[TTSVoice]:
    prefix = language_prefix.lower()
    return [v for v in voices if _normalize_tag(v.language).startswith(prefix)]


def select_voice(voices: List[TTSVoice], gender: str, locale: str = "de-DE") -> Optional[TTSVoice]:
    """Pick a voice from ``voices`` (already filtered to the target language)."""
    if not voices:
        return None

    for voice in voices:
        if signals_gender(voice.name, gender):
            return voice

    if gender == "male":
        for voice in voices:
            if not signals_gender(voice.name, "female"):
                return voice

    wanted = _normalize_tag(locale)
    for voice in voices:
        if _normalize_tag(voice.language) == wanted:
            return voice

    return voices[0]


class VoiceOutput:
    """Speaks text through a SpeechSink, cancelling whatever came before."""

    def __init__(
        self,
        sink: SpeechSink,
        language_prefix: str = "de",
        locale: str = "de-DE",
        rate: float = 0.9,
    ) -> None:
        self.sink = sink
        self.language_prefix = language_prefix
        self.locale = locale
        self.rate = rate

    def voices(self) -> List[TTSVoice]:
        return filter_language(self.sink.list_voices(), self.language_prefix)

    def speak(self, text: str, gender: str = "male") -> Optional[TTSVoice]:
        """Fire-and-forget; returns the voice used (None = platform default)."""
        if gender not in GENDERS:
            raise ValueError(f"gender must be one of {GENDERS}, got {gender!r}")
        if not text or not text.strip():
            return None

        voice = select_voice(self.voices(), gender, self.locale)
        self.sink.cancel_all()
        self.sink.speak(
            Utterance(
                text=text,
                lang=self.locale,
                rate=self.rate,
                voice_id=voice.id if voice else None,
            )
        )
        logger.info("Speaking %d chars with voice %s", len(text), voice.name if voice else "default")
        return voice
