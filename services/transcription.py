"""
services/transcription.py — recognition workflow

Picks a few of the speaker's labelled recordings as examples, hands them
with the new recording to the configured STT provider and returns plain
text.

Usage:
    service = TranscriptionService(store, rng=random.Random())
    text = service.recognize(blob)
"""

import logging
import random
from typing import Dict, List, Optional, Sequence

from capture.codec import AudioBlob, AudioDecodeError
from providers.registry import ProviderType, registry
from providers.stt.base import InvalidCredentialError
from training.models import Phrase, StoredRecording, TrainingExample
from training.store import TrainingStore

logger = logging.getLogger(__name__)

MAX_EXAMPLES = 5


def select_training_examples(
    recordings: Sequence[StoredRecording],
    phrases: Dict[int, Phrase],
    rng: random.Random,
    limit: int = MAX_EXAMPLES,
) -> List[TrainingExample]:
    """Draw up to ``limit`` labelled examples, uniformly, without replacement.

    Orphaned recordings (phrase gone) are never candidates. A sampled
    recording whose audio does not decode is logged and skipped. The result
    keeps sampling order.
    """
    usable = [rec for rec in recordings if rec.phrase_id in phrases]
    orphaned = len(recordings) - len(usable)
    if orphaned:
        logger.debug("Ignoring %d orphaned recording(s)", orphaned)

    sample = rng.sample(usable, min(max(limit, 0), len(usable)))

    examples = []
    for rec in sample:
        try:
            audio = rec.decode_audio()
        except AudioDecodeError as exc:
            logger.error("Failed to prepare training example %s: %s", rec.id, exc)
            continue
        examples.append(TrainingExample(audio=audio, text=phrases[rec.phrase_id].text))
    return examples


class TranscriptionService:
    """Recognition glue between the store and the STT provider."""

    def __init__(
        self,
        store: TrainingStore,
        provider_id: str = "gemini",
        provider_config: Optional[Dict] = None,
        max_examples: int = MAX_EXAMPLES,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.provider_id = provider_id
        self.provider_config = dict(provider_config or {})
        self.max_examples = max_examples
        self.rng = rng or random.Random()

    def _provider(self):
        overrides = dict(self.provider_config)
        overrides["api_key"] = self.store.get_credential() or ""
        return registry.get_provider(ProviderType.STT, self.provider_id, overrides)

    def recognize(self, blob: AudioBlob) -> str:
        """Transcribe ``blob`` primed with stored examples.

        Raises:
            CredentialError: no credential stored.
            InvalidCredentialError: credential rejected; it is cleared so the
                user has to enter a new one.
            TranscriptionError: any other remote failure.
        """
        provider = self._provider()
        examples = select_training_examples(
            self.store.list_recordings(),
            self.store.phrase_index(),
            self.rng,
            self.max_examples,
        )
        logger.info("Recognizing %d bytes with %d example(s)", len(blob), len(examples))
        try:
            result = provider.transcribe(
                blob.data,
                language="de",
                mime_type=blob.mime_type,
                examples=examples,
            )
        except InvalidCredentialError:
            self.store.clear_credential()
            raise
        return result.text
