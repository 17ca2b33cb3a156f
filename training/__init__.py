"""Trainable phrases and the recordings made for them."""

from training.models import Phrase, Recording, StoredRecording, TrainingExample
from training.store import TrainingStore

__all__ = ["Phrase", "Recording", "StoredRecording", "TrainingExample", "TrainingStore"]
