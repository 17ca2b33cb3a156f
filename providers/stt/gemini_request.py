"""
Few-shot transcription request for the Gemini generateContent REST API.

Turn layout:
    system instruction
    user  : example prompt + example audio      ┐ once per training example,
    model : correct standard-German text        ┘ in sampling order
    user  : task prompt + target audio

The task prompt wording depends only on whether any examples are present.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from capture.codec import AudioBlob, encode_many
from training.models import TrainingExample

FALLBACK_MIME_TYPE = "audio/webm"

SYSTEM_INSTRUCTION = (
    "Du bist ein Experte für Dysarthrie. Deine Aufgabe ist es, Audioaufnahmen von einem "
    "Sprecher mit einer Sprachbehinderung zu transkribieren. Der Sprecher kommuniziert auf "
    "Schweizerdeutsch oder Hochdeutsch.\n"
    "Du erhältst einige Beispiele, bei denen eine Audioaufnahme und die dazugehörige korrekte "
    "Transkription als klares Hochdeutsch bereitgestellt werden.\n"
    "Basierend auf diesen Beispielen, transkribiere die finale Audioaufnahme.\n"
    "Das Ziel ist es, die Absicht des Sprechers zu erfassen und in einen verständlichen Satz auf "
    "Hochdeutsch umzuwandeln. Gib NUR den transkribierten Text zurück, ohne zusätzliche "
    "Erklärungen oder einleitende Sätze."
)

EXAMPLE_PROMPT = "Hier ist ein Beispielaudio eines Sprechers mit Dysarthrie:"

FEW_SHOT_PROMPT = "Transkribiere nun, basierend auf den obigen Beispielen, diese neue Audioaufnahme:"

ZERO_SHOT_PROMPT = (
    "Transkribiere diese Audioaufnahme eines Sprechers mit einer Sprachbehinderung (Dysarthrie). "
    "Gib nur den transkribierten Text als klares Hochdeutsch zurück."
)


@dataclass(frozen=True)
class InlineAudio:
    mime_type: str
    data: str  # base64


@dataclass
class Turn:
    role: str  # "user" | "model"
    text: str
    audio: Optional[InlineAudio] = None

    def to_content(self) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = [{"text": self.text}]
        if self.audio is not None:
            parts.append({"inlineData": {"mimeType": self.audio.mime_type, "data": self.audio.data}})
        return {"role": self.role, "parts": parts}


@dataclass
class TranscriptionRequest:
    system_instruction: str
    turns: List[Turn] = field(default_factory=list)

    @property
    def example_count(self) -> int:
        return sum(1 for t in self.turns if t.role == "model")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
            "contents": [t.to_content() for t in self.turns],
        }


def build_request(
    target: AudioBlob,
    examples: Sequence[TrainingExample],
    max_workers: int = 4,
) -> TranscriptionRequest:
    """Assemble the request; example audio is encoded concurrently."""
    encoded = encode_many([ex.audio for ex in examples] + [target], max_workers=max_workers)
    example_data, target_data = encoded[:-1], encoded[-1]

    turns: List[Turn] = []
    for example, data in zip(examples, example_data):
        turns.append(
            Turn(
                role="user",
                text=EXAMPLE_PROMPT,
                audio=InlineAudio(example.audio.mime_type or FALLBACK_MIME_TYPE, data),
            )
        )
        turns.append(Turn(role="model", text=example.text))

    turns.append(
        Turn(
            role="user",
            text=FEW_SHOT_PROMPT if examples else ZERO_SHOT_PROMPT,
            audio=InlineAudio(target.mime_type or FALLBACK_MIME_TYPE, target_data),
        )
    )
    return TranscriptionRequest(system_instruction=SYSTEM_INSTRUCTION, turns=turns)
