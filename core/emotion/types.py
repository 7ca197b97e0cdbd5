"""Emotion domain types as pure value objects.

These are the core data contracts for the emotion pipeline.
No I/O, no datetime.now(), no imports from db/ or services/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, get_args

EmotionKind = Literal["happy", "sad", "anxious", "excited", "calm", "angry"]

EMOTION_KINDS: tuple[str, ...] = get_args(EmotionKind)

MIN_INTENSITY = 0
MAX_INTENSITY = 100


def clamp_intensity(value: int) -> int:
    """Clamp a raw score into the valid intensity range ``[0, 100]``."""
    return max(MIN_INTENSITY, min(MAX_INTENSITY, int(value)))


@dataclass(frozen=True)
class Emotion:
    """A named emotion with its scored intensity.

    Attributes:
        kind: One of happy | sad | anxious | excited | calm | angry.
        intensity: Integer score in ``[0, 100]``. Producers clamp before
            constructing; out-of-range values are rejected here.
        timestamp: When the emotion was recorded (timezone-aware).
    """

    kind: EmotionKind
    intensity: int
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.kind not in EMOTION_KINDS:
            raise ValueError(f"kind must be one of {list(EMOTION_KINDS)}, got {self.kind!r}")
        if isinstance(self.intensity, bool) or not isinstance(self.intensity, int):
            raise ValueError(f"intensity must be an int, got {type(self.intensity).__name__}")
        if not MIN_INTENSITY <= self.intensity <= MAX_INTENSITY:
            raise ValueError(
                f"intensity must be between {MIN_INTENSITY} and {MAX_INTENSITY}, "
                f"got {self.intensity}"
            )


@dataclass(frozen=True)
class EmotionLog:
    """A user's recorded emotional entry.

    Attributes:
        log_id: Unique opaque identifier, used as display and storage key.
        text: The user's free-text description.
        emotion: The scored emotion.
        created_at: Creation instant (timezone-aware).
    """

    log_id: str
    text: str
    emotion: Emotion
    created_at: datetime

    def __post_init__(self) -> None:
        if not self.log_id.strip():
            raise ValueError("log_id must not be empty")
        if not self.text.strip():
            raise ValueError("text must not be empty")


@dataclass(frozen=True)
class MusicTrack:
    """A catalog track recommended alongside a letter.

    ``preview_url`` is ``None`` when the catalog has no audio preview for the
    market. ``image_url`` is ``None`` when the album carries no artwork.
    """

    track_id: str
    name: str
    artist: str
    external_url: str
    preview_url: str | None = None
    image_url: str | None = None

    @property
    def has_preview(self) -> bool:
        return bool(self.preview_url)


@dataclass(frozen=True)
class Letter:
    """A generated comfort letter.

    Attributes:
        letter_id: Unique opaque identifier.
        content: Generated letter text, verbatim from the model.
        emotion: Verbatim copy of the source log's emotion.
        created_at: Creation instant (timezone-aware).
        music: Recommended track, or ``None`` when enrichment did not succeed.
    """

    letter_id: str
    content: str
    emotion: Emotion
    created_at: datetime
    music: MusicTrack | None = None

    def __post_init__(self) -> None:
        if not self.letter_id.strip():
            raise ValueError("letter_id must not be empty")
        if not self.content.strip():
            raise ValueError("content must not be empty")
