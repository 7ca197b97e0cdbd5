"""Pydantic schemas for /emotions and /letters endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from core.emotion.trend import TrendPoint
from core.emotion.types import EmotionLog, Letter, MusicTrack

EmotionKindEnum = Literal["happy", "sad", "anxious", "excited", "calm", "angry"]


class EmotionResponse(BaseModel):
    type: EmotionKindEnum
    intensity: int = Field(..., ge=0, le=100)
    timestamp: datetime


class EmotionLogResponse(BaseModel):
    """Serialized EmotionLog for API responses."""

    id: str
    text: str
    emotion: EmotionResponse
    created_at: datetime


class MusicTrackResponse(BaseModel):
    id: str
    name: str
    artist: str
    preview_url: str | None
    external_url: str
    image_url: str | None = None


class LetterResponse(BaseModel):
    """Serialized Letter for API responses. ``music`` is null without enrichment."""

    id: str
    content: str
    emotion: EmotionResponse
    music: MusicTrackResponse | None = None
    created_at: datetime


class SubmitEmotionRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)
    emotion_type: EmotionKindEnum


class SubmitEmotionResponse(BaseModel):
    log: EmotionLogResponse
    letter: LetterResponse | None = None


class EmotionLogListResponse(BaseModel):
    entries: list[EmotionLogResponse]
    total: int


class LetterListResponse(BaseModel):
    entries: list[LetterResponse]
    total: int


class TrendPointResponse(BaseModel):
    day: date
    intensity: float


class TrendResponse(BaseModel):
    points: list[TrendPointResponse]
    average_intensity: float


# ---------------------------------------------------------------------------
# Domain -> response converters
# ---------------------------------------------------------------------------


def log_to_response(log: EmotionLog) -> EmotionLogResponse:
    return EmotionLogResponse(
        id=log.log_id,
        text=log.text,
        emotion=EmotionResponse(
            type=log.emotion.kind,
            intensity=log.emotion.intensity,
            timestamp=log.emotion.timestamp,
        ),
        created_at=log.created_at,
    )


def track_to_response(track: MusicTrack) -> MusicTrackResponse:
    return MusicTrackResponse(
        id=track.track_id,
        name=track.name,
        artist=track.artist,
        preview_url=track.preview_url,
        external_url=track.external_url,
        image_url=track.image_url,
    )


def letter_to_response(letter: Letter) -> LetterResponse:
    return LetterResponse(
        id=letter.letter_id,
        content=letter.content,
        emotion=EmotionResponse(
            type=letter.emotion.kind,
            intensity=letter.emotion.intensity,
            timestamp=letter.emotion.timestamp,
        ),
        music=track_to_response(letter.music) if letter.music else None,
        created_at=letter.created_at,
    )


def trend_to_response(points: list[TrendPoint], average: float) -> TrendResponse:
    return TrendResponse(
        points=[TrendPointResponse(day=p.day, intensity=p.intensity) for p in points],
        average_intensity=average,
    )
