"""
Relational store for emotion logs and letters.

Insert-or-fail semantics: saving an id that already exists raises
``StoreWriteError``; nothing is ever updated in place. Reads return
domain value objects, newest first.

The attached track is encoded with the ``MusicTrackPayload`` schema:
``preview_url`` is always written (``null`` when absent) and ``image_url``
is omitted when absent, so a reload reproduces the track exactly.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, ValidationError
from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError

from core.emotion.types import Emotion, EmotionLog, Letter, MusicTrack
from core.errors import StoreWriteError
from db.models import Base, EmotionLogRecord, LetterRecord
from db.session import create_db_engine, create_session_factory

logger = logging.getLogger(__name__)


class MusicTrackPayload(BaseModel):
    """Persisted shape of a ``MusicTrack`` (``letters.music_data``)."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    artist: str
    preview_url: str | None
    external_url: str
    image_url: str | None = None


def encode_music(track: MusicTrack) -> str:
    """Serialize *track* to JSON through ``MusicTrackPayload``."""
    payload = MusicTrackPayload(
        id=track.track_id,
        name=track.name,
        artist=track.artist,
        preview_url=track.preview_url,
        external_url=track.external_url,
        image_url=track.image_url,
    )
    exclude = {"image_url"} if track.image_url is None else None
    return payload.model_dump_json(exclude=exclude)


def decode_music(raw: str) -> MusicTrack:
    """Parse JSON written by ``encode_music``.

    Raises:
        pydantic.ValidationError: If *raw* does not match the schema.
    """
    payload = MusicTrackPayload.model_validate_json(raw)
    return MusicTrack(
        track_id=payload.id,
        name=payload.name,
        artist=payload.artist,
        external_url=payload.external_url,
        preview_url=payload.preview_url,
        image_url=payload.image_url,
    )


def _as_utc(value: datetime) -> datetime:
    """Normalize to aware UTC. SQLite hands back naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _record_to_log(record: EmotionLogRecord) -> EmotionLog:
    created_at = _as_utc(record.created_at)
    return EmotionLog(
        log_id=record.id,
        text=record.text,
        emotion=Emotion(
            kind=record.emotion_type,  # type: ignore[arg-type]
            intensity=record.emotion_intensity,
            timestamp=created_at,
        ),
        created_at=created_at,
    )


def _record_to_letter(record: LetterRecord) -> Letter:
    music: MusicTrack | None = None
    if record.music_data:
        try:
            music = decode_music(record.music_data)
        except ValidationError as exc:
            logger.warning("Letter %s has unreadable music_data, dropping it: %s", record.id, exc)

    return Letter(
        letter_id=record.id,
        content=record.content,
        emotion=Emotion(
            kind=record.emotion_type,  # type: ignore[arg-type]
            intensity=record.emotion_intensity,
            timestamp=_as_utc(record.emotion_recorded_at),
        ),
        created_at=_as_utc(record.created_at),
        music=music,
    )


class EmotionStore:
    """SQLAlchemy-backed store for ``EmotionLog`` and ``Letter`` objects.

    Tables are created on construction if they do not exist.

    Args:
        engine: SQLAlchemy engine (see ``db.session.create_db_engine``).
    """

    def __init__(self, engine: Engine) -> None:
        Base.metadata.create_all(bind=engine)
        self._session_factory = create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> EmotionStore:
        return cls(create_db_engine(database_url))

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    def save_log(self, log: EmotionLog) -> None:
        """Insert *log*.

        Raises:
            StoreWriteError: If the id already exists or the insert fails.
        """
        record = EmotionLogRecord(
            id=log.log_id,
            text=log.text,
            emotion_type=log.emotion.kind,
            emotion_intensity=log.emotion.intensity,
            created_at=_as_utc(log.created_at),
        )
        self._insert(record, f"emotion log {log.log_id!r}")

    def save_letter(self, letter: Letter) -> None:
        """Insert *letter*, encoding its track when present.

        Raises:
            StoreWriteError: If the id already exists or the insert fails.
        """
        record = LetterRecord(
            id=letter.letter_id,
            content=letter.content,
            emotion_type=letter.emotion.kind,
            emotion_intensity=letter.emotion.intensity,
            emotion_recorded_at=_as_utc(letter.emotion.timestamp),
            music_url=letter.music.external_url if letter.music else None,
            music_data=encode_music(letter.music) if letter.music else None,
            created_at=_as_utc(letter.created_at),
        )
        self._insert(record, f"letter {letter.letter_id!r}")

    def _insert(self, record: Base, label: str) -> None:
        with self._session_factory() as session:
            session.add(record)
            try:
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreWriteError(f"Could not insert {label}: {exc}") from exc
        logger.debug("Stored %s", label)

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    def list_logs(self) -> list[EmotionLog]:
        """Return all logs, newest first."""
        stmt = select(EmotionLogRecord).order_by(
            EmotionLogRecord.created_at.desc(), EmotionLogRecord.id.desc()
        )
        with self._session_factory() as session:
            return [_record_to_log(r) for r in session.scalars(stmt)]

    def list_letters(self, limit: int | None = None) -> list[Letter]:
        """Return letters newest first, at most *limit* when given."""
        stmt = select(LetterRecord).order_by(LetterRecord.created_at.desc(), LetterRecord.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session_factory() as session:
            return [_record_to_letter(r) for r in session.scalars(stmt)]

    def get_log(self, log_id: str) -> EmotionLog | None:
        with self._session_factory() as session:
            record = session.get(EmotionLogRecord, log_id)
            return _record_to_log(record) if record else None

    def get_letter(self, letter_id: str) -> Letter | None:
        """Fetch one letter by id, or ``None``."""
        with self._session_factory() as session:
            record = session.get(LetterRecord, letter_id)
            return _record_to_letter(record) if record else None
