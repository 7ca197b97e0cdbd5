"""
SQLAlchemy ORM models for the emotion store.

Two independent tables keyed by pipeline-generated string ids. A letter
row carries no foreign key to the log it was written for; it only copies
the emotion fields.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class EmotionLogRecord(Base):
    """One persisted ``EmotionLog``."""

    __tablename__ = "emotion_logs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    text: Mapped[str] = mapped_column(Text)
    emotion_type: Mapped[str] = mapped_column(String(16), index=True)
    emotion_intensity: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (Index("idx_emotion_logs_created_at", "created_at"),)


class LetterRecord(Base):
    """One persisted ``Letter``.

    ``music_data`` holds the track encoded by ``services.store.encode_music``;
    ``music_url`` duplicates its external URL for quick listing.
    """

    __tablename__ = "letters"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    content: Mapped[str] = mapped_column(Text)
    emotion_type: Mapped[str] = mapped_column(String(16))
    emotion_intensity: Mapped[int] = mapped_column(Integer)
    emotion_recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    music_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    music_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (Index("idx_letters_created_at", "created_at"),)
