"""
Tests for core/emotion/types.py: emotion domain value objects.

Covers construction validation, immutability and the intensity clamp.
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from core.emotion.types import (
    EMOTION_KINDS,
    Emotion,
    EmotionLog,
    Letter,
    clamp_intensity,
)
from tests.conftest import FROZEN_NOW, make_log, make_track


class TestClampIntensity:
    """Test clamp_intensity()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(-5, 0), (0, 0), (70, 70), (100, 100), (150, 100), (1000, 100)],
    )
    def test_clamps_into_range(self, raw: int, expected: int) -> None:
        assert clamp_intensity(raw) == expected


class TestEmotion:
    """Test Emotion validation."""

    def test_six_kinds(self) -> None:
        assert set(EMOTION_KINDS) == {"happy", "sad", "anxious", "excited", "calm", "angry"}

    def test_valid_emotion(self) -> None:
        emotion = Emotion(kind="calm", intensity=42, timestamp=FROZEN_NOW)
        assert emotion.kind == "calm"
        assert emotion.intensity == 42

    def test_unknown_kind_raises(self) -> None:
        with pytest.raises(ValueError, match="kind must be one of"):
            Emotion(kind="bored", intensity=50, timestamp=FROZEN_NOW)  # type: ignore[arg-type]

    def test_out_of_range_intensity_raises(self) -> None:
        with pytest.raises(ValueError, match="intensity must be between"):
            Emotion(kind="sad", intensity=101, timestamp=FROZEN_NOW)
        with pytest.raises(ValueError, match="intensity must be between"):
            Emotion(kind="sad", intensity=-1, timestamp=FROZEN_NOW)

    def test_non_int_intensity_raises(self) -> None:
        with pytest.raises(ValueError, match="intensity must be an int"):
            Emotion(kind="sad", intensity=70.5, timestamp=FROZEN_NOW)  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="intensity must be an int"):
            Emotion(kind="sad", intensity=True, timestamp=FROZEN_NOW)

    def test_frozen(self) -> None:
        emotion = Emotion(kind="sad", intensity=50, timestamp=FROZEN_NOW)
        with pytest.raises(FrozenInstanceError):
            emotion.intensity = 90  # type: ignore[misc]


class TestEmotionLog:
    """Test EmotionLog validation."""

    def test_blank_text_raises(self) -> None:
        with pytest.raises(ValueError, match="text must not be empty"):
            make_log(text="   ")

    def test_blank_id_raises(self) -> None:
        with pytest.raises(ValueError, match="log_id must not be empty"):
            make_log(log_id="")

    def test_equality_is_by_value(self) -> None:
        assert make_log() == make_log()
        assert make_log() != make_log(intensity=20)


class TestMusicTrack:
    """Test MusicTrack."""

    def test_has_preview(self) -> None:
        assert make_track().has_preview
        assert not make_track(preview_url=None).has_preview

    def test_optional_fields_default_to_none(self) -> None:
        track = make_track()
        bare = replace(track, preview_url=None, image_url=None)
        assert bare.preview_url is None
        assert bare.image_url is None


class TestLetter:
    """Test Letter validation."""

    def test_blank_content_raises(self) -> None:
        log = make_log()
        with pytest.raises(ValueError, match="content must not be empty"):
            Letter(letter_id="letter-1", content=" \n", emotion=log.emotion, created_at=FROZEN_NOW)

    def test_music_defaults_to_none(self) -> None:
        log = make_log()
        letter = Letter(
            letter_id="letter-1", content="안녕, 나야", emotion=log.emotion, created_at=FROZEN_NOW
        )
        assert letter.music is None

    def test_log_factory_builds_valid_log(self) -> None:
        log = make_log(kind="angry", intensity=99)
        assert isinstance(log, EmotionLog)
        assert log.emotion.timestamp == log.created_at
