"""
Tests for services/pipeline.py: EmotionPipeline and its wiring.

End-to-end cases use the real scorer and composer over a ScriptedProvider
(first reply answers the scoring call, second the letter call).
"""

import random
from unittest.mock import MagicMock, patch

import pytest

from core.config import AppSettings
from core.errors import GenerationFailed
from services.letters import LetterComposer
from services.music import MusicMatcher
from services.pipeline import EmotionPipeline, SubmissionResult, create_pipeline
from services.scoring import IntensityScorer
from tests.conftest import (
    FROZEN_NOW,
    LETTER_TEXT,
    RecordingObserver,
    ScriptedProvider,
    make_track,
    spotify_item,
)


def _pipeline(
    *replies: str | Exception,
    matcher: MagicMock | None = None,
    observer: RecordingObserver | None = None,
    threshold: int = 70,
) -> tuple[EmotionPipeline, ScriptedProvider]:
    provider = ScriptedProvider(*replies)
    scorer = IntensityScorer(provider, rng=random.Random(0), observer=observer)
    composer = LetterComposer(provider, matcher, clock=lambda: FROZEN_NOW, observer=observer)
    pipeline = EmotionPipeline(
        scorer, composer, threshold=threshold, clock=lambda: FROZEN_NOW, observer=observer
    )
    return pipeline, provider


def _matcher(track: object = None) -> MagicMock:
    matcher = MagicMock(spec=MusicMatcher)
    matcher.find_track.return_value = track
    return matcher


class TestThreshold:
    """Test the strict > threshold rule."""

    def test_should_write_letter_is_strict(self) -> None:
        pipeline, _ = _pipeline()
        assert not pipeline.should_write_letter(70)
        assert pipeline.should_write_letter(71)
        assert pipeline.threshold == 70

    def test_exactly_threshold_writes_no_letter(self) -> None:
        pipeline, provider = _pipeline("70")
        result = pipeline.submit("그냥 그래", "calm")

        assert result.outcome == "below_threshold"
        assert result.letter is None
        assert result.log.emotion.intensity == 70
        assert len(provider.requests) == 1

    def test_one_above_threshold_writes_letter(self) -> None:
        pipeline, provider = _pipeline("71", LETTER_TEXT)
        result = pipeline.submit("조금 신나", "excited")

        assert result.outcome == "letter"
        assert result.letter is not None
        assert len(provider.requests) == 2

    def test_low_score_never_calls_composer(self) -> None:
        scorer = MagicMock(spec=IntensityScorer)
        scorer.score.return_value = 40
        composer = MagicMock(spec=LetterComposer)

        result = EmotionPipeline(scorer, composer).submit("괜찮아", "happy")

        assert result.letter is None
        composer.compose.assert_not_called()

    def test_custom_threshold(self) -> None:
        pipeline, _ = _pipeline("55", LETTER_TEXT, threshold=50)
        assert pipeline.submit("t", "sad").outcome == "letter"


class TestSubmit:
    """Test EmotionPipeline.submit()."""

    def test_sad_day_gets_letter_with_music(self) -> None:
        track = make_track()
        matcher = _matcher(track)
        pipeline, _ = _pipeline("85", LETTER_TEXT, matcher=matcher)

        result = pipeline.submit("힘든 하루였어", "sad")

        assert isinstance(result, SubmissionResult)
        assert result.log.text == "힘든 하루였어"
        assert result.log.emotion.kind == "sad"
        assert result.log.emotion.intensity == 85
        assert result.log.created_at == FROZEN_NOW
        assert result.log.log_id.startswith("log-")
        assert result.letter is not None
        assert result.letter.content == LETTER_TEXT
        assert result.letter.emotion == result.log.emotion
        assert result.letter.music == track
        matcher.find_track.assert_called_once_with("sad", 85, emotion_id=result.log.log_id)

    def test_music_lookup_miss_still_returns_letter(self) -> None:
        pipeline, _ = _pipeline("90", LETTER_TEXT, matcher=_matcher(None))
        result = pipeline.submit("짜증나", "angry")
        assert result.letter is not None
        assert result.letter.content == LETTER_TEXT
        assert result.letter.music is None

    def test_generation_failure_keeps_log(self) -> None:
        observer = RecordingObserver()
        pipeline, _ = _pipeline("95", GenerationFailed("timeout"), observer=observer)

        result = pipeline.submit("너무 불안해", "anxious")

        assert result.outcome == "generation_failed"
        assert result.letter is None
        assert result.log.emotion.intensity == 95
        assert observer.kinds == ["generation_failed"]
        assert observer.events[0].emotion_id == result.log.log_id

    def test_scoring_fallback_carries_log_id(self) -> None:
        observer = RecordingObserver()
        pipeline, _ = _pipeline(GenerationFailed("down"), LETTER_TEXT, observer=observer)

        result = pipeline.submit("text", "sad")

        assert 60 <= result.log.emotion.intensity < 100
        assert observer.events[0].kind.value == "scoring_fallback"
        assert observer.events[0].emotion_id == result.log.log_id

    def test_out_of_range_scorer_value_is_clamped(self) -> None:
        scorer = MagicMock(spec=IntensityScorer)
        scorer.score.return_value = 180
        composer = MagicMock(spec=LetterComposer)
        composer.compose.side_effect = GenerationFailed("x")

        result = EmotionPipeline(scorer, composer, observer=RecordingObserver()).submit("t", "sad")
        assert result.log.emotion.intensity == 100

    @pytest.mark.parametrize(("text", "kind"), [("", "sad"), ("   ", "sad"), ("ok", "bored")])
    def test_invalid_input_raises_before_scoring(self, text: str, kind: str) -> None:
        scorer = MagicMock(spec=IntensityScorer)
        pipeline = EmotionPipeline(scorer, MagicMock(spec=LetterComposer))
        with pytest.raises(ValueError):
            pipeline.submit(text, kind)
        scorer.score.assert_not_called()

    def test_log_ids_are_unique(self) -> None:
        pipeline, _ = _pipeline("10", "20")
        assert pipeline.submit("a", "calm").log.log_id != pipeline.submit("b", "calm").log.log_id


class TestCreatePipeline:
    """Test create_pipeline() wiring."""

    def test_wires_models_and_threshold(self) -> None:
        provider = ScriptedProvider("85", LETTER_TEXT)
        settings = AppSettings(
            scoring_model="score-model", letter_model="letter-model", letter_threshold=80
        )
        observer = RecordingObserver()

        pipeline = create_pipeline(
            settings, provider=provider, observer=observer, rng=random.Random(1)
        )
        result = pipeline.submit("힘든 하루였어", "sad")

        assert pipeline.threshold == 80
        assert provider.requests[0].model == "score-model"
        assert provider.requests[1].model == "letter-model"
        # no Spotify credentials: no catalog lookup, letter arrives without music
        assert result.letter is not None
        assert result.letter.music is None
        assert observer.events == []

    @patch("services.pipeline.SpotifyClient")
    def test_spotify_credentials_enable_music(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value
        client.fetch_access_token.return_value = "tok"
        client.search_tracks.return_value = [spotify_item("track-a")]
        settings = AppSettings(
            spotify_client_id="cid", spotify_client_secret="csecret", market="JP"
        )

        pipeline = create_pipeline(
            settings, provider=ScriptedProvider("85", LETTER_TEXT), rng=random.Random(1)
        )
        result = pipeline.submit("힘든 하루였어", "sad")

        assert result.letter is not None
        assert result.letter.music is not None
        assert result.letter.music.track_id == "track-a"
        assert mock_client_cls.call_args[0] == ("cid", "csecret")
        assert client.search_tracks.call_args[1]["market"] == "JP"

    def test_missing_api_key_raises(self) -> None:
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            create_pipeline(AppSettings(llm_api_key=""))

    @patch("services.generation.openai.OpenAI")
    def test_builds_provider_from_settings(self, _mock: MagicMock) -> None:
        pipeline = create_pipeline(AppSettings(llm_api_key="sk-test"))
        assert isinstance(pipeline, EmotionPipeline)
