"""
Emotion pipeline: score, log, and maybe write a letter.

One ``submit`` call is one logical attempt with no retries:

    1. Score the text (never fails, see ``IntensityScorer``).
    2. Build the ``EmotionLog``. It is always returned.
    3. If intensity is strictly above the threshold, compose a letter.
       ``GenerationFailed`` is observed and turned into "no letter".

The pipeline does not persist anything; callers store ``result.log`` and
``result.letter``. It holds no per-submission state, so one instance can
serve concurrent submissions.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from core.config import DEFAULT_LETTER_THRESHOLD, AppSettings
from core.emotion.types import EMOTION_KINDS, Emotion, EmotionLog, Letter, clamp_intensity
from core.errors import GenerationFailed
from core.events import EventKind, LoggingObserver, PipelineEvent, PipelineObserver
from core.generation.base import GenerationProvider
from services.generation import create_generation_provider
from services.letters import LetterComposer
from services.music import MusicMatcher
from services.scoring import IntensityScorer
from services.spotify import SpotifyClient

logger = logging.getLogger(__name__)

Outcome = Literal["letter", "below_threshold", "generation_failed"]


def new_log_id() -> str:
    return f"log-{uuid.uuid4().hex}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SubmissionResult:
    """What one submission produced.

    Attributes:
        log: The emotion log. Always present.
        letter: The generated letter, or ``None``.
        outcome: Why the letter is present or absent.
    """

    log: EmotionLog
    letter: Letter | None = None
    outcome: Outcome = "below_threshold"


class EmotionPipeline:
    """Orchestrates scoring, logging and conditional letter generation.

    Args:
        scorer: Intensity scorer.
        composer: Letter composer.
        threshold: Letters are attempted only when intensity is strictly
            greater than this value.
        clock: Returns the current instant (injected for tests).
        observer: Receives ``GENERATION_FAILED`` events.
    """

    def __init__(
        self,
        scorer: IntensityScorer,
        composer: LetterComposer,
        *,
        threshold: int = DEFAULT_LETTER_THRESHOLD,
        clock: Callable[[], datetime] = _utcnow,
        observer: PipelineObserver | None = None,
    ) -> None:
        self._scorer = scorer
        self._composer = composer
        self._threshold = threshold
        self._clock = clock
        self._observer = observer or LoggingObserver()

    @property
    def threshold(self) -> int:
        return self._threshold

    def should_write_letter(self, intensity: int) -> bool:
        """True when *intensity* is strictly above the threshold."""
        return intensity > self._threshold

    def submit(self, text: str, kind: str) -> SubmissionResult:
        """Process one user submission.

        Args:
            text: The user's description. Must not be blank.
            kind: One of the six emotion kinds.

        Returns:
            ``SubmissionResult`` with the log and, when generated, the letter.

        Raises:
            ValueError: If *text* is blank or *kind* is unknown. Raised
                before any network call.
        """
        if not text.strip():
            raise ValueError("text must not be empty")
        if kind not in EMOTION_KINDS:
            raise ValueError(f"kind must be one of {list(EMOTION_KINDS)}, got {kind!r}")

        log_id = new_log_id()
        intensity = clamp_intensity(self._scorer.score(text, kind, emotion_id=log_id))
        now = self._clock()
        log = EmotionLog(
            log_id=log_id,
            text=text,
            emotion=Emotion(kind=kind, intensity=intensity, timestamp=now),
            created_at=now,
        )

        if not self.should_write_letter(intensity):
            logger.info(
                "Log %s scored %d (threshold %d), no letter", log_id, intensity, self._threshold
            )
            return SubmissionResult(log=log, outcome="below_threshold")

        try:
            letter = self._composer.compose(log)
        except GenerationFailed as exc:
            self._observer.emit(
                PipelineEvent(kind=EventKind.GENERATION_FAILED, emotion_id=log_id, detail=str(exc))
            )
            return SubmissionResult(log=log, outcome="generation_failed")

        logger.info(
            "Log %s scored %d, letter %s written (music=%s)",
            log_id,
            intensity,
            letter.letter_id,
            "yes" if letter.music else "no",
        )
        return SubmissionResult(log=log, letter=letter, outcome="letter")


def create_pipeline(
    settings: AppSettings,
    *,
    provider: GenerationProvider | None = None,
    observer: PipelineObserver | None = None,
    rng: random.Random | None = None,
) -> EmotionPipeline:
    """Wire a pipeline from settings.

    One generation provider serves both scoring (``settings.scoring_model``)
    and letters (``settings.letter_model``). Without catalog credentials no
    matcher is built and letters carry no music.

    Args:
        settings: Application settings.
        provider: Generation backend; built from *settings* when omitted.
        observer: Shared by every component.
        rng: Random source for fallback scores and track picks.

    Raises:
        ValueError: If the generation provider cannot be created (missing
            API key or unknown provider).
    """
    provider = provider or create_generation_provider(settings)
    rng = rng or random.Random()
    matcher: MusicMatcher | None = None
    if settings.spotify_configured:
        client = SpotifyClient(
            settings.spotify_client_id,
            settings.spotify_client_secret,
            token_url=settings.spotify_token_url,
            api_url=settings.spotify_api_url,
            timeout_seconds=settings.request_timeout_seconds,
        )
        matcher = MusicMatcher(client, market=settings.market, rng=rng, observer=observer)
    else:
        logger.info("Spotify credentials not set, letters will carry no music")
    scorer = IntensityScorer(provider, model=settings.scoring_model, rng=rng, observer=observer)
    composer = LetterComposer(provider, matcher, model=settings.letter_model, observer=observer)
    return EmotionPipeline(
        scorer, composer, threshold=settings.letter_threshold, observer=observer
    )
