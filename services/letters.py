"""
Comfort letter composition.

``LetterComposer.compose`` makes exactly one generation call and then tries
to attach a track. Generation problems raise ``GenerationFailed``; the
letter text is never replaced with canned prose. Enrichment problems only
leave ``Letter.music`` empty.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from core.emotion.prompts import LETTER_SYSTEM_PROMPT, build_letter_prompt
from core.emotion.types import EmotionLog, Letter, MusicTrack
from core.errors import GenerationFailed
from core.events import EventKind, LoggingObserver, PipelineEvent, PipelineObserver
from core.generation.base import GenerationProvider, GenerationRequest, Message
from services.music import MusicMatcher

logger = logging.getLogger(__name__)


def new_letter_id() -> str:
    return f"letter-{uuid.uuid4().hex}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LetterComposer:
    """Write a comfort letter for an emotion log.

    Args:
        provider: Text-generation backend.
        matcher: Music matcher for enrichment, or ``None`` to skip music.
        model: Model override for letter requests.
        clock: Returns the current instant (injected for tests).
        observer: Receives events for unexpected enrichment errors.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        matcher: MusicMatcher | None = None,
        *,
        model: str | None = None,
        clock: Callable[[], datetime] = _utcnow,
        observer: PipelineObserver | None = None,
    ) -> None:
        self._provider = provider
        self._matcher = matcher
        self._model = model
        self._clock = clock
        self._observer = observer or LoggingObserver()

    def compose(self, log: EmotionLog) -> Letter:
        """Generate the letter for *log* and attach a track when one is found.

        The letter's ``emotion`` is the log's ``emotion`` object itself.

        Raises:
            GenerationFailed: If the generation call fails or returns no text.
        """
        request = GenerationRequest(
            messages=(
                Message(role="system", content=LETTER_SYSTEM_PROMPT),
                Message(role="user", content=build_letter_prompt(log)),
            ),
            temperature=0.7,
            max_tokens=1000,
            model=self._model,
        )
        try:
            response = self._provider.generate(request)
        except GenerationFailed:
            raise
        except Exception as exc:
            raise GenerationFailed(f"letter generation failed: {exc}") from exc

        if not response.content.strip():
            raise GenerationFailed(f"letter generation returned no text for {log.log_id}")

        return Letter(
            letter_id=new_letter_id(),
            content=response.content,
            emotion=log.emotion,
            created_at=self._clock(),
            music=self._find_music(log),
        )

    def _find_music(self, log: EmotionLog) -> MusicTrack | None:
        if self._matcher is None:
            return None
        try:
            track = self._matcher.find_track(
                log.emotion.kind, log.emotion.intensity, emotion_id=log.log_id
            )
        except Exception as exc:
            self._observer.emit(
                PipelineEvent(
                    kind=EventKind.MATCHER_SEARCH_FAILED,
                    emotion_id=log.log_id,
                    detail=f"matcher raised: {exc}",
                )
            )
            return None

        if track is None:
            logger.info("Letter for %s composed without music", log.log_id)
        return track
