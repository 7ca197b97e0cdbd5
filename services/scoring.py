"""
Emotion intensity scoring via the text-generation backend.

``IntensityScorer.score`` never raises: any failure, or a reply with no
digits in it, yields a fallback score drawn uniformly from ``[60, 100)``.
Intensity is advisory, so an approximate score beats no entry at all.
"""

from __future__ import annotations

import logging
import random
import re

from core.emotion.prompts import build_scoring_prompt
from core.emotion.types import clamp_intensity
from core.events import EventKind, LoggingObserver, PipelineEvent, PipelineObserver
from core.generation.base import GenerationProvider, GenerationRequest, Message

logger = logging.getLogger(__name__)

FALLBACK_LOW = 60
FALLBACK_HIGH = 100  # exclusive

_NON_DIGITS = re.compile(r"[^0-9]")


def parse_score(reply: str) -> int | None:
    """Strip every non-digit from *reply* and parse the rest.

    ``"75"`` and ``"점수: 75"`` both give 75. Returns ``None`` when no digits
    remain. The result is not clamped.
    """
    digits = _NON_DIGITS.sub("", reply or "")
    return int(digits) if digits else None


class IntensityScorer:
    """Rate how strongly a text expresses a given emotion.

    Args:
        provider: Text-generation backend.
        model: Model override for scoring requests (``None`` uses the
            provider default).
        rng: Random source for fallback scores.
        observer: Receives a ``SCORING_FALLBACK`` event whenever the fallback
            path is taken.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        *,
        model: str | None = None,
        rng: random.Random | None = None,
        observer: PipelineObserver | None = None,
    ) -> None:
        self._provider = provider
        self._model = model
        self._rng = rng or random.Random()
        self._observer = observer or LoggingObserver()

    def score(self, text: str, kind: str, *, emotion_id: str | None = None) -> int:
        """Return an intensity in ``[0, 100]`` for *text* under *kind*.

        Args:
            text: The user's description.
            kind: The emotion kind the user selected.
            emotion_id: Id of the log being scored, attached to events.
        """
        request = GenerationRequest(
            messages=(Message(role="user", content=build_scoring_prompt(text, kind)),),
            temperature=0.3,
            max_tokens=10,
            model=self._model,
        )
        try:
            response = self._provider.generate(request)
            value = parse_score(response.content)
        except Exception as exc:
            return self._fallback(emotion_id, f"scoring call failed: {exc}")

        if value is None:
            return self._fallback(emotion_id, f"no digits in scoring reply {response.content!r}")

        score = clamp_intensity(value)
        logger.debug("Scored %s at %d (raw %d)", kind, score, value)
        return score

    def _fallback(self, emotion_id: str | None, detail: str) -> int:
        value = self._rng.randrange(FALLBACK_LOW, FALLBACK_HIGH)
        self._observer.emit(
            PipelineEvent(
                kind=EventKind.SCORING_FALLBACK,
                emotion_id=emotion_id,
                detail=f"{detail}; using {value}",
            )
        )
        return value
