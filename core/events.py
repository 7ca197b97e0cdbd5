"""
Structured observability events emitted by the emotion pipeline.

Components never log their degraded paths directly to a fixed sink. They
build a ``PipelineEvent`` and hand it to an injected ``PipelineObserver``.
``LoggingObserver`` is the default; ``infrastructure.metrics.MetricsObserver``
additionally counts events in Prometheus.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Degraded-path event kinds."""

    SCORING_FALLBACK = "scoring_fallback"
    MATCHER_AUTH_FAILED = "matcher_auth_failed"
    MATCHER_SEARCH_FAILED = "matcher_search_failed"
    GENERATION_FAILED = "generation_failed"


@dataclass(frozen=True)
class PipelineEvent:
    """One observed degradation.

    Attributes:
        kind: What degraded.
        emotion_id: Id of the emotion log being processed, when known.
        detail: Human-readable cause (exception text or reason).
    """

    kind: EventKind
    emotion_id: str | None = None
    detail: str = ""


@runtime_checkable
class PipelineObserver(Protocol):
    """Anything with an ``emit(event)`` method can observe the pipeline."""

    def emit(self, event: PipelineEvent) -> None:
        """Receive one event. Must not raise."""
        ...


class LoggingObserver:
    """Observer that writes each event to the standard logging tree."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event: PipelineEvent) -> None:
        self._log.warning(
            "pipeline event %s (emotion_id=%s): %s",
            event.kind.value,
            event.emotion_id or "-",
            event.detail or "no detail",
        )
