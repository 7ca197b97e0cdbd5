"""Prometheus metrics for the emotion letterbox.

Metrics:
    el_submissions_total              Counter by outcome (letter/below_threshold/generation_failed)
    el_submission_latency_seconds     Histogram of end-to-end submission latency
    el_letters_total                  Letters generated, labelled by whether music was attached
    el_pipeline_events_total          Degraded-path events by kind
    el_store_write_failures_total     Failed store inserts by artifact (log/letter)

Usage::

    from infrastructure.metrics import LatencyTimer, MetricsObserver, record_submission

    with LatencyTimer() as t:
        result = pipeline.submit(text, kind)
    record_submission(outcome=result.outcome, latency_seconds=t.elapsed)
"""

from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from core.events import LoggingObserver, PipelineEvent, PipelineObserver

_REGISTRY = CollectorRegistry()

submissions_total = Counter(
    "el_submissions_total",
    "Emotion submissions by outcome",
    ["outcome"],
    registry=_REGISTRY,
)

submission_latency_seconds = Histogram(
    "el_submission_latency_seconds",
    "End-to-end submission latency in seconds (scoring + optional letter)",
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 45.0],
    registry=_REGISTRY,
)

letters_total = Counter(
    "el_letters_total",
    "Letters generated, by whether a track was attached",
    ["with_music"],
    registry=_REGISTRY,
)

pipeline_events_total = Counter(
    "el_pipeline_events_total",
    "Degraded-path pipeline events by kind",
    ["kind"],
    registry=_REGISTRY,
)

store_write_failures_total = Counter(
    "el_store_write_failures_total",
    "Store inserts that failed, by artifact",
    ["artifact"],
    registry=_REGISTRY,
)


def record_submission(*, outcome: str, latency_seconds: float) -> None:
    """Record a completed submission.

    Args:
        outcome: ``SubmissionResult.outcome``.
        latency_seconds: Wall-clock time of ``EmotionPipeline.submit``.
    """
    submissions_total.labels(outcome=outcome).inc()
    submission_latency_seconds.observe(latency_seconds)


def record_letter(*, with_music: bool) -> None:
    """Increment the generated-letter counter."""
    letters_total.labels(with_music="true" if with_music else "false").inc()


def record_event(event: PipelineEvent) -> None:
    """Increment the event counter for ``event.kind``."""
    pipeline_events_total.labels(kind=event.kind.value).inc()


def record_store_failure(artifact: str) -> None:
    """Increment the store failure counter.

    Args:
        artifact: ``"log"`` or ``"letter"``.
    """
    store_write_failures_total.labels(artifact=artifact).inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class MetricsObserver:
    """Pipeline observer that counts events, then forwards them.

    Args:
        delegate: Observer receiving each event after it is counted.
            Defaults to ``LoggingObserver`` so events still reach the logs.
    """

    def __init__(self, delegate: PipelineObserver | None = None) -> None:
        self._delegate = delegate or LoggingObserver()

    def emit(self, event: PipelineEvent) -> None:
        record_event(event)
        self._delegate.emit(event)


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            result = pipeline.submit(text, kind)
        record_submission(outcome=result.outcome, latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        self.elapsed = time.perf_counter() - self._start
