"""Emotion submission, history and trend endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, tzinfo
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from api.deps import get_pipeline, get_store
from api.schemas.emotions import (
    EmotionLogListResponse,
    SubmitEmotionRequest,
    SubmitEmotionResponse,
    TrendResponse,
    letter_to_response,
    log_to_response,
    trend_to_response,
)
from core.emotion.trend import average_intensity, emotion_trend
from core.errors import StoreWriteError
from infrastructure.metrics import (
    LatencyTimer,
    record_letter,
    record_store_failure,
    record_submission,
)
from services.pipeline import EmotionPipeline, SubmissionResult
from services.store import EmotionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/emotions", tags=["emotions"])

Pipeline = Annotated[EmotionPipeline, Depends(get_pipeline)]
Store = Annotated[EmotionStore, Depends(get_store)]


def persist_submission(store: EmotionStore, result: SubmissionResult) -> None:
    """Store the log, then the letter if there is one.

    Runs after the response is sent. The two writes are independent: a
    failed log insert does not stop the letter insert. Failures are logged
    and counted, never raised.
    """
    try:
        store.save_log(result.log)
    except StoreWriteError:
        logger.exception("Failed to save emotion log %s", result.log.log_id)
        record_store_failure("log")

    if result.letter is None:
        return
    try:
        store.save_letter(result.letter)
    except StoreWriteError:
        logger.exception("Failed to save letter %s", result.letter.letter_id)
        record_store_failure("letter")


@router.post("", response_model=SubmitEmotionResponse, status_code=201)
def submit_emotion(
    body: SubmitEmotionRequest,
    background_tasks: BackgroundTasks,
    pipeline: Pipeline,
    store: Store,
) -> SubmitEmotionResponse:
    """Score a new entry and, above the threshold, write a letter for it.

    The response carries the artifacts immediately; persistence is
    scheduled as a background task.
    """
    try:
        with LatencyTimer() as timer:
            result = pipeline.submit(body.text, body.emotion_type)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    record_submission(outcome=result.outcome, latency_seconds=timer.elapsed)
    if result.letter is not None:
        record_letter(with_music=result.letter.music is not None)

    background_tasks.add_task(persist_submission, store, result)

    return SubmitEmotionResponse(
        log=log_to_response(result.log),
        letter=letter_to_response(result.letter) if result.letter else None,
    )


@router.get("", response_model=EmotionLogListResponse)
def list_emotions(store: Store) -> EmotionLogListResponse:
    """List all emotion logs, newest first."""
    logs = store.list_logs()
    return EmotionLogListResponse(entries=[log_to_response(log) for log in logs], total=len(logs))


def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {name!r}") from exc


@router.get("/trend", response_model=TrendResponse)
def get_trend(store: Store, tz: str = "UTC") -> TrendResponse:
    """Average intensity per local date plus the overall average."""
    zone = _resolve_timezone(tz)
    logs = store.list_logs()
    return trend_to_response(emotion_trend(logs, zone), average_intensity(logs))
