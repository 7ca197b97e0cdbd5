"""
Shared fixtures for the test suite.

Centralizes fake providers, observers and domain object factories so
individual test files don't repeat mock boilerplate.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.deps import get_pipeline, get_store
from api.main import app
from core.emotion.types import Emotion, EmotionLog, Letter, MusicTrack
from core.events import PipelineEvent
from core.generation.base import GenerationRequest, GenerationResponse
from services.store import EmotionStore

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FROZEN_NOW = datetime(2026, 3, 14, 9, 30, 0, tzinfo=UTC)
"""Deterministic 'now' for clocks injected into components."""

LETTER_TEXT = "안녕, 나야. 오늘 정말 힘들었지? 그래도 여기까지 잘 왔어."


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class ScriptedProvider:
    """Generation provider that replays scripted replies in order.

    Each script item is either a reply string or an exception instance to
    raise. Every request is recorded in ``requests``.
    """

    def __init__(self, *script: str | Exception) -> None:
        self._script = list(script)
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        if not self._script:
            raise AssertionError("ScriptedProvider ran out of replies")
        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        return GenerationResponse(content=item, model=request.model or "fake-model")


class RecordingObserver:
    """Observer that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[PipelineEvent] = []

    def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]


# ---------------------------------------------------------------------------
# Domain factories
# ---------------------------------------------------------------------------


def make_track(**overrides: object) -> MusicTrack:
    """Build a ``MusicTrack``; any field can be overridden."""
    defaults: dict[str, object] = {
        "track_id": "4uLU6hMCjMI75M1A2tKUQC",
        "name": "Breathe",
        "artist": "Some Artist",
        "external_url": "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC",
        "preview_url": "https://p.scdn.co/mp3-preview/abc",
        "image_url": "https://i.scdn.co/image/xyz",
    }
    defaults.update(overrides)
    return MusicTrack(**defaults)  # type: ignore[arg-type]


def make_log(
    kind: str = "sad",
    intensity: int = 85,
    text: str = "힘든 하루였어",
    log_id: str = "log-1",
    created_at: datetime = FROZEN_NOW,
) -> EmotionLog:
    return EmotionLog(
        log_id=log_id,
        text=text,
        emotion=Emotion(kind=kind, intensity=intensity, timestamp=created_at),  # type: ignore[arg-type]
        created_at=created_at,
    )


def make_letter(
    log: EmotionLog | None = None,
    music: MusicTrack | None = None,
    letter_id: str = "letter-1",
    created_at: datetime = FROZEN_NOW,
) -> Letter:
    source = log or make_log()
    return Letter(
        letter_id=letter_id,
        content=LETTER_TEXT,
        emotion=source.emotion,
        created_at=created_at,
        music=music,
    )


def spotify_item(
    track_id: str,
    *,
    preview: bool = True,
    images: bool = True,
    artists: bool = True,
) -> dict:
    """Raw search item in the Web API's ``tracks.items`` shape."""
    return {
        "id": track_id,
        "name": f"Track {track_id}",
        "artists": [{"name": f"Artist {track_id}"}] if artists else [],
        "preview_url": f"https://p.scdn.co/mp3-preview/{track_id}" if preview else None,
        "external_urls": {"spotify": f"https://open.spotify.com/track/{track_id}"},
        "album": {"images": [{"url": f"https://i.scdn.co/image/{track_id}"}] if images else []},
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture()
def store(tmp_path: Path) -> EmotionStore:
    return EmotionStore.from_url(f"sqlite:///{tmp_path / 'emotions.db'}")


@pytest.fixture()
def fake_pipeline() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def api_client(store: EmotionStore, fake_pipeline: MagicMock):  # type: ignore[no-untyped-def]
    """FastAPI ``TestClient`` with the store and pipeline overridden.

    The store is a real SQLite store in ``tmp_path``; the pipeline is a
    ``MagicMock`` whose ``submit`` return value each test configures.
    """
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_pipeline] = lambda: fake_pipeline
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
