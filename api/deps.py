"""
FastAPI dependency providers.

Settings are read once from the environment; the store, observer and
pipeline are lazily created singletons reused across requests. Tests
replace any of them through ``app.dependency_overrides``.
"""

from fastapi import HTTPException

from core.config import AppSettings
from core.events import PipelineObserver
from infrastructure.metrics import MetricsObserver
from services.pipeline import EmotionPipeline, create_pipeline
from services.store import EmotionStore

_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Return the process-wide ``AppSettings``, read from the environment once."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = AppSettings.from_env()
    return _settings


_store: EmotionStore | None = None


def get_store() -> EmotionStore:
    """Return a cached ``EmotionStore`` singleton for ``DATABASE_URL``."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = EmotionStore.from_url(get_settings().database_url)
    return _store


_observer: PipelineObserver | None = None


def get_observer() -> PipelineObserver:
    """Return the shared observer: Prometheus counters, then logging."""
    global _observer  # noqa: PLW0603
    if _observer is None:
        _observer = MetricsObserver()
    return _observer


_pipeline: EmotionPipeline | None = None


def get_pipeline() -> EmotionPipeline:
    """
    Return a cached ``EmotionPipeline`` singleton.

    Raises:
        HTTPException: 503 when the generation backend cannot be created
            (missing API key or unknown provider).
    """
    global _pipeline  # noqa: PLW0603
    if _pipeline is None:
        try:
            _pipeline = create_pipeline(get_settings(), observer=get_observer())
        except ValueError as exc:
            raise HTTPException(
                status_code=503, detail=f"Generation backend unavailable: {exc}"
            ) from exc
    return _pipeline
