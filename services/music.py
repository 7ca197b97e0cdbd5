"""
Music enrichment: pick one catalog track that matches an emotion.

``MusicMatcher.find_track`` never raises. Credential problems become a
``MATCHER_AUTH_FAILED`` event, search and parsing problems a
``MATCHER_SEARCH_FAILED`` event, and the caller receives ``None``.
"""

from __future__ import annotations

import logging
import random

from core.emotion.tracks import search_query_for, select_track
from core.emotion.types import MusicTrack
from core.events import EventKind, LoggingObserver, PipelineEvent, PipelineObserver
from services.spotify import SpotifyAuthError, SpotifyClient, SpotifySearchError, parse_track

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class MusicMatcher:
    """Find a mood-matched track for an emotion.

    Args:
        client: Spotify client used for auth and search.
        market: Country code every search is restricted to.
        limit: Number of candidates requested per search.
        rng: Random source for the final pick. Seed it for reproducible picks.
        observer: Receives degraded-path events.
    """

    def __init__(
        self,
        client: SpotifyClient,
        *,
        market: str = "KR",
        limit: int = SEARCH_LIMIT,
        rng: random.Random | None = None,
        observer: PipelineObserver | None = None,
    ) -> None:
        self._client = client
        self._market = market
        self._limit = limit
        self._rng = rng or random.Random()
        self._observer = observer or LoggingObserver()

    def find_track(
        self,
        kind: str,
        intensity: int,
        *,
        emotion_id: str | None = None,
    ) -> MusicTrack | None:
        """Return one track for *kind*, or ``None`` when nothing usable is found.

        Args:
            kind: Emotion kind; unmapped kinds search with the "happy" phrase.
            intensity: Passed through to query construction, currently unused.
            emotion_id: Id of the log being enriched, attached to events.
        """
        try:
            return self._find_track(kind, intensity, emotion_id)
        except Exception as exc:
            self._emit(EventKind.MATCHER_SEARCH_FAILED, emotion_id, f"unexpected error: {exc}")
            return None

    def _find_track(self, kind: str, intensity: int, emotion_id: str | None) -> MusicTrack | None:
        try:
            token = self._client.fetch_access_token()
        except SpotifyAuthError as exc:
            self._emit(EventKind.MATCHER_AUTH_FAILED, emotion_id, str(exc))
            return None

        query = search_query_for(kind, intensity)
        try:
            items = self._client.search_tracks(
                query, token, market=self._market, limit=self._limit
            )
            candidates = [parse_track(item) for item in items]
        except (SpotifySearchError, KeyError, TypeError, AttributeError) as exc:
            self._emit(EventKind.MATCHER_SEARCH_FAILED, emotion_id, str(exc))
            return None

        if not candidates:
            logger.info("No catalog results for %r (emotion_id=%s)", query, emotion_id)
            return None

        track = select_track(candidates, self._rng)
        if track is not None:
            logger.info(
                "Matched %r by %s for %s (%d candidates)",
                track.name,
                track.artist,
                kind,
                len(candidates),
            )
        return track

    def _emit(self, kind: EventKind, emotion_id: str | None, detail: str) -> None:
        self._observer.emit(PipelineEvent(kind=kind, emotion_id=emotion_id, detail=detail))
