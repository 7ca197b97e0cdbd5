"""
Spotify Web API client: client-credentials auth and track search.

Thin wrapper over ``requests``. Raises ``SpotifyAuthError`` and
``SpotifySearchError`` on failure; ``services.music.MusicMatcher`` turns
those into pipeline events and a ``None`` result.

Both endpoints are configurable so requests can be sent through a relay
that forwards them verbatim.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from core.config import SPOTIFY_API_URL, SPOTIFY_TOKEN_URL
from core.emotion.types import MusicTrack

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"


class SpotifyAuthError(RuntimeError):
    """Credentials are missing or the token exchange failed."""


class SpotifySearchError(RuntimeError):
    """The search request failed or returned a malformed payload."""


class SpotifyClient:
    """Minimal Spotify Web API client.

    Args:
        client_id: Application client id.
        client_secret: Application client secret.
        token_url: Accounts service token endpoint.
        api_url: Web API base URL (no trailing slash).
        timeout_seconds: Timeout for every HTTP request.
        session: Optional ``requests.Session`` (tests inject a mock).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        token_url: str = SPOTIFY_TOKEN_URL,
        api_url: str = SPOTIFY_API_URL,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        """True when both client id and secret are set."""
        return bool(self._client_id and self._client_secret)

    def fetch_access_token(self) -> str:
        """Exchange the client credentials for a bearer token.

        Sends ``grant_type=client_credentials`` form-encoded with HTTP basic
        auth of ``client_id:client_secret``.

        Returns:
            The ``access_token`` string.

        Raises:
            SpotifyAuthError: If credentials are unset, the request fails,
                the status is not 2xx, or the payload has no token.
        """
        if not self.configured:
            raise SpotifyAuthError("Spotify client id/secret are not configured")

        try:
            response = self._session.post(
                self._token_url,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
                timeout=self._timeout,
            )
            response.raise_for_status()
            token = response.json().get("access_token")
        except (requests.RequestException, ValueError, AttributeError) as exc:
            raise SpotifyAuthError(f"Spotify token request failed: {exc}") from exc

        if not token:
            raise SpotifyAuthError("Spotify token response carried no access_token")
        return token

    def search_tracks(
        self,
        query: str,
        token: str,
        *,
        market: str,
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        """Run a track search and return the raw ``tracks.items`` list.

        Args:
            query: Keyword phrase.
            token: Bearer token from ``fetch_access_token``.
            market: Country code restricting results to playable tracks.
            limit: Maximum number of candidates (1-50).

        Returns:
            Raw item dicts, possibly empty.

        Raises:
            SpotifySearchError: On transport errors, non-2xx status, or a
                payload without a ``tracks.items`` list.
        """
        params = {"q": query, "type": "track", "market": market, "limit": str(limit)}
        try:
            response = self._session.get(
                f"{self._api_url}/search",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise SpotifySearchError(f"Spotify search failed: {exc}") from exc

        tracks = payload.get("tracks") if isinstance(payload, dict) else None
        items = tracks.get("items") if isinstance(tracks, dict) else None
        if items is None:
            return []
        if not isinstance(items, list):
            raise SpotifySearchError(f"Spotify search returned malformed items: {type(items)}")

        logger.debug("spotify search %r returned %d items", query, len(items))
        return items


def parse_track(item: dict[str, Any]) -> MusicTrack:
    """Convert one search item into a ``MusicTrack``.

    Uses the first artist (or ``"Unknown Artist"``), the ``spotify`` external
    URL, and the first album image when present.

    Raises:
        KeyError: If ``id``, ``name`` or ``external_urls.spotify`` is missing.
    """
    artists = item.get("artists") or []
    artist = (artists[0] or {}).get("name") if artists else None
    images = (item.get("album") or {}).get("images") or []
    image_url = (images[0] or {}).get("url") if images else None

    return MusicTrack(
        track_id=item["id"],
        name=item["name"],
        artist=artist or UNKNOWN_ARTIST,
        external_url=item["external_urls"]["spotify"],
        preview_url=item.get("preview_url") or None,
        image_url=image_url or None,
    )
