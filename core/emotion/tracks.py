"""Emotion-to-music query mapping and candidate selection.

Pure logic used by ``services.music.MusicMatcher``. The random source is
injected so tests can pin exact selections with a seeded ``random.Random``.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from core.emotion.types import MusicTrack

SEARCH_QUERIES: dict[str, str] = {
    "happy": "happy upbeat energetic",
    "sad": "sad melancholy emotional ballad",
    "anxious": "calm peaceful relaxing ambient",
    "excited": "energetic exciting festival dance",
    "calm": "calm peaceful meditation zen",
    "angry": "powerful intense rock metal",
}

DEFAULT_QUERY = SEARCH_QUERIES["happy"]


def search_query_for(kind: str, intensity: int | None = None) -> str:
    """Return the catalog search phrase for an emotion kind.

    Unmapped kinds fall back to the "happy" phrase.

    ``intensity`` is accepted so callers can pass it through, but it does not
    change the phrase yet. Intensity-tiered queries would be added here.
    """
    del intensity
    return SEARCH_QUERIES.get(kind, DEFAULT_QUERY)


def candidate_pool(tracks: Sequence[MusicTrack]) -> list[MusicTrack]:
    """Restrict *tracks* to those with a preview, if any have one."""
    with_preview = [t for t in tracks if t.has_preview]
    return with_preview if with_preview else list(tracks)


def select_track(tracks: Sequence[MusicTrack], rng: random.Random) -> MusicTrack | None:
    """Pick one track uniformly at random from the preview-preferring pool.

    Args:
        tracks: Search candidates, in catalog order.
        rng: Random source used for the final pick.

    Returns:
        The chosen track, or ``None`` when there are no candidates.
    """
    pool = candidate_pool(tracks)
    if not pool:
        return None
    return rng.choice(pool)
