"""
Application settings for the emotion letterbox.

A single immutable ``AppSettings`` object is read once at process start
(``AppSettings.from_env()``) and passed into every component constructor.
There is no hot reload.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

VALID_PROVIDERS: frozenset[str] = frozenset({"openai", "anthropic"})

DEFAULT_LETTER_THRESHOLD = 70
"""Intensity strictly above this value triggers letter generation."""

# (letter_model, scoring_model) used when LETTER_MODEL / SCORING_MODEL are unset
PROVIDER_DEFAULT_MODELS: dict[str, tuple[str, str]] = {
    "openai": ("gpt-4o-mini", "gpt-4-turbo-preview"),
    "anthropic": ("claude-sonnet-4-20250514", "claude-3-5-haiku-latest"),
}

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_URL = "https://api.spotify.com/v1"


@dataclass(frozen=True)
class AppSettings:
    """
    Runtime configuration for all pipeline components.

    Attributes:
        llm_provider: ``"openai"`` or ``"anthropic"``.
        llm_api_key: API key for the selected provider. May be empty; the
            provider then fails at construction and the API reports it.
        letter_model: Model used to write letters.
        scoring_model: Model used to rate emotion intensity.
        spotify_client_id: Catalog client id. Empty disables music matching.
        spotify_client_secret: Catalog client secret.
        spotify_token_url: Token endpoint (override to go through a relay).
        spotify_api_url: Web API base URL (override to go through a relay).
        market: Catalog market code used for searches.
        request_timeout_seconds: Timeout applied to every external call.
        letter_threshold: Generation threshold, compared with strict ``>``.
        database_url: SQLAlchemy URL of the emotion store.

    Example:
        >>> settings = AppSettings(letter_threshold=70, market="KR")
    """

    llm_provider: str = "openai"
    llm_api_key: str = ""
    letter_model: str = "gpt-4o-mini"
    scoring_model: str = "gpt-4-turbo-preview"
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_token_url: str = SPOTIFY_TOKEN_URL
    spotify_api_url: str = SPOTIFY_API_URL
    market: str = "KR"
    request_timeout_seconds: float = 15.0
    letter_threshold: int = DEFAULT_LETTER_THRESHOLD
    database_url: str = "sqlite:///data/emotions.db"

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.llm_provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Unknown llm_provider {self.llm_provider!r}, "
                f"valid options: {sorted(VALID_PROVIDERS)}"
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError(
                f"request_timeout_seconds must be positive, got {self.request_timeout_seconds}"
            )
        if not 0 <= self.letter_threshold <= 100:
            raise ValueError(
                f"letter_threshold must be between 0 and 100, got {self.letter_threshold}"
            )
        if len(self.market) != 2:
            raise ValueError(f"market must be a 2-letter country code, got {self.market!r}")

    @property
    def spotify_configured(self) -> bool:
        """True when both catalog credentials are present."""
        return bool(self.spotify_client_id and self.spotify_client_secret)

    @classmethod
    def from_env(cls) -> AppSettings:
        """Build settings from environment variables (and a ``.env`` file).

        Reads ``LLM_PROVIDER``, the matching ``OPENAI_API_KEY`` or
        ``ANTHROPIC_API_KEY``, ``LETTER_MODEL``, ``SCORING_MODEL``,
        ``SPOTIFY_CLIENT_ID``, ``SPOTIFY_CLIENT_SECRET``, ``SPOTIFY_TOKEN_URL``,
        ``SPOTIFY_API_URL``, ``SPOTIFY_MARKET``, ``REQUEST_TIMEOUT_SECONDS``,
        ``LETTER_THRESHOLD`` and ``DATABASE_URL``. Unset variables keep the
        field defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        load_dotenv()
        env = os.environ
        defaults = cls()
        provider = env.get("LLM_PROVIDER", defaults.llm_provider).lower().strip()
        key_var = "ANTHROPIC_API_KEY" if provider == "anthropic" else "OPENAI_API_KEY"
        letter_model, scoring_model = PROVIDER_DEFAULT_MODELS.get(
            provider, (defaults.letter_model, defaults.scoring_model)
        )

        return cls(
            llm_provider=provider,
            llm_api_key=env.get(key_var, ""),
            letter_model=env.get("LETTER_MODEL", letter_model),
            scoring_model=env.get("SCORING_MODEL", scoring_model),
            spotify_client_id=env.get("SPOTIFY_CLIENT_ID", ""),
            spotify_client_secret=env.get("SPOTIFY_CLIENT_SECRET", ""),
            spotify_token_url=env.get("SPOTIFY_TOKEN_URL", defaults.spotify_token_url),
            spotify_api_url=env.get("SPOTIFY_API_URL", defaults.spotify_api_url),
            market=env.get("SPOTIFY_MARKET", defaults.market),
            request_timeout_seconds=float(
                env.get("REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds)
            ),
            letter_threshold=int(env.get("LETTER_THRESHOLD", defaults.letter_threshold)),
            database_url=env.get("DATABASE_URL", defaults.database_url),
        )
