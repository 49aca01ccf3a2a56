"""
Data models for engine requests and normalized engine responses.

Every model is frozen: instances are built fresh per call and handed to the
caller as-is.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from serpkit.utils.config import Settings


class QueryConfig(BaseModel):
    """Per-request configuration bundle."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(default="", description="Locale tag in 'll' or 'll-CC' form")
    engines: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Open per-engine settings tables"
    )

    def engine_extra(self, engine: str) -> dict[str, Any]:
        """Get the settings table for one engine (empty if absent)."""
        return self.engines.get(engine.lower(), {})

    @classmethod
    def from_settings(cls, settings: Settings, language: str | None = None) -> QueryConfig:
        """Build a query config from application settings.

        Args:
            settings: Loaded settings.
            language: Overrides ``settings.http.default_language`` when given.
        """
        return cls(
            language=settings.http.default_language if language is None else language,
            engines={name: dict(s.extra) for name, s in settings.engines.items()},
        )


class SearchQuery(BaseModel):
    """A search query plus its configuration."""

    model_config = ConfigDict(frozen=True)

    query: str
    config: QueryConfig = Field(default_factory=QueryConfig)


class EngineRequest(BaseModel):
    """Outbound HTTP request descriptor for the external HTTP client.

    Adapters return ``None`` instead of a descriptor when they decline a query.
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def get(
        cls,
        base_url: str,
        params: list[tuple[str, str]],
        headers: dict[str, str] | None = None,
    ) -> EngineRequest:
        """Build a GET descriptor, form-encoding ``params`` in order."""
        url = httpx.URL(base_url, params=params)
        return cls(method="GET", url=str(url), headers=headers or {})

    @property
    def params(self) -> dict[str, str]:
        """Decoded query parameters (first value per key)."""
        return dict(httpx.URL(self.url).params)

    def to_httpx(self) -> httpx.Request:
        """Convert to an ``httpx.Request`` ready for ``Client.send``."""
        return httpx.Request(self.method, self.url, headers=self.headers)


class SearchResult(BaseModel):
    """One organic result. Only built when the description is non-empty."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    description: str


class FeaturedSnippet(BaseModel):
    """The answer box some engines render above ordinary results."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    description: str


class EngineResponse(BaseModel):
    """Normalized output of one engine's search response."""

    model_config = ConfigDict(frozen=True)

    search_results: tuple[SearchResult, ...] = ()
    featured_snippet: FeaturedSnippet | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


class EngineImageResult(BaseModel):
    """One image result. Width/height of 0 means unknown."""

    model_config = ConfigDict(frozen=True)

    page_url: str
    image_url: str
    title: str
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class EngineImagesResponse(BaseModel):
    """Normalized output of one engine's image search response."""

    model_config = ConfigDict(frozen=True)

    image_results: tuple[EngineImageResult, ...] = ()


class ParseOutcome(BaseModel):
    """Result of parsing a search page, with failures folded in.

    A failed outcome carries an empty response so callers can count the
    engine as contributing zero results this round.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    engine: str
    response: EngineResponse = Field(default_factory=EngineResponse)
    error: str | None = None
    is_challenge: bool = False
    challenge_marker: str | None = None

    @classmethod
    def success(cls, engine: str, response: EngineResponse) -> ParseOutcome:
        """Create successful parse outcome."""
        return cls(ok=True, engine=engine, response=response)

    @classmethod
    def failure(cls, engine: str, error: str) -> ParseOutcome:
        """Create failed parse outcome."""
        return cls(ok=False, engine=engine, error=error)

    @classmethod
    def challenge(cls, engine: str, marker: str) -> ParseOutcome:
        """Create challenge-page outcome."""
        return cls(
            ok=False,
            engine=engine,
            is_challenge=True,
            challenge_marker=marker,
            error=f"Challenge page detected: {marker}",
        )
