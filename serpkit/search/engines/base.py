"""
Base Engine Adapter.

Provides the contract every engine adapter implements:
- build_search_request / parse_search_response (mandatory)
- build_image_request / parse_image_response (optional)
- build_autocomplete_request / parse_autocomplete_response (optional)

plus shared helpers for request headers, locale handling and challenge-page
detection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from serpkit.search.errors import ParseError, UnsupportedOperationError
from serpkit.search.extraction import ExtractionSpec, extract, parse_document
from serpkit.search.models import (
    EngineImagesResponse,
    EngineRequest,
    EngineResponse,
    ParseOutcome,
    SearchQuery,
)
from serpkit.utils.config import Settings, get_settings
from serpkit.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


def split_language(language: str) -> tuple[str, str | None]:
    """
    Split a locale tag into (language, country).

    Args:
        language: "ll" or "ll-CC" (case-insensitive).

    Returns:
        Lowercased language and uppercased country, or None when absent.
    """
    parts = [p for p in language.replace("_", "-").split("-") if p]
    if not parts:
        return "en", None
    lang = parts[0].lower()
    country = parts[-1].upper() if len(parts) >= 2 else None
    return lang, country


class BaseEngine(ABC):
    """
    Base class for search engine adapters.

    Subclasses set ``name`` and implement request building plus an
    extraction spec; ``parse_search_response`` runs the generic extraction
    engine over that spec.
    """

    name: ClassVar[str]
    supports_images: ClassVar[bool] = False
    supports_autocomplete: ClassVar[bool] = False
    # CSS selectors for elements that only exist on block/CAPTCHA pages
    challenge_selectors: ClassVar[tuple[str, ...]] = ()

    def __init__(self, settings: Settings | None = None):
        """
        Initialize adapter.

        Args:
            settings: Settings to use. Loaded lazily from config if None.
        """
        self._settings = settings

    @property
    def settings(self) -> Settings:
        """Get settings (lazy-loaded)."""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    # =========================================================================
    # Request helpers
    # =========================================================================

    def default_headers(self, query: SearchQuery) -> dict[str, str]:
        """Headers sent with every request for this query."""
        headers = {"User-Agent": self.settings.http.user_agent}
        if query.config.language:
            lang, country = split_language(query.config.language)
            if country:
                headers["Accept-Language"] = f"{lang}-{country},{lang};q=0.9"
            else:
                headers["Accept-Language"] = f"{lang};q=0.9"
        return headers

    def get_request(
        self,
        query: SearchQuery,
        base_url: str,
        params: list[tuple[str, str]],
        extra_headers: dict[str, str] | None = None,
    ) -> EngineRequest:
        """Build a GET descriptor with the default headers."""
        headers = self.default_headers(query)
        if extra_headers:
            headers.update(extra_headers)
        return EngineRequest.get(base_url, params, headers)

    def engine_extra(self, query: SearchQuery) -> dict[str, Any]:
        """Settings table for this engine: the query's own, else the configured one."""
        if self.name in query.config.engines:
            return query.config.engines[self.name]
        return self.settings.get_engine_settings(self.name).extra

    # =========================================================================
    # Web search
    # =========================================================================

    @abstractmethod
    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        """
        Build the outbound search request.

        Args:
            query: Search query.

        Returns:
            Request descriptor, or None if the engine should not be queried
            for this input.
        """

    @abstractmethod
    def extraction_spec(self) -> ExtractionSpec:
        """Extraction spec for this engine's result page."""

    def detect_challenge(self, body: str | bytes) -> str | None:
        """
        Return the matched challenge selector, if the body is a block page.

        Markers are matched against elements, never raw text, since result
        pages echo the query back in the title and search box.
        """
        if not self.challenge_selectors:
            return None
        soup = parse_document(body)
        for selector in self.challenge_selectors:
            if soup.select_one(selector) is not None:
                return selector
        return None

    def _extract_response(self, body: str | bytes) -> EngineResponse:
        response = extract(body, self.extraction_spec())
        logger.info(
            "Parsed search results",
            engine=self.name,
            result_count=len(response.search_results),
            has_featured_snippet=response.featured_snippet is not None,
        )
        return response

    def parse_search_response(self, body: str | bytes) -> EngineResponse:
        """
        Parse a search results page.

        A challenge page yields an empty response; use ``parse()`` to tell
        it apart from a page with zero results.

        Args:
            body: Response body.

        Returns:
            Normalized response.

        Raises:
            ParseError: If the page cannot be parsed at all.
        """
        marker = self.detect_challenge(body)
        if marker is not None:
            logger.warning("Challenge page detected", engine=self.name, marker=marker)
            return EngineResponse()

        return self._extract_response(body)

    def parse(self, body: str | bytes) -> ParseOutcome:
        """
        Parse a search results page, folding fatal errors into the outcome.

        Returns:
            ParseOutcome; on failure or a challenge page the response is
            empty and ``ok`` is False.
        """
        with LogContext(engine=self.name):
            marker = self.detect_challenge(body)
            if marker is not None:
                logger.warning("Challenge page detected", marker=marker)
                return ParseOutcome.challenge(self.name, marker)

            try:
                return ParseOutcome.success(self.name, self._extract_response(body))
            except ParseError as e:
                e.engine = e.engine or self.name
                logger.error("Result extraction failed", **e.to_dict())
                return ParseOutcome.failure(self.name, e.message)

    # =========================================================================
    # Optional surfaces
    # =========================================================================

    def build_image_request(self, query: SearchQuery) -> EngineRequest | None:
        raise UnsupportedOperationError(self.name, "image search")

    def parse_image_response(self, body: str | bytes) -> EngineImagesResponse:
        raise UnsupportedOperationError(self.name, "image search")

    def build_autocomplete_request(self, query: SearchQuery) -> EngineRequest | None:
        raise UnsupportedOperationError(self.name, "autocomplete")

    def parse_autocomplete_response(self, body: str | bytes) -> list[str]:
        raise UnsupportedOperationError(self.name, "autocomplete")


class SelectorEngine(BaseEngine):
    """
    Adapter whose whole result page is described by class-level selectors.

    Subclasses only set the selectors and implement request building.
    """

    result_selector: ClassVar[str]
    title_selector: ClassVar[str]
    href_selector: ClassVar[str]
    description_selector: ClassVar[str]

    _spec: ClassVar[ExtractionSpec | None] = None

    def extraction_spec(self) -> ExtractionSpec:
        cls = type(self)
        # Built once per class; ExtractionSpec is immutable
        if cls.__dict__.get("_spec") is None:
            cls._spec = ExtractionSpec(
                result=cls.result_selector,
                title=cls.title_selector,
                href=cls.href_selector,
                description=cls.description_selector,
            )
        return cls._spec  # type: ignore[return-value]
