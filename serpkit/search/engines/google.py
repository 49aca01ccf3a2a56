"""
Google Engine Adapter.

Web search goes through the mobile no-JS surface (``asearch=arc``), which
requires an ``async`` token in the shape Google's own client sends. Image
search and autocomplete are also handled here.
"""

from __future__ import annotations

import json

from bs4 import Tag

from serpkit.search.async_token import AsyncTokenProvider, get_async_token_provider
from serpkit.search.engines.base import BaseEngine
from serpkit.search.engines.google_images import parse_images_body
from serpkit.search.extraction import (
    CustomExtraction,
    ExtractionSpec,
    render_bullets,
    render_children,
    select_attr,
)
from serpkit.search.models import EngineImagesResponse, EngineRequest, SearchQuery
from serpkit.search.url_cleaning import clean_google_url
from serpkit.utils.config import Settings
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://www.google.com/search"
AUTOCOMPLETE_URL = "https://suggestqueries.google.com/complete/search"

RESULT_SELECTOR = "[jscontroller=SC7lYd]"
TITLE_SELECTOR = "h3"
HREF_SELECTOR = "a[href]"
DESCRIPTION_SELECTOR = (
    "div[data-sncf='2'], div[data-sncf='1,2'], div[style='-webkit-line-clamp:2']"
)
FEATURED_SNIPPET_SELECTOR = "block-component"
HEADING_SELECTOR = "div[role='heading']"
DESCRIPTION_CONTAINER_SELECTOR = "div[data-attrid='wa:/description'] > span:first-child"
FEATURED_SNIPPET_TITLE_SELECTOR = (
    ".g > div[lang] a h3, div[lang] > div[style='position:relative'] a h3"
)
FEATURED_SNIPPET_HREF_SELECTOR = (
    ".g > div[lang] a:has(h3), div[lang] > div[style='position:relative'] a:has(h3)"
)


def _extract_href(element: Tag) -> str:
    return clean_google_url(select_attr(element, HREF_SELECTOR, "href"))


def _is_ui_chrome(tag: Tag) -> bool:
    # clickable chips inside snippets: [data-ved]:not([data-send-open-event])
    return tag.has_attr("data-ved") and not tag.has_attr("data-send-open-event")


def _extract_featured_snippet_description(element: Tag) -> str:
    description = ""

    heading = element.select_one(HEADING_SELECTOR)
    if heading is not None:
        description += f"{heading.get_text()}\n\n"

    container = element.select_one(DESCRIPTION_CONTAINER_SELECTOR)
    if container is not None:
        description += render_children(container, _is_ui_chrome)
    else:
        list_el = element.select_one("ul")
        if list_el is not None:
            description += render_bullets(list_el)

    return description


def _extract_featured_snippet_href(element: Tag) -> str:
    return clean_google_url(select_attr(element, FEATURED_SNIPPET_HREF_SELECTOR, "href"))


class GoogleEngine(BaseEngine):
    """Adapter for Google web search, image search and autocomplete."""

    name = "google"
    supports_images = True
    supports_autocomplete = True
    challenge_selectors = ("form#captcha-form", "form[action*='/sorry/index']")

    _spec = ExtractionSpec(
        result=RESULT_SELECTOR,
        title=TITLE_SELECTOR,
        href=CustomExtraction(_extract_href),
        description=DESCRIPTION_SELECTOR,
        featured_snippet=FEATURED_SNIPPET_SELECTOR,
        featured_snippet_title=FEATURED_SNIPPET_TITLE_SELECTOR,
        featured_snippet_href=CustomExtraction(_extract_featured_snippet_href),
        featured_snippet_description=CustomExtraction(_extract_featured_snippet_description),
    )

    def __init__(
        self,
        settings: Settings | None = None,
        token_provider: AsyncTokenProvider | None = None,
    ):
        """
        Initialize adapter.

        Args:
            settings: Settings to use. Loaded lazily from config if None.
            token_provider: Source of the async token. Uses the
                process-wide provider if None.
        """
        super().__init__(settings)
        self._token_provider = token_provider

    @property
    def token_provider(self) -> AsyncTokenProvider:
        if self._token_provider is None:
            self._token_provider = get_async_token_provider()
        return self._token_provider

    def extraction_spec(self) -> ExtractionSpec:
        return self._spec

    # =========================================================================
    # Web search
    # =========================================================================

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        return self.get_request(
            query,
            SEARCH_URL,
            [
                ("q", query.query),
                # nfpr=1 turns off autocorrection
                ("nfpr", "1"),
                ("filter", "0"),
                ("start", "0"),
                # mobile surface, searchable without js
                ("asearch", "arc"),
                ("async", self.token_provider.async_value()),
            ],
        )

    # =========================================================================
    # Image search
    # =========================================================================

    def build_image_request(self, query: SearchQuery) -> EngineRequest | None:
        # the images json api returns fewer results than scraping the page
        return self.get_request(
            query,
            SEARCH_URL,
            [("q", query.query), ("udm", "2"), ("prmd", "ivsnmbtz")],
        )

    def parse_image_response(self, body: str | bytes) -> EngineImagesResponse:
        response = parse_images_body(body)
        logger.info(
            "Parsed image results",
            engine=self.name,
            result_count=len(response.image_results),
        )
        return response

    # =========================================================================
    # Autocomplete
    # =========================================================================

    def build_autocomplete_request(self, query: SearchQuery) -> EngineRequest | None:
        return self.get_request(
            query,
            AUTOCOMPLETE_URL,
            [
                ("output", "firefox"),
                ("client", "firefox"),
                ("hl", "US-en"),
                ("q", query.query),
            ],
        )

    def parse_autocomplete_response(self, body: str | bytes) -> list[str]:
        """
        Parse a Firefox-style suggestion response: ``["query", ["s1", "s2"]]``.

        Returns:
            Suggestions in rank order; empty on any shape mismatch.
        """
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Autocomplete response is not JSON", engine=self.name, error=str(e))
            return []

        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            logger.warning("Unexpected autocomplete response shape", engine=self.name)
            return []

        return [s for s in data[1] if isinstance(s, str)]
