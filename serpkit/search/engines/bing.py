"""
Bing Engine Adapter.

Web and image search. Bing picks result locale from IP geolocation unless
told otherwise, so locale is forced twice: ``language:``/``loc:`` operators
in the query and the ``_EDGE_CD``/``_EDGE_S`` cookies Bing's own edge sets.
"""

from __future__ import annotations

import json
import re

from bs4 import Tag

from serpkit.search.engines.base import BaseEngine, split_language
from serpkit.search.errors import ParseError
from serpkit.search.extraction import (
    CustomExtraction,
    ExtractionSpec,
    parse_document,
    render_bullets,
    render_children,
    select_attr,
)
from serpkit.search.models import (
    EngineImageResult,
    EngineImagesResponse,
    EngineRequest,
    SearchQuery,
)
from serpkit.search.url_cleaning import clean_bing_url
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://www.bing.com/search"
IMAGES_URL = "https://www.bing.com/images/async"

LANGUAGE_TO_COUNTRY = {
    "en": "US",
    "de": "DE",
    "fr": "FR",
    "es": "ES",
    "it": "IT",
    "pt": "PT",
    "ru": "RU",
    "ja": "JP",
    "ko": "KR",
    "zh": "CN",
    "pl": "PL",
    "nl": "NL",
    "sv": "SE",
    "da": "DK",
    "no": "NO",
    "fi": "FI",
    "cs": "CZ",
    "sk": "SK",
    "hu": "HU",
    "tr": "TR",
    "ar": "SA",
    "he": "IL",
    "hi": "IN",
    "th": "TH",
    "vi": "VN",
}

RESULT_SELECTOR = "#b_results > li.b_algo"
TITLE_SELECTOR = ".b_algo h2 > a"
HREF_SELECTOR = "a[href]"
DESCRIPTION_SELECTOR = ".b_caption > p, p.b_algoSlug, .b_caption .ipText"
FEATURED_SNIPPET_SELECTOR = "#b_results > li.b_ans.b_top"
FEATURED_SNIPPET_TITLE_SELECTOR = "h2 a"
FEATURED_SNIPPET_HREF_SELECTOR = "h2 a[href], cite"
FEATURED_SNIPPET_TEXT_SELECTOR = (
    ".b_focusTextLarge, .b_focusTextMedium, .b_caption > p, .rwrl"
)
LABEL_ICON_CLASS = "algoSlug_icon"

IMAGE_CONTAINER_SELECTOR = ".imgpt"
IMAGE_ELEMENT_SELECTOR = ".iusc"
# caption text looks like "1200 x 1600 · jpegWikipedia" or "1500×1013fity.club"
SIZE_PATTERN = re.compile(r"(\d+)\s*[×x]\s*(\d+)")
# bing wraps query matches in the title with these private-use characters
HIGHLIGHT_MARKERS = ("\ue000", "\ue001")


def language_to_country(lang: str) -> str:
    """Default country for a bare language code."""
    return LANGUAGE_TO_COUNTRY.get(lang, "US")


def _str_field(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _is_label_icon(tag: Tag) -> bool:
    return LABEL_ICON_CLASS in (tag.get("class") or [])


def _extract_href(element: Tag) -> str:
    return clean_bing_url(select_attr(element, HREF_SELECTOR, "href"))


def _extract_description(element: Tag) -> str:
    container = element.select_one(DESCRIPTION_SELECTOR)
    if container is None:
        return ""
    return render_children(container, _is_label_icon, recursive=False).strip()


def _extract_featured_snippet_href(element: Tag) -> str:
    match = element.select_one(FEATURED_SNIPPET_HREF_SELECTOR)
    if match is None:
        return ""
    href = match.get("href")
    url = href if isinstance(href, str) else match.get_text().strip()
    return clean_bing_url(url)


def _extract_featured_snippet_description(element: Tag) -> str:
    container = element.select_one(FEATURED_SNIPPET_TEXT_SELECTOR)
    if container is not None:
        return render_children(container, _is_label_icon).strip()
    list_el = element.select_one("ul, ol")
    if list_el is not None:
        return render_bullets(list_el)
    return ""


class BingEngine(BaseEngine):
    """Adapter for Bing web and image search."""

    name = "bing"
    supports_images = True

    _spec = ExtractionSpec(
        result=RESULT_SELECTOR,
        title=TITLE_SELECTOR,
        href=CustomExtraction(_extract_href),
        description=CustomExtraction(_extract_description),
        featured_snippet=FEATURED_SNIPPET_SELECTOR,
        featured_snippet_title=FEATURED_SNIPPET_TITLE_SELECTOR,
        featured_snippet_href=CustomExtraction(_extract_featured_snippet_href),
        featured_snippet_description=CustomExtraction(_extract_featured_snippet_description),
    )

    def extraction_spec(self) -> ExtractionSpec:
        return self._spec

    # =========================================================================
    # Locale shaping
    # =========================================================================

    def _locale(self, query: SearchQuery) -> tuple[str, str] | None:
        """(lang, COUNTRY) for the query, or None when no language is set."""
        if not query.config.language:
            return None
        lang, country = split_language(query.config.language)
        return lang, country or language_to_country(lang)

    def shape_query(self, query: SearchQuery) -> str:
        """Append ``language:``/``loc:`` operators when a locale is set."""
        locale = self._locale(query)
        if locale is None:
            return query.query
        lang, country = locale
        return f"{query.query} language:{lang} loc:{country}"

    def locale_cookie(self, query: SearchQuery) -> str | None:
        """Cookie forcing the market and UI language, or None."""
        locale = self._locale(query)
        if locale is None:
            return None
        lang, country = locale
        region = f"{lang}-{country}"
        return f"_EDGE_CD=m={region}&u={lang}; _EDGE_S=mkt={region}&ui={lang}"

    def _request(
        self, query: SearchQuery, base_url: str, params: list[tuple[str, str]]
    ) -> EngineRequest:
        cookie = self.locale_cookie(query)
        extra = {"Cookie": cookie} if cookie else None
        return self.get_request(query, base_url, params, extra)

    # =========================================================================
    # Web search
    # =========================================================================

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        return self._request(
            query,
            SEARCH_URL,
            # filters=rcrse:"1" turns off "did you mean" autocorrection
            [("q", self.shape_query(query)), ("filters", 'rcrse:"1"')],
        )

    # =========================================================================
    # Image search
    # =========================================================================

    def build_image_request(self, query: SearchQuery) -> EngineRequest | None:
        return self._request(
            query,
            IMAGES_URL,
            [
                ("q", self.shape_query(query)),
                ("async", "content"),
                ("first", "1"),
                ("count", "35"),
            ],
        )

    def parse_image_response(self, body: str | bytes) -> EngineImagesResponse:
        """
        Parse Bing's async image grid.

        Metadata lives as JSON in the ``m`` attribute of each ``.iusc``
        element; dimensions only appear in the caption text.

        Raises:
            ParseError: If an ``m`` attribute is present but not valid JSON.
        """
        soup = parse_document(body)
        image_results: list[EngineImageResult] = []

        for container in soup.select(IMAGE_CONTAINER_SELECTOR):
            image_el = container.select_one(IMAGE_ELEMENT_SELECTOR)
            if image_el is None:
                logger.debug("Image container without image element, skipping")
                continue

            raw = image_el.get("m")
            if not isinstance(raw, str):
                # not every tile carries metadata
                continue

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ParseError(
                    "Bing image metadata is not valid JSON",
                    engine=self.name,
                    details={"error": str(e), "metadata": raw[:200]},
                ) from e
            if not isinstance(data, dict):
                logger.warning("Bing image metadata is not a JSON object", metadata=raw[:200])
                continue

            text = container.get_text()
            if not text.strip():
                continue

            match = SIZE_PATTERN.search(text)
            if match is None:
                if ":" in text or ">" in text:
                    # video tiles show a duration instead of dimensions
                    continue
                logger.warning("Could not read image dimensions", text=text)
                continue

            title = _str_field(data, "t")
            for marker in HIGHLIGHT_MARKERS:
                title = title.replace(marker, "")

            image_results.append(
                EngineImageResult(
                    page_url=_str_field(data, "purl"),
                    image_url=_str_field(data, "murl"),
                    title=title,
                    width=int(match.group(1)),
                    height=int(match.group(2)),
                )
            )

        logger.info("Parsed image results", engine=self.name, result_count=len(image_results))
        return EngineImagesResponse(image_results=tuple(image_results))
