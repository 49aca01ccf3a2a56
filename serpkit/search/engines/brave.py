"""
Brave Search Engine Adapter.
"""

from __future__ import annotations

from serpkit.search.engines.base import SelectorEngine
from serpkit.search.models import EngineRequest, SearchQuery
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://search.brave.com/search"


class BraveEngine(SelectorEngine):
    """Adapter for Brave Search."""

    name = "brave"

    result_selector = "#results > .snippet[data-pos]:not(.standalone)"
    title_selector = ".title"
    href_selector = "a"
    description_selector = ".snippet-content, .video-snippet > .snippet-description"

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        # Brave ignores exact-match quotes, so quoted queries only add noise
        if '"' in query.query:
            logger.debug("Declined quoted query", engine=self.name)
            return None

        return self.get_request(query, SEARCH_URL, [("q", query.query)])
