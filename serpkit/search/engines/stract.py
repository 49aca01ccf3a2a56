"""
Stract Engine Adapter.
"""

from __future__ import annotations

from serpkit.search.engines.base import SelectorEngine
from serpkit.search.models import EngineRequest, SearchQuery

SEARCH_URL = "https://stract.com/search"
# Stract's default search rankings value, not a tracking token
DEFAULT_RANKINGS = "N4IgNglg1gpgJiAXAbQLoBoRwgZ0rBFDEAIzAHsBjApNAXyA"


class StractEngine(SelectorEngine):
    """Adapter for Stract."""

    name = "stract"

    result_selector = (
        "div.grid.w-full.grid-cols-1.space-y-10.place-self-start"
        " > div > div.flex.min-w-0.grow.flex-col"
    )
    title_selector = "a[title]"
    href_selector = "a[href]"
    description_selector = "#snippet-text"

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        return self.get_request(
            query,
            SEARCH_URL,
            [
                ("ss", "false"),
                ("sr", DEFAULT_RANKINGS),
                ("q", query.query),
                ("optic", ""),
            ],
        )
