"""
RightDao Engine Adapter.
"""

from __future__ import annotations

from serpkit.search.engines.base import SelectorEngine
from serpkit.search.models import EngineRequest, SearchQuery

SEARCH_URL = "https://rightdao.com/search"


class RightDaoEngine(SelectorEngine):
    """Adapter for RightDao."""

    name = "rightdao"

    result_selector = "div.item"
    title_selector = "div.title"
    href_selector = "a[href]"
    description_selector = "div.description"

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        return self.get_request(query, SEARCH_URL, [("q", query.query)])
