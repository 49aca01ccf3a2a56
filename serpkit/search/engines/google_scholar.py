"""
Google Scholar Engine Adapter.
"""

from __future__ import annotations

from serpkit.search.engines.base import SelectorEngine
from serpkit.search.models import EngineRequest, SearchQuery

SEARCH_URL = "https://scholar.google.com/scholar"


class GoogleScholarEngine(SelectorEngine):
    """Adapter for Google Scholar (high block risk)."""

    name = "google_scholar"
    challenge_selectors = ("form#gs_captcha_f",)

    result_selector = "div.gs_r"
    title_selector = "h3"
    href_selector = "h3 > a[href]"
    description_selector = "div.gs_rs"

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        return self.get_request(
            query,
            SEARCH_URL,
            [("hl", "en"), ("as_sdt", "0,5"), ("q", query.query), ("btnG", "")],
        )
