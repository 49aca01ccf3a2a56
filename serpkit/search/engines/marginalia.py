"""
Marginalia Engine Adapter.

Marginalia only handles short plain-word queries well, and takes its search
profile from per-engine settings:

    engines:
      marginalia:
        extra:
          args: {profile: corpo, js: default, adtech: default}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationError

from serpkit.search.engines.base import SelectorEngine
from serpkit.search.models import EngineRequest, SearchQuery
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://old-search.marginalia.nu/search"
MAX_QUERY_WORDS = 3


class MarginaliaArgs(BaseModel):
    """Query arguments forwarded to Marginalia."""

    model_config = ConfigDict(frozen=True)

    profile: str
    js: str
    adtech: str


class MarginaliaConfig(BaseModel):
    """Shape of the ``marginalia`` settings table."""

    model_config = ConfigDict(frozen=True)

    args: MarginaliaArgs


def is_supported_query(text: str) -> bool:
    """At most three words, ASCII letters/digits and spaces only."""
    if len(text.split()) > MAX_QUERY_WORDS:
        return False
    return all((c.isascii() and c.isalnum()) or c == " " for c in text)


class MarginaliaEngine(SelectorEngine):
    """Adapter for Marginalia Search."""

    name = "marginalia"

    result_selector = "section.search-result"
    title_selector = "h2"
    href_selector = "a[href]"
    description_selector = "p.description"

    def build_search_request(self, query: SearchQuery) -> EngineRequest | None:
        if not is_supported_query(query.query):
            logger.debug("Declined unsupported query", engine=self.name)
            return None

        try:
            config = MarginaliaConfig.model_validate(self.engine_extra(query))
        except ValidationError as e:
            logger.error("Failed to parse Marginalia config", error=str(e))
            return None

        return self.get_request(
            query,
            SEARCH_URL,
            [
                ("query", query.query),
                ("profile", config.args.profile),
                ("js", config.args.js),
                ("adtech", config.args.adtech),
            ],
        )
