"""
serpkit search module.

Extraction core:
    ExtractionSpec / extract() - declarative DOM-to-result extraction
    NoExtraction, SelectorExtraction, CustomExtraction - field rules

URL cleaning:
    clean_bing_url(), clean_google_url(), normalize_url()

Engine adapters:
    get_engine() - Get an adapter by name
    get_available_engines() - Names of registered, enabled engines

Typical use:
    engine = get_engine("bing")
    request = engine.build_search_request(SearchQuery(query="rust borrow checker"))
    if request is not None:
        body = client.send(request.to_httpx()).text
        outcome = engine.parse(body)
"""

from serpkit.search.async_token import (
    AsyncTokenProvider,
    get_async_token_provider,
    reset_async_token_provider,
)
from serpkit.search.engines import (
    BaseEngine,
    BingEngine,
    BraveEngine,
    GoogleEngine,
    GoogleScholarEngine,
    MarginaliaEngine,
    RightDaoEngine,
    StractEngine,
    get_available_engines,
    get_engine,
    register_engine,
)
from serpkit.search.errors import ParseError, SerpKitError, UnsupportedOperationError
from serpkit.search.extraction import (
    CustomExtraction,
    ExtractionSpec,
    NoExtraction,
    SelectorExtraction,
    extract,
)
from serpkit.search.models import (
    EngineImageResult,
    EngineImagesResponse,
    EngineRequest,
    EngineResponse,
    FeaturedSnippet,
    ParseOutcome,
    QueryConfig,
    SearchQuery,
    SearchResult,
)
from serpkit.search.url_cleaning import clean_bing_url, clean_google_url, normalize_url

__all__ = [
    # Extraction
    "ExtractionSpec",
    "NoExtraction",
    "SelectorExtraction",
    "CustomExtraction",
    "extract",
    # URL cleaning
    "clean_bing_url",
    "clean_google_url",
    "normalize_url",
    # Models
    "SearchQuery",
    "QueryConfig",
    "EngineRequest",
    "EngineResponse",
    "SearchResult",
    "FeaturedSnippet",
    "EngineImageResult",
    "EngineImagesResponse",
    "ParseOutcome",
    # Errors
    "SerpKitError",
    "ParseError",
    "UnsupportedOperationError",
    # Token
    "AsyncTokenProvider",
    "get_async_token_provider",
    "reset_async_token_provider",
    # Engines
    "BaseEngine",
    "BingEngine",
    "BraveEngine",
    "GoogleEngine",
    "GoogleScholarEngine",
    "MarginaliaEngine",
    "RightDaoEngine",
    "StractEngine",
    "get_engine",
    "get_available_engines",
    "register_engine",
]
