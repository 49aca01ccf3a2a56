"""
Search Engine Adapters.

Each adapter builds outbound request descriptors for one engine and parses
that engine's responses into the shared result models.

Supported: bing, brave, google, google_scholar, marginalia, rightdao, stract.
Bing and Google also do image search; Google does autocomplete.
"""

from serpkit.search.engines.base import BaseEngine, SelectorEngine
from serpkit.search.engines.bing import BingEngine
from serpkit.search.engines.brave import BraveEngine
from serpkit.search.engines.google import GoogleEngine
from serpkit.search.engines.google_scholar import GoogleScholarEngine
from serpkit.search.engines.marginalia import MarginaliaEngine
from serpkit.search.engines.registry import (
    get_available_engines,
    get_engine,
    register_engine,
)
from serpkit.search.engines.rightdao import RightDaoEngine
from serpkit.search.engines.stract import StractEngine

# Register all engines
register_engine("bing", BingEngine)
register_engine("brave", BraveEngine)
register_engine("google", GoogleEngine)
register_engine("google_scholar", GoogleScholarEngine)
register_engine("marginalia", MarginaliaEngine)
register_engine("rightdao", RightDaoEngine)
register_engine("stract", StractEngine)

__all__ = [
    "BaseEngine",
    "SelectorEngine",
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
