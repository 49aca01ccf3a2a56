"""
Engine Registry and Factory Functions.

Manages registration and retrieval of engine adapters.
"""

from __future__ import annotations

from serpkit.search.engines.base import BaseEngine
from serpkit.utils.config import Settings, get_settings
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

# Populated by serpkit.search.engines.__init__
_engine_registry: dict[str, type[BaseEngine]] = {}


def register_engine(engine_name: str, engine_class: type[BaseEngine]) -> None:
    """
    Register an adapter class for an engine.

    Args:
        engine_name: Engine name.
        engine_class: Adapter class (must inherit BaseEngine).
    """
    if not issubclass(engine_class, BaseEngine):
        raise TypeError("Engine must inherit from BaseEngine")

    _engine_registry[engine_name.lower()] = engine_class
    logger.debug("Registered engine", engine=engine_name)


def get_engine(engine_name: str, settings: Settings | None = None) -> BaseEngine | None:
    """
    Get an adapter instance for an engine.

    Args:
        engine_name: Engine name (case-insensitive).
        settings: Settings to hand to the adapter. Uses global settings if None.

    Returns:
        Adapter instance, or None if unknown or disabled in settings.
    """
    name_lower = engine_name.lower()
    engine_class = _engine_registry.get(name_lower)

    if engine_class is None:
        logger.warning("No adapter available for engine", engine=engine_name)
        return None

    if settings is None:
        settings = get_settings()
    if not settings.get_engine_settings(name_lower).enabled:
        logger.info("Engine disabled in settings", engine=name_lower)
        return None

    return engine_class(settings=settings)


def get_available_engines(settings: Settings | None = None) -> list[str]:
    """Get sorted names of registered engines that are enabled."""
    if settings is None:
        settings = get_settings()
    return sorted(
        name for name in _engine_registry if settings.get_engine_settings(name).enabled
    )
