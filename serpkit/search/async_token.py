"""
Rotating ``async`` token for Google's no-JS result surface.

Google's mobile endpoint (``asearch=arc``) expects an ``arc_id`` made of 23
random characters, the way its own front-end sends it. The random part is
shared process-wide and regenerated at most once per refresh interval
(one hour by default), mirroring searxng.
"""

from __future__ import annotations

import secrets
import threading
import time
from collections.abc import Callable

from serpkit.utils.config import get_settings
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

ARC_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_"
ARC_ID_LENGTH = 23
DEFAULT_REFRESH_SECONDS = 3600.0


def generate_arc_id_random() -> str:
    """Generate the random part of an arc_id."""
    return "".join(secrets.choice(ARC_ID_ALPHABET) for _ in range(ARC_ID_LENGTH))


def format_async_value(random_characters: str, page_number: int = 1) -> str:
    """Build the full ``async`` query value around the random part."""
    skip = 100 + page_number * 10
    return f"arc_id:srp_{random_characters}_{skip},use_ac:true,_fmt:prog"


class AsyncTokenProvider:
    """
    Holds the current random token and its generation time.

    Reads take no lock: the slot is an immutable (token, generated_at) tuple
    swapped in a single assignment. Regeneration happens under a lock; two
    callers racing past the expiry check may both regenerate, and the last
    write wins.
    """

    def __init__(
        self,
        refresh_interval: float = DEFAULT_REFRESH_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        generator: Callable[[], str] = generate_arc_id_random,
    ):
        """
        Initialize provider.

        Args:
            refresh_interval: Seconds a token stays valid.
            clock: Monotonic clock returning seconds.
            generator: Produces a fresh random token.
        """
        if refresh_interval <= 0:
            raise ValueError("refresh_interval must be positive")
        self._refresh_interval = refresh_interval
        self._clock = clock
        self._generator = generator
        self._write_lock = threading.Lock()
        self._slot: tuple[str, float] = (generator(), clock())

    @property
    def refresh_interval(self) -> float:
        return self._refresh_interval

    def get_or_refresh(self, now: float | None = None) -> str:
        """Return the current token, regenerating it if it has expired.

        Args:
            now: Current clock value. Uses the injected clock if None.

        Returns:
            The random token (23 characters).
        """
        if now is None:
            now = self._clock()

        token, generated_at = self._slot
        if now - generated_at <= self._refresh_interval:
            return token

        with self._write_lock:
            token = self._generator()
            self._slot = (token, now)

        logger.debug("Rotated Google async token", refresh_interval=self._refresh_interval)
        return token

    def async_value(self, now: float | None = None, page_number: int = 1) -> str:
        """Return the templated ``async`` query value."""
        return format_async_value(self.get_or_refresh(now), page_number)


_provider_instance: AsyncTokenProvider | None = None
_provider_lock = threading.Lock()


def get_async_token_provider() -> AsyncTokenProvider:
    """Get the process-wide token provider."""
    global _provider_instance

    if _provider_instance is None:
        with _provider_lock:
            if _provider_instance is None:
                _provider_instance = AsyncTokenProvider(
                    refresh_interval=get_settings().google.async_token_refresh_seconds
                )

    return _provider_instance


def reset_async_token_provider() -> None:
    """Reset the singleton instance (for testing)."""
    global _provider_instance

    with _provider_lock:
        _provider_instance = None
