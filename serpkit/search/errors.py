"""
Error types for search result extraction.

Only two severities exist:
- Fatal for one call: raised as ParseError (or UnsupportedOperationError for
  operations an adapter does not offer).
- Soft: a single bad candidate is logged and dropped, never raised.
"""

from typing import Any


class SerpKitError(Exception):
    """
    Base exception for serpkit errors.

    Carries the engine name and structured details for logging.
    """

    def __init__(
        self,
        message: str,
        *,
        engine: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message.
            engine: Engine the error relates to, if any.
            details: Optional additional error details.
        """
        super().__init__(message)
        self.message = message
        self.engine = engine
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary suitable for structured logs."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "error": self.message,
        }
        if self.engine:
            result["engine"] = self.engine
        if self.details:
            result["details"] = self.details
        return result


class ParseError(SerpKitError):
    """Raised when a response body cannot be parsed at all.

    Covers a missing result selector and custom extraction rules that find
    data present but unparsable (e.g. Bing's image metadata attribute).
    """


class UnsupportedOperationError(SerpKitError):
    """Raised when an adapter is asked for an operation it does not offer."""

    def __init__(self, engine: str, operation: str):
        super().__init__(
            f"Engine '{engine}' does not support {operation}",
            engine=engine,
            details={"operation": operation},
        )
