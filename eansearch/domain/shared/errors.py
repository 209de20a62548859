"""
Domain exceptions.

Typed exceptions for the outcomes an EAN-Search API call can have
besides success. Transport failures (httpx.HTTPError) are not wrapped.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# SERVICE CONTRACT LITERALS
# ═══════════════════════════════════════════════════════════

# Error texts are matched verbatim; they are owned by the remote service.
BARCODE_NOT_FOUND = "Barcode not found"
INVALID_TOKEN = "Invalid token"
UNDEFINED_API_ERROR = "Undefined API error"


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class EANSearchError(Exception):
    """
    Base exception for all EAN-Search errors.

    Allows catching every library error with a single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# APPLICATION ERRORS
# ═══════════════════════════════════════════════════════════


class APIError(EANSearchError):
    """
    Error reported by the remote service.

    Carries the service's own error text so callers can match on
    known values such as INVALID_TOKEN.

    Example:
        >>> err = APIError("Invalid token")
        >>> assert err.message == INVALID_TOKEN
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RateLimitError(APIError):
    """
    Service answered HTTP 429 with an error body.

    Raised when:
    - Retry budget of a list operation is exhausted
    - A non-retried operation is throttled
    """

    pass


# ═══════════════════════════════════════════════════════════
# UNCLASSIFIED RESPONSES
# ═══════════════════════════════════════════════════════════


class UndefinedAPIError(EANSearchError):
    """
    Response body matched neither the success nor the error shape.

    Example:
        >>> raise UndefinedAPIError()
        Traceback (most recent call last):
        ...
        eansearch.domain.shared.errors.UndefinedAPIError: Undefined API error
    """

    def __init__(self, message: str = UNDEFINED_API_ERROR) -> None:
        super().__init__(message)
        self.message = message


class MalformedHeaderError(UndefinedAPIError):
    """Credit header present but not a decimal integer."""

    pass
