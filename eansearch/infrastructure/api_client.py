"""
EAN-Search API client.

Handles HTTP requests to the EAN-Search.org barcode database,
classifies responses and tracks the account's remaining credits.
"""

import binascii
from types import TracebackType
from typing import Any, Optional, TypeVar

import httpx
import structlog
from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from eansearch import __version__
from eansearch.domain.product.models import (
    AccountStatus,
    BarcodeImage,
    ChecksumResult,
    ErrorReply,
    ExtProduct,
    Product,
    ProductCountry,
)
from eansearch.domain.product.response_mapper import (
    decode_object,
    decode_product_list,
    decode_single,
)
from eansearch.domain.shared.errors import (
    BARCODE_NOT_FOUND,
    APIError,
    MalformedHeaderError,
    RateLimitError,
    UndefinedAPIError,
)
from eansearch.infrastructure.config import (
    DEFAULT_BASE_URL,
    get_api_token,
    get_base_url,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

MAX_API_TRIES = 3
RETRY_BACKOFF_SECONDS = 1.0
CREDITS_HEADER = "x-credits-remaining"


def _is_rate_limited(response: httpx.Response) -> bool:
    return response.status_code == httpx.codes.TOO_MANY_REQUESTS


def _log_rate_limited(retry_state: RetryCallState) -> None:
    logger.warning(
        f"Rate limited, retrying in {RETRY_BACKOFF_SECONDS}s",
        attempt=retry_state.attempt_number,
        max_attempts=MAX_API_TRIES,
    )


def _last_response(retry_state: RetryCallState) -> httpx.Response:
    """Hand the final 429 response back for normal classification."""
    if retry_state.outcome is None:
        raise RuntimeError("Retry finished without an outcome")
    return retry_state.outcome.result()


class EANSearchClient:
    """EAN-Search API client.

    Not safe for concurrent use: the credit cache is updated on
    every request without locking.

    Example:
        >>> with EANSearchClient(token="secret") as client:  # doctest: +SKIP
        ...     product = client.barcode_lookup(5099750442227)
        ...     if product:
        ...         print(product.name)
    """

    USER_AGENT = f"python-eansearch/{__version__}"

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize API client.

        No request is made until the first operation.

        Args:
            token: EAN-Search API token
            base_url: Service endpoint
            http_client: Preconfigured client (not closed by close())
        """
        self.base_url = httpx.URL(base_url, params={"format": "json", "token": token})
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client()
        self._credits_remaining: Optional[int] = None

    @classmethod
    def from_env(cls) -> "EANSearchClient":
        """Create a client from EAN_SEARCH_API_TOKEN / EAN_SEARCH_BASE_URL.

        Raises:
            ValueError: If EAN_SEARCH_API_TOKEN is not set
        """
        token = get_api_token()
        if not token:
            raise ValueError("EAN_SEARCH_API_TOKEN environment variable required")
        return cls(token=token, base_url=get_base_url())

    def __enter__(self) -> "EANSearchClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            self._http.close()

    # ───────────────────────── transport ─────────────────────────

    def _get(self, params: dict[str, Any]) -> httpx.Response:
        """Issue one GET and record the credit header.

        Raises:
            httpx.HTTPError: On transport failure (not wrapped)
            MalformedHeaderError: If the credit header is not an integer
        """
        logger.debug("EAN-Search request", **params)
        response = self._http.get(
            self.base_url.copy_merge_params(params),
            headers={"User-Agent": self.USER_AGENT},
        )
        logger.debug(
            "EAN-Search response",
            op=params.get("op"),
            status=response.status_code,
        )
        self._update_credits(response)
        return response

    def _get_with_retry(self, params: dict[str, Any]) -> httpx.Response:
        """GET, re-issuing the request while the service answers 429.

        At most MAX_API_TRIES attempts with a fixed pause in between;
        the last response is returned even if it is still a 429.
        """
        retrying = Retrying(
            stop=stop_after_attempt(MAX_API_TRIES),
            wait=wait_fixed(RETRY_BACKOFF_SECONDS),
            retry=retry_if_result(_is_rate_limited),
            before_sleep=_log_rate_limited,
            retry_error_callback=_last_response,
        )
        return retrying(self._get, params)

    def _update_credits(self, response: httpx.Response) -> None:
        value = response.headers.get(CREDITS_HEADER)
        if value is None:
            # No header: the previous value predates this request.
            self._credits_remaining = None
            return
        try:
            self._credits_remaining = int(value)
        except ValueError as e:
            self._credits_remaining = None
            raise MalformedHeaderError(f"Invalid {CREDITS_HEADER} header: {value!r}") from e

    @staticmethod
    def _api_error(reply: ErrorReply, response: httpx.Response) -> APIError:
        logger.warning(
            "EAN-Search API error",
            error=reply.error,
            status=response.status_code,
        )
        if _is_rate_limited(response):
            return RateLimitError(reply.error)
        return APIError(reply.error)

    # ───────────────────────── shapes ─────────────────────────

    def _lookup(self, params: dict[str, Any]) -> Optional[ExtProduct]:
        response = self._get(params)
        result = decode_single(response.text, ExtProduct)

        if isinstance(result, ErrorReply):
            if result.error == BARCODE_NOT_FOUND:
                logger.info("Barcode not found", **params)
                return None
            raise self._api_error(result, response)

        if result.value is None:
            logger.info("Empty lookup result", **params)
        return result.value

    def _fetch_one(self, params: dict[str, Any], model: type[T]) -> T:
        response = self._get(params)
        result = decode_single(response.text, model)

        if isinstance(result, ErrorReply):
            raise self._api_error(result, response)
        if result.value is None:
            raise UndefinedAPIError()
        return result.value

    def _search(self, params: dict[str, Any]) -> list[Product]:
        response = self._get_with_retry(params)
        result = decode_product_list(response.text, Product)

        if isinstance(result, ErrorReply):
            raise self._api_error(result, response)

        logger.debug("EAN-Search results", op=params["op"], count=len(result))
        return result

    # ───────────────────────── lookups ─────────────────────────

    def barcode_lookup(self, ean: int, language: int = 1) -> Optional[ExtProduct]:
        """Look up a product by EAN/UPC/GTIN barcode.

        Args:
            ean: Barcode number
            language: Preferred language code for the product name

        Returns:
            ExtProduct if found, None if the barcode is not in the database

        Raises:
            APIError: If the service reports any other error
            UndefinedAPIError: If the response is not recognized
        """
        return self._lookup({"op": "barcode-lookup", "ean": ean, "language": language})

    def isbn_lookup(self, isbn: int) -> Optional[ExtProduct]:
        """Look up a book by ISBN-10 or ISBN-13.

        Returns:
            ExtProduct if found, None if the ISBN is not in the database
        """
        return self._lookup({"op": "barcode-lookup", "isbn": isbn})

    # ───────────────────────── searches ─────────────────────────

    def barcode_prefix_search(self, prefix: int, language: int = 1, page: int = 0) -> list[Product]:
        """Find all products whose barcode starts with prefix.

        Raises:
            APIError: E.g. if the prefix is too short
        """
        return self._search(
            {
                "op": "barcode-prefix-search",
                "prefix": prefix,
                "page": page,
                "language": language,
            }
        )

    def product_search(self, name: str, language: int = 99, page: int = 0) -> list[Product]:
        """Find products matching all keywords in name.

        Returns:
            Matching products, empty list if none
        """
        return self._search(
            {
                "op": "product-search",
                "name": name,
                "language": language,
                "page": page,
            }
        )

    def similar_product_search(self, name: str, language: int = 99, page: int = 0) -> list[Product]:
        """Find products with names similar to name (fuzzy match)."""
        return self._search(
            {
                "op": "similar-product-search",
                "name": name,
                "language": language,
                "page": page,
            }
        )

    def category_search(
        self,
        category: int,
        name: Optional[str] = None,
        language: int = 99,
        page: int = 0,
    ) -> list[Product]:
        """Find products in a category, optionally restricted by keywords."""
        params: dict[str, Any] = {"op": "category-search", "category": category}
        if name is not None:
            params["name"] = name
        params["language"] = language
        params["page"] = page
        return self._search(params)

    # ───────────────────────── metadata ─────────────────────────

    def issuing_country(self, ean: int) -> str:
        """Country that issued the barcode (known even for unlisted products)."""
        result = self._fetch_one({"op": "issuing-country", "ean": ean}, ProductCountry)
        return result.issuing_country

    def verify_checksum(self, ean: int) -> bool:
        """Check the barcode's check digit with the service."""
        result = self._fetch_one({"op": "verify-checksum", "ean": ean}, ChecksumResult)
        return result.is_valid

    def barcode_image(self, ean: int, width: int = 102, height: int = 50) -> bytes:
        """Fetch a PNG rendering of the barcode.

        Returns:
            PNG bytes

        Raises:
            UndefinedAPIError: If the payload is not valid base64
        """
        image = self._fetch_one(
            {"op": "barcode-image", "ean": ean, "width": width, "height": height},
            BarcodeImage,
        )
        try:
            return image.decode()
        except binascii.Error as e:
            raise UndefinedAPIError() from e

    # ───────────────────────── account ─────────────────────────

    def account_status(self) -> AccountStatus:
        """Query request usage for the current billing cycle."""
        response = self._get({"op": "account-status"})
        result = decode_object(response.text, AccountStatus)

        if isinstance(result, ErrorReply):
            raise self._api_error(result, response)
        if result.value is None:
            raise UndefinedAPIError()
        return result.value

    @property
    def cached_credits(self) -> Optional[int]:
        """Credits reported by the most recent response, None if unknown."""
        return self._credits_remaining

    def credits_remaining(self) -> int:
        """Requests left in the current billing cycle.

        Returns the value captured from the last response without
        network I/O; queries account-status only when it is unknown.
        """
        if self._credits_remaining is not None:
            return self._credits_remaining

        status = self.account_status()
        if self._credits_remaining is not None:
            return self._credits_remaining
        return status.remaining
