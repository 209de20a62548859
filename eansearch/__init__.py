"""
EAN-Search.org API client.

Search the EAN barcode database by barcode, ISBN, prefix, keyword or
category, verify checksums and render barcode images.

Structure:
- domain/: Response models, classification and errors
- infrastructure/: HTTP client and configuration
"""

__version__ = "1.0.0"

from eansearch.domain.product.models import AccountStatus, ExtProduct, Product
from eansearch.domain.shared.errors import (
    BARCODE_NOT_FOUND,
    INVALID_TOKEN,
    APIError,
    EANSearchError,
    MalformedHeaderError,
    RateLimitError,
    UndefinedAPIError,
)
from eansearch.infrastructure.api_client import EANSearchClient

__all__ = [
    "AccountStatus",
    "APIError",
    "BARCODE_NOT_FOUND",
    "EANSearchClient",
    "EANSearchError",
    "ExtProduct",
    "INVALID_TOKEN",
    "MalformedHeaderError",
    "Product",
    "RateLimitError",
    "UndefinedAPIError",
]
