"""Configuration utilities for infrastructure layer."""

import os
from typing import Optional

DEFAULT_BASE_URL = "https://api.ean-search.org/api"


def get_api_token() -> Optional[str]:
    """
    Get the EAN-Search API token.

    Returns:
        Token from EAN_SEARCH_API_TOKEN env var, or None if not set
    """
    token = os.getenv("EAN_SEARCH_API_TOKEN", "").strip()
    return token or None


def get_base_url() -> str:
    """
    Get the API endpoint.

    Returns:
        Endpoint from EAN_SEARCH_BASE_URL env var,
        defaults to the public EAN-Search API
    """
    return os.getenv("EAN_SEARCH_BASE_URL") or DEFAULT_BASE_URL
