"""
Shared fixtures for eansearch tests.

Unit tests talk to a MockEANSearchAPI through httpx.MockTransport;
integration tests (marker integration_real) use the real service.
"""

import json
from pathlib import Path
from typing import Any, Iterator, Optional, Union
from unittest.mock import MagicMock, patch

import httpx
import pytest
from dotenv import load_dotenv

from eansearch.infrastructure.api_client import CREDITS_HEADER, EANSearchClient

# Load .env first, .env.test overrides it
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path, override=True)


# ═══════════════════════════════════════════════════════════
# MOCK SERVICE
# ═══════════════════════════════════════════════════════════


class MockEANSearchAPI:
    """Serves queued responses in order and records every request."""

    def __init__(self) -> None:
        self.responses: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []

    def add(
        self,
        body: Union[str, list[Any], dict[str, Any], None],
        status_code: int = 200,
        credits: Optional[Union[int, str]] = None,
    ) -> None:
        headers = {}
        if credits is not None:
            headers[CREDITS_HEADER] = str(credits)
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append(httpx.Response(status_code, text=text, headers=headers))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.url}")
        return self.responses.pop(0)

    @property
    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)


@pytest.fixture
def mock_api() -> MockEANSearchAPI:
    return MockEANSearchAPI()


@pytest.fixture
def client(mock_api: MockEANSearchAPI) -> Iterator[EANSearchClient]:
    """Client wired to the mock service."""
    http_client = httpx.Client(transport=httpx.MockTransport(mock_api.handler))
    yield EANSearchClient(token="test-token", http_client=http_client)
    http_client.close()


@pytest.fixture
def mock_sleep() -> Iterator[MagicMock]:
    """Skip retry pauses."""
    with patch("time.sleep") as sleep:
        yield sleep
