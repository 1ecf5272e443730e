"""Shared test fixtures for the customer sync test suite."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from customer_sync.schemas import CustomerPage

SAMPLE_TOKEN = "test_token_abc123"
SAMPLE_BASE_URL = "https://customers.test/api/V1"


# ============================================================================
# Mock Response Data
# ============================================================================

MOCK_CUSTOMER_ALICE = {
    "id": "101",
    "cgId": "CG-101",
    "name": "Alice",
    "email": "alice@example.com",
    "mobile": "+15550000101",
}

MOCK_CUSTOMER_BOB = {
    "id": 102,
    "cgId": None,
    "name": "Bob",
    "email": "",
    "mobile": "+15550000102",
}

MOCK_CUSTOMER_BAD_ID = {"id": "x", "name": "Nobody"}


def make_page(customers: list[Any], count: int | None = None, success: bool = True) -> dict:
    """Build a raw customer filter response body."""
    return {
        "success": success,
        "data": {
            "customers": customers,
            "count": len(customers) if count is None else count,
        },
    }


class FakeFetcher:
    """Fetcher stub that serves queued pages and records every call.

    Queue items are response dicts or exceptions to raise. Set ``gate`` to an
    ``asyncio.Event`` to hold fetches open until the test releases them.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []
        self.gate: asyncio.Event | None = None

    async def fetch_page(self, page_no, page_size, search_query="", sort_by="", filter_by=""):
        self.calls.append(
            {
                "page_no": page_no,
                "page_size": page_size,
                "search_query": search_query,
                "sort_by": sort_by,
                "filter_by": filter_by,
            }
        )
        if self.gate is not None:
            await self.gate.wait()
        item = self.responses.pop(0) if self.responses else make_page([])
        if isinstance(item, Exception):
            raise item
        return CustomerPage.model_validate(item)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_config():
    """Create an APIConfig for tests."""
    from customer_sync.api.client import APIConfig

    return APIConfig(token=SAMPLE_TOKEN, base_url=SAMPLE_BASE_URL, timeout=5.0)


@pytest.fixture
def mock_http_client():
    """Create a mock httpx.AsyncClient."""
    client = AsyncMock()

    response = MagicMock()
    response.status_code = 200
    response.json.return_value = make_page([])
    response.raise_for_status = MagicMock()

    client.get = AsyncMock(return_value=response)
    return client


@pytest.fixture
def mock_api_client(mock_config, mock_http_client):
    """Create a CustomerAPIClient with an initialized customers API."""
    from customer_sync.api.client import CustomerAPIClient
    from customer_sync.api.customers import CustomersAPI

    client = CustomerAPIClient(mock_config)
    client._client = mock_http_client
    client._customers = CustomersAPI(client)
    return client


@pytest.fixture
def mock_response():
    """Factory fixture to create mock HTTP responses."""
    def _create_response(data: Any, status_code: int = 200):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = data
        response.raise_for_status = MagicMock()
        if status_code >= 400:
            from httpx import HTTPStatusError
            response.raise_for_status.side_effect = HTTPStatusError(
                f"HTTP {status_code}", request=MagicMock(), response=response
            )
        return response
    return _create_response


@pytest_asyncio.fixture
async def cache():
    """Open in-memory customer cache."""
    from customer_sync.cache import CustomerCache

    store = CustomerCache("sqlite+aiosqlite:///:memory:", schema_version=1)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def db_url(tmp_path):
    """URL of a file-backed cache database that survives close/open."""
    return f"sqlite+aiosqlite:///{tmp_path / 'customers.db'}"


# ============================================================================
# CLI Testing Fixtures
# ============================================================================

@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()
