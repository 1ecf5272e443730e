"""Customer API Client - typed wrapper around the customer filter backend.

Authentication is a static bearer token taken from settings; token issuance
and refresh are handled elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import httpx

from ..errors import NetworkError

if TYPE_CHECKING:
    from ..config import CustomerSyncSettings
    from .customers import CustomersAPI


@dataclass
class APIConfig:
    """Customer API configuration."""

    token: str
    base_url: str = "https://cgv2.creativegalileo.com/api/V1"
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: "CustomerSyncSettings | None" = None) -> "APIConfig":
        """Build config from environment-driven settings."""
        if settings is None:
            from ..config import settings
        return cls(
            token=settings.api_token,
            base_url=settings.api_url,
            timeout=settings.request_timeout,
        )

    def to_dict(self) -> dict[str, Any]:
        """Export config as dictionary."""
        return {
            "token": self.token[:12] + "..." if self.token else None,
            "base_url": self.base_url,
            "timeout": self.timeout,
        }


class CustomerAPIClient:
    """Customer API client.

    Usage:
        async with CustomerAPIClient.from_settings() as api:
            page = await api.customers.fetch_page(1, 50, search_query="ann")
    """

    def __init__(self, config: APIConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            config: APIConfig with token and base URL
            transport: Optional httpx transport (tests, proxies)
        """
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._customers: CustomersAPI | None = None

    @classmethod
    def from_settings(cls, settings: "CustomerSyncSettings | None" = None) -> "CustomerAPIClient":
        return cls(APIConfig.from_settings(settings))

    async def __aenter__(self) -> "CustomerAPIClient":
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.config.token}",
                "Accept": "application/json, text/plain, */*",
            },
        )

        from .customers import CustomersAPI

        self._customers = CustomersAPI(self)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def customers(self) -> "CustomersAPI":
        """Customers API."""
        if not self._customers:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        return self._customers

    async def _get(self, endpoint: str, **params) -> Any:
        """Make GET request, mapping every failure to NetworkError."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")
        try:
            resp = await self._client.get(endpoint, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise NetworkError(f"HTTP {status} from {endpoint}", status_code=status) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise NetworkError(f"Malformed JSON from {endpoint}") from e
