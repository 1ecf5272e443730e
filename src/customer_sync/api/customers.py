"""Customers API - paginated, searchable customer listing."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from ..errors import NetworkError
from ..schemas import CustomerPage

if TYPE_CHECKING:
    from .client import CustomerAPIClient


class CustomersAPI:
    """Customers API.

    Usage:
        async with CustomerAPIClient.from_settings() as api:
            page = await api.customers.fetch_page(2, 50, search_query="galileo")
            page.customers  # raw records, run them through normalize()
            page.count      # total matches on the server
    """

    ENDPOINT = "/customer/filter"

    def __init__(self, client: "CustomerAPIClient"):
        self._client = client

    async def fetch_page(
        self,
        page_no: int,
        page_size: int,
        search_query: str = "",
        sort_by: str = "",
        filter_by: str = "",
    ) -> CustomerPage:
        """Fetch one page of customers.

        Args:
            page_no: 1-based page number
            page_size: Records per page
            search_query: Free text search; trimmed before sending
            sort_by: Server sort key, empty for server default
            filter_by: Server filter expression, empty for no filter

        Returns:
            CustomerPage envelope: {"success": bool, "data": {"customers": [...], "count": N}}

        Raises:
            NetworkError: transport failure, non-2xx status or malformed body
        """
        params: dict[str, Any] = {
            "paginated": "true",
            "pageNo": page_no,
            "pageSize": page_size,
            "search": (search_query or "").strip(),
            "sort": sort_by or "",
            "filter": filter_by or "",
        }
        payload = await self._client._get(self.ENDPOINT, **params)

        if not isinstance(payload, dict):
            raise NetworkError(
                f"Unexpected response body from {self.ENDPOINT}: {type(payload).__name__}"
            )
        try:
            return CustomerPage.model_validate(payload)
        except PydanticValidationError as e:
            raise NetworkError(f"Malformed customer page from {self.ENDPOINT}") from e
