"""Customer schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Customer(BaseModel):
    id: int
    cg_id: str = Field(default="", alias="cgId")
    name: str = ""
    email: str = ""
    mobile: str = ""

    model_config = {"frozen": True, "populate_by_name": True}

    def to_wire(self) -> dict[str, Any]:
        """Dump using the API field names (``cgId``)."""
        return self.model_dump(by_alias=True)


class CustomerPageData(BaseModel):
    customers: list[Any] | None = None
    count: int | None = None


class CustomerPage(BaseModel):
    """Envelope returned by the customer filter endpoint.

    ``customers`` stays untyped here; records are checked one by one by the
    normalizer so a single bad record does not reject the whole page.
    """

    success: bool = False
    data: CustomerPageData | None = None

    @property
    def customers(self) -> list[Any]:
        if self.data is None or self.data.customers is None:
            return []
        return self.data.customers

    @property
    def count(self) -> int:
        if self.data is None:
            return 0
        return self.data.count or 0
