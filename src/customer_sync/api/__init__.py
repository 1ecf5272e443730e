"""Customer API client package."""

from .client import APIConfig, CustomerAPIClient
from .customers import CustomersAPI

__all__ = ["APIConfig", "CustomerAPIClient", "CustomersAPI"]
