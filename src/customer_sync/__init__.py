"""Customer Sync - paginated customer list with a local cache and offline fallback."""

__version__ = "0.1.0"

from .api import CustomerAPIClient, CustomersAPI, APIConfig
from .cache import CustomerCache
from .errors import (
    CustomerSyncError,
    NetworkError,
    PersistenceError,
    SchemaMismatchError,
    ValidationError,
)
from .normalizer import normalize, normalize_many
from .schemas import Customer, CustomerPage
from .sync import LoadOutcome, LoadResult, SyncManager

__all__ = [
    "__version__",
    "APIConfig",
    "Customer",
    "CustomerAPIClient",
    "CustomerCache",
    "CustomerPage",
    "CustomerSyncError",
    "CustomersAPI",
    "LoadOutcome",
    "LoadResult",
    "NetworkError",
    "PersistenceError",
    "SchemaMismatchError",
    "SyncManager",
    "ValidationError",
    "normalize",
    "normalize_many",
]
