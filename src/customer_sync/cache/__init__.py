"""Local customer cache."""

from .models import Base, CustomerRow, StoreMeta
from .store import CustomerCache

__all__ = ["Base", "CustomerCache", "CustomerRow", "StoreMeta"]
