"""Customer sync configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class CustomerSyncSettings(BaseSettings):
    # Remote customer API
    api_url: str = "https://cgv2.creativegalileo.com/api/V1"
    api_token: str = ""
    request_timeout: float = 30.0

    # Paging and search
    page_size: int = 50
    debounce_seconds: float = 0.5
    default_sort: str = ""
    default_filter: str = ""
    # Drop responses that belong to a search query the user has since replaced.
    discard_stale: bool = True

    # Local cache
    database_url: str = "sqlite+aiosqlite:///customers.db"
    schema_version: int = 1
    echo_sql: bool = False

    log_level: str = "WARNING"

    model_config = {"env_prefix": "CUSTOMER_SYNC_", "env_file": ".env", "extra": "ignore"}

    @property
    def token_configured(self) -> bool:
        return bool(self.api_token.strip())

    def redacted(self) -> dict[str, object]:
        """Settings as a dict with the bearer token shortened."""
        data = self.model_dump()
        token = data.get("api_token") or ""
        data["api_token"] = (token[:12] + "...") if token else None
        return data


settings = CustomerSyncSettings()
