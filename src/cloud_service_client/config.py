"""
Configuration settings for the cloud service client.

All settings are loaded from environment variables (prefixed with
``CLOUD_CLIENT_``) with sensible defaults. Use a .env file for local
development. Settings only seed client-wide defaults; every value can still
be overridden per request through the ``cloud_client`` options block.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloud_service_client.models.options import CloudClientOptions, RetryOptions


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUD_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "cloud-service-client"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Transport ===
    TIMEOUT_MS: int = Field(default=60000, gt=0)  # Aborts an attempt after this long

    # === Retry & Backoff ===
    RETRY_COUNT: int = Field(default=3, ge=-1)  # -1 retries forever
    RETRY_DELAY_MS: int = Field(default=1000, ge=0)
    RETRY_DELAY_MULTIPLE: float = Field(default=2.0, ge=0)

    # === Eventual consistency (opt-in strategies) ===
    EVENTUALLY_CONSISTENT_CREATE: bool = False
    EVENTUALLY_CONSISTENT_UPDATE: bool = False
    EVENTUALLY_CONSISTENT_DELETE: bool = False

    # === Cookies ===
    HANDLE_COOKIES: bool = False  # Client-lifetime jar fed by Set-Cookie

    def to_client_options(self) -> CloudClientOptions:
        """Build the client-wide default options block from these settings."""
        return CloudClientOptions(
            timeout=self.TIMEOUT_MS,
            retry=RetryOptions(
                count=self.RETRY_COUNT,
                delay=self.RETRY_DELAY_MS,
                delay_multiple=self.RETRY_DELAY_MULTIPLE,
            ),
            eventually_consistent_create=self.EVENTUALLY_CONSISTENT_CREATE,
            eventually_consistent_update=self.EVENTUALLY_CONSISTENT_UPDATE,
            eventually_consistent_delete=self.EVENTUALLY_CONSISTENT_DELETE,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance (cached).

    Environment variables are read once per process; tests that change them
    call ``get_settings.cache_clear()``.
    """
    return Settings()
