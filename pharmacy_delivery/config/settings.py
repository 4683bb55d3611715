from typing import Any
from urllib.parse import quote_plus

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and `.env`).
    """

    PROJECT_NAME: str = "Pharmacy Delivery Core"
    VERSION: str = "0.1.0"

    # Application Settings
    DEBUG: bool = Field(False, description="Development mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="Log format: colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional JSON log file path")

    # Orders
    CURRENCY: str = Field("XOF", description="ISO currency used for order totals")

    # Courier assignment
    ASSIGNMENT_TIMEOUT_SECONDS: int = Field(
        180, description="Seconds a courier has to accept an assignment before it expires"
    )

    # Delivery confirmation handshake
    FORCE_CONFIRM_ENABLED: bool = Field(
        True, description="Allow couriers to force-confirm a delivery after the grace period"
    )
    FORCE_CONFIRM_GRACE_SECONDS: int = Field(
        600, description="Seconds after arrival before a courier may force-confirm"
    )
    DELIVERY_DISPUTE_WINDOW_SECONDS: int = Field(
        1800, description="Seconds after arrival before an unconfirmed delivery is flagged for review"
    )

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("pharmacy_delivery", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(10, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(20, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every X seconds")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator(
        "ASSIGNMENT_TIMEOUT_SECONDS",
        "FORCE_CONFIRM_GRACE_SECONDS",
        "DELIVERY_DISPUTE_WINDOW_SECONDS",
    )
    @classmethod
    def validate_positive_seconds(cls, v):
        if v <= 0:
            raise ValueError("Timeouts must be positive")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("colored", "json", "plain"):
            raise ValueError("LOG_FORMAT must be one of: colored, json, plain")
        return v

    @field_validator("CURRENCY")
    @classmethod
    def validate_currency(cls, v):
        if len(v) != 3:
            raise ValueError("CURRENCY must be a 3-letter ISO code")
        return v.upper()

    @computed_field
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL (asyncpg driver)."""
        user = quote_plus(self.DB_USER)
        auth = user if not self.DB_PASSWORD else f"{user}:{quote_plus(self.DB_PASSWORD)}"
        return f"postgresql+asyncpg://{auth}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT in ("development", "dev", "local", "test")


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached settings instance so environment variables are read once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
