"""
Ledger settings.

Loads configuration from environment variables using pydantic-settings.
"""

from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rebase_vault.config.constants import (
    DEFAULT_INTEREST_RATE,
    DEFAULT_PRECISION_FACTOR,
    DEFAULT_VAULT_ADDRESS,
)


LOG_LEVELS = frozenset(
    {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
)


class LedgerSettings(BaseSettings):
    """Ledger settings loaded from environment variables."""

    # Accrual
    precision_factor: int = Field(
        default=DEFAULT_PRECISION_FACTOR,
        gt=0,
        description="Fixed-point scale for per-second interest rates"
    )
    initial_interest_rate: int = Field(
        default=DEFAULT_INTEREST_RATE,
        ge=0,
        description="Global rate assigned to new depositors at startup"
    )

    # Vault
    vault_address: str = Field(
        default=DEFAULT_VAULT_ADDRESS,
        description="Custody address holding the base asset"
    )

    # Persistence
    database_url: str = "sqlite:///rebase_vault.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None
    log_rotation: str = "1 day"
    log_retention: str = "7 days"

    model_config = SettingsConfigDict(
        env_prefix="REBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the loguru level name."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(sorted(LOG_LEVELS))}"
            )
        return level

    @field_validator("vault_address")
    @classmethod
    def validate_vault_address(cls, v: str) -> str:
        """Checksum the custody address."""
        from rebase_vault.utils.validation import normalize_address

        return normalize_address(v)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if "://" not in v:
            logger.warning(f"Rejected database URL without scheme: {v!r}")
            raise ValueError("DATABASE_URL must include a scheme, e.g. sqlite://")
        return v


@lru_cache(maxsize=1)
def get_settings() -> LedgerSettings:
    """Return the process-wide settings, built on first use."""
    return LedgerSettings()


# Global settings instance
settings = get_settings()
