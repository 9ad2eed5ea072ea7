"""
Configuration Management for the Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every threshold the rules depend on (suggestion limits, due-soon window,
category share) is a setting rather than a literal in the rule code.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Business rule thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Suggestion engine
    suggestion_limit: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum advisories returned per evaluation"
    )
    category_share_threshold: Decimal = Field(
        default=Decimal("0.40"),
        gt=0,
        le=1,
        description="Share of monthly spend above which one category triggers a tip"
    )
    savings_rate_target: Decimal = Field(
        default=Decimal("0.20"),
        gt=0,
        le=1,
        description="Monthly savings rate that earns a success advisory"
    )

    # Loans
    due_soon_days: int = Field(
        default=3,
        ge=0,
        le=60,
        description="Days before the due date at which a loan counts as due soon"
    )

    max_interest_rate: Decimal = Field(
        default=Decimal("100"),
        gt=0,
        description="Largest monthly interest rate, in percent, accepted for a loan"
    )

    # Sanity ceiling for a single amount
    max_amount: Decimal = Field(
        default=Decimal("10000000.00"),
        gt=0,
        description="Largest amount accepted for a single entry or loan"
    )


class StorageSettings(BaseSettings):
    """Storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="memory",
        description="Storage backend: 'memory' or 'json'"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the JSON backend (one file per account)"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for JSON file reads/writes before giving up"
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Only known backends."""
        value = v.strip().lower()
        if value not in {"memory", "json"}:
            raise ValueError(f"Unsupported storage backend: {v}. Allowed: memory, json")
        return value


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False for console output)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        value = v.strip().upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return value


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    ``<name>_error`` entry for each failure. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "storage", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
