"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: which store backend holds the ledger,
where it lives, and the defaults the ledger falls back to.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value store configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="BUDGET_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    backend: Literal["json_file", "memory", "google_sheets"] = Field(
        default="json_file",
        description="Which key-value store backs the ledger"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the JSON file store"
    )
    key_prefix: str = Field(
        default="budget_",
        description="Prefix applied to every stored key"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets store configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    store_sheet_name: str = Field(
        default="KeyValueStore",
        description="Name of the worksheet holding key/value rows"
    )
    
    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local logs"
    )
    
    # Ledger defaults
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency label used when nothing is stored"
    )
    default_warning_threshold: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Budget usage percent that triggers a warning"
    )
    
    # Dashboard sizes
    top_categories_limit: int = Field(
        default=5,
        ge=1,
        description="How many categories the dashboard ranks"
    )
    recent_transactions_limit: int = Field(
        default=3,
        ge=1,
        description="How many recent transactions the dashboard shows"
    )
    
    # Validation thresholds
    large_amount_warning: float = Field(
        default=1000000.0,
        description="Amounts above this get a non-blocking warning"
    )
    max_amount: float = Field(
        default=1000000000000.0,
        gt=0,
        description="Amounts above this are rejected; stored numbers must stay exact as JSON floats"
    )


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
    
    # Loaded lazily so a missing Google Sheets config only matters
    # when that backend is selected
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


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
    
    Returns a dict of {setting_name: is_valid}, plus a
    `<setting_name>_error` entry for each failure.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        storage = settings.storage
        results["storage"] = True
    except Exception as e:
        storage = None
        results["storage"] = False
        results["storage_error"] = str(e)
    
    # Sheets settings are only required when that backend is in use
    if storage is not None and storage.backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)
    
    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
    
    return results
