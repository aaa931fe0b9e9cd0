# src/pricing_oracle/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Environment variables (and an optional .env file) supply API keys, HTTP,
ledger and logging settings. The per-run unit list lives in the YAML file
handled by pricing_oracle.config.loader.

Files that USE this module:
- pricing_oracle.app (loads settings for logging and ledger configuration)
- pricing_oracle.adapters.providers.* (API keys, timeout, user agent)
- pricing_oracle.adapters.providers.registry (decides which sources are enabled)
- pricing_oracle.adapters.ledger.client (ledger gateway settings)

Files that this module USES:
- pricing_oracle.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from typing import Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from pricing_oracle.shared.validators import validate_api_key  # Validate API key format


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
    
    # --- Price sources (GeckoTerminal needs no key) ---
    coingecko_key: str = Field(default="", alias="COINGECKO_API_KEY")
    coinmarketcap_key: str = Field(default="", alias="COINMARKETCAP_API_KEY")
    
    # --- Forex sources ---
    twelve_data_key: str = Field(default="", alias="TWELVE_DATA_API_KEY")
    coinapi_key: str = Field(default="", alias="COINAPI_API_KEY")
    
    # --- HTTP Settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    http_user_agent: str = Field(default="pricing-oracle/0.1", alias="HTTP_USER_AGENT")
    
    # --- Ledger gateway ---
    ledger_url: str = Field(default="http://127.0.0.1:30001", alias="LEDGER_URL")
    ledger_app_id: str = Field(default="bridging-app", alias="LEDGER_APP_ID")
    ledger_role_name: str = Field(default="alliance", alias="LEDGER_ROLE_NAME")
    
    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="PRICING_ORACLE_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")
    
    @field_validator("coingecko_key", "coinmarketcap_key", "twelve_data_key", "coinapi_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate API key format (empty means the source is disabled)."""
        v = v.strip()
        if v and not validate_api_key(v):
            raise ValueError("Invalid API key format")
        return v
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return v
    
    @field_validator("ledger_url")
    @classmethod
    def validate_ledger_url(cls, v: str) -> str:
        """Strip the trailing slash so paths can be appended."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("LEDGER_URL must be an http(s) URL")
        return v


# Global settings instance
settings = Settings()
