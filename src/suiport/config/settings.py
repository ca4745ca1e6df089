"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SuiPort configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    app_name: str = Field(default="SuiPort", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Database - Supabase
    supabase_url: str = Field(description="Supabase project URL")
    supabase_key: SecretStr = Field(description="Supabase API key")
    postgres_schema: str = Field(
        default="public", description="PostgreSQL schema for SuiPort tables"
    )

    # Sui RPC
    sui_rpc_url: str = Field(
        default="https://fullnode.mainnet.sui.io:443",
        description="Sui fullnode JSON-RPC endpoint URL",
    )

    # Price sources
    sevenk_price_url: str = Field(
        default="https://prices.7k.ag", description="7k aggregator price API base URL"
    )
    coingecko_api_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )
    dexscreener_api_url: str = Field(
        default="https://api.dexscreener.com", description="DexScreener API base URL"
    )
    price_request_timeout: float = Field(
        default=5.0, gt=0, description="Timeout in seconds for price API requests"
    )

    # DEX reserve stage
    cetus_sui_usdc_pool: str = Field(
        default="0x2e041f3fd93646dcc877f783c1f2b7fa62d30271bdef1f71de2574eddf1ebc44",
        description="Cetus SUI/USDC pool object read by the reserve stage",
    )
    dex_reserve_mode: Literal["compute_only", "enabled"] = Field(
        default="compute_only",
        description="compute_only reads reserves but yields no price; enabled returns the ratio",
    )

    # Retry policy
    retry_max_attempts: int = Field(default=3, ge=1, le=10, description="Attempts per external call")
    retry_base_delay: float = Field(
        default=1.0, ge=0, description="Linear backoff unit in seconds"
    )

    # Wallet aggregation
    wallet_price_concurrency: int = Field(
        default=8, ge=1, le=100, description="Concurrent price lookups per wallet"
    )

    # Circuit Breaker
    circuit_breaker_threshold: int = Field(
        default=5, ge=1, description="Failures before circuit opens"
    )
    circuit_breaker_cooldown: int = Field(
        default=30, ge=1, description="Seconds before half-open"
    )

    # Scheduler
    scheduler_enabled: bool = Field(
        default=True, description="Enable SUI price sampling and zero-price sweep jobs"
    )

    @field_validator(
        "supabase_url",
        "sui_rpc_url",
        "sevenk_price_url",
        "coingecko_api_url",
        "dexscreener_api_url",
    )
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Validate URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("cetus_sui_usdc_pool")
    @classmethod
    def validate_object_id(cls, v: str) -> str:
        """Validate Sui object id format."""
        if not v.startswith("0x"):
            raise ValueError("Sui object id must start with 0x")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]  # Values from env
