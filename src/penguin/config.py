"""Application configuration using pydantic-settings.

Token parameters are expressed in whole tokens here and converted to base
units (``10 ** token_decimals``) through the ``*_units`` properties.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SECONDS_PER_DAY = 86400


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Database
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/penguin.db",
        description="Database connection URL",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Token
    # ======================
    token_name: str = Field(default="MemePenguin", description="Token display name")
    token_symbol: str = Field(default="PGN", description="Token ticker symbol")
    token_decimals: int = Field(default=18, description="Fractional digits of one token")
    total_supply_tokens: int = Field(
        default=1_000_000_000, description="Supply minted to the owner at deployment"
    )
    owner_address: str = Field(
        default="0x0000000000000000000000000000000000000001",
        description="Administrator address that receives the initial supply",
    )

    # ======================
    # Fee Policy
    # ======================
    tax_rate_bps: int = Field(default=500, description="Transfer tax in basis points (5%)")
    fee_mode: str = Field(
        default="inclusive",
        description="inclusive: tax taken from the amount; surcharge: tax charged on top",
    )

    # ======================
    # Trade Limits
    # ======================
    daily_max_trade_amount_tokens: int = Field(
        default=1_000_000, description="Maximum single transfer for non-exempt accounts"
    )
    daily_trade_limit_count: int = Field(
        default=10, description="Maximum transfers per rolling window for non-exempt senders"
    )
    trade_window_seconds: int = Field(
        default=SECONDS_PER_DAY, description="Length of the rolling trade window"
    )

    # ======================
    # Liquidity Manager
    # ======================
    liquidity_manager_address: Optional[str] = Field(
        default=None, description="Account that collects routed tax"
    )
    pair_asset: str = Field(default="WETH", description="Asset the pool pairs the token with")
    liquify_threshold_tokens: int = Field(
        default=1_000, description="Minimum manager balance before swap-and-liquify runs"
    )
    liquify_fraction_bps: int = Field(
        default=5000, description="Share of the manager balance converted per run"
    )
    liquify_interval_seconds: int = Field(
        default=3600, description="Seconds between swap-and-liquify runs"
    )

    # ======================
    # Concurrency
    # ======================
    lock_timeout_seconds: float = Field(
        default=30.0, description="Maximum wait for the ledger lock"
    )

    @field_validator("fee_mode")
    @classmethod
    def _check_fee_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in ("inclusive", "surcharge"):
            raise ValueError(f"Unknown fee mode: {value}")
        return value

    @field_validator("tax_rate_bps", "liquify_fraction_bps")
    @classmethod
    def _check_bps(cls, value: int) -> int:
        if not 0 <= value <= 10000:
            raise ValueError(f"Basis points out of range: {value}")
        return value

    @property
    def unit(self) -> int:
        """Base units per whole token."""
        return 10 ** self.token_decimals

    @property
    def total_supply_units(self) -> int:
        return self.total_supply_tokens * self.unit

    @property
    def daily_max_trade_amount_units(self) -> int:
        return self.daily_max_trade_amount_tokens * self.unit

    @property
    def liquify_threshold_units(self) -> int:
        return self.liquify_threshold_tokens * self.unit

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url),
            "token": {
                "name": self.token_name,
                "symbol": self.token_symbol,
                "decimals": self.token_decimals,
                "total_supply_tokens": self.total_supply_tokens,
            },
            "fees": {
                "tax_rate_bps": self.tax_rate_bps,
                "fee_mode": self.fee_mode,
            },
            "limits": {
                "daily_max_trade_amount_tokens": self.daily_max_trade_amount_tokens,
                "daily_trade_limit_count": self.daily_trade_limit_count,
                "trade_window_seconds": self.trade_window_seconds,
            },
            "liquidity": {
                "manager": self.liquidity_manager_address or "(not set)",
                "pair_asset": self.pair_asset,
                "threshold_tokens": self.liquify_threshold_tokens,
                "fraction_bps": self.liquify_fraction_bps,
                "interval_seconds": self.liquify_interval_seconds,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
