"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ingotpool.config.business_constants import (
    DEFAULT_INGOT_PRICE,
    DEFAULT_ORDER_INTEREST_PERCENT,
    INITIAL_POOL_SERIES_MAX_ID,
    MIN_REFERRAL_WITHDRAWAL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Accounts
    engine_account: str = Field(
        ...,
        min_length=1,
        description="Account that holds engine funds on the asset ledgers",
    )
    owner_account: str = Field(
        ...,
        min_length=1,
        description="Account holding every administrative capability",
    )
    admin_accounts: str = ""  # Comma-separated list

    # Ingot pricing (per asset, in asset units)
    ingot_price_a: Decimal = Field(
        default=DEFAULT_INGOT_PRICE,
        gt=0,
        description="Price of one ingot in asset A",
    )
    ingot_price_b: Decimal = Field(
        default=DEFAULT_INGOT_PRICE,
        gt=0,
        description="Price of one ingot in asset B",
    )
    default_decimals: int = Field(
        default=18,
        ge=0,
        le=36,
        description="Decimals assumed for an asset until configured",
    )

    # Rewards and payouts
    min_referral_withdrawal: Decimal = Field(
        default=MIN_REFERRAL_WITHDRAWAL,
        ge=0,
        description="Minimum claimable referral reward for a withdrawal",
    )
    order_interest_percent: Decimal = Field(
        default=DEFAULT_ORDER_INTEREST_PERCENT,
        ge=0,
        le=1000,
        decimal_places=2,
        description="Nominal interest rate recorded on every order",
    )
    max_pool_id: int = Field(
        default=INITIAL_POOL_SERIES_MAX_ID,
        ge=1,
        description="Highest pool ID that may ever be created",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError(
                "DATABASE_URL must use a postgresql or sqlite driver"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {
            "TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"
        }:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def validate_accounts(self) -> "Settings":
        """Engine account must not double as the owner."""
        if self.engine_account == self.owner_account:
            raise ValueError(
                "ENGINE_ACCOUNT and OWNER_ACCOUNT must be different accounts"
            )
        return self

    def get_admin_accounts(self) -> list[str]:
        """Parse admin accounts from comma-separated string."""
        if not self.admin_accounts:
            return []

        result = []
        for account in self.admin_accounts.split(","):
            account_stripped = account.strip()
            if not account_stripped:
                continue
            if account_stripped == self.engine_account:
                logger.warning(
                    f"Engine account listed as admin, ignored: {account_stripped}"
                )
                continue
            result.append(account_stripped)
        return result


# Global settings instance
settings = Settings()
