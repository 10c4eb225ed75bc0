"""
AML Risk configuration management using pydantic-settings.

Process-level settings only. Risk thresholds, motivations and escalation
rules live in amlrisk.risk.config and are fetched at runtime.
"""

import logging
import warnings
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Remote risk configuration endpoint
    risk_config_url: Optional[str] = Field(
        default=None,
        description="URL of the risk engine configuration endpoint (GET, JSON)",
    )
    risk_config_api_key: Optional[str] = Field(
        default=None,
        description="Bearer token sent to the risk configuration endpoint",
    )
    risk_config_ttl_seconds: float = Field(
        default=300.0,
        description="How long a fetched risk configuration is reused",
    )
    risk_config_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for the risk configuration endpoint",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("risk_config_ttl_seconds", "risk_config_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Warn when production runs on the built-in risk configuration."""
        if self.environment == "production" and not self.risk_config_url:
            warnings.warn(
                "RISK_CONFIG_URL not set in production. "
                "The built-in default risk configuration will be used.",
                UserWarning,
                stacklevel=2,
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Global settings instance
settings = Settings()
