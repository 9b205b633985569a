# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Configuration management for the Reservation Coverage Analyzer.

This module handles loading and validating configuration from environment
variables with sensible defaults.
"""

import json
from typing import Annotated, Any, Optional

from pydantic import Field, AliasChoices, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict, SettingsError


class ConfigurationError(Exception):
    """Raised when a required setting is missing or unusable."""
    pass


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development except the
    target subscription, which must always be provided.
    """

    # Server Configuration
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind the server to",
        validation_alias=AliasChoices("RESERVATION_SERVER_HOST", "HOST")
    )
    port: int = Field(
        default=8080,
        description="Port to run the server on",
        validation_alias=AliasChoices("RESERVATION_SERVER_PORT", "PORT")
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="LOG_LEVEL"
    )
    environment: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
        validation_alias=AliasChoices("ENVIRONMENT", "ENV")
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
        validation_alias="DEBUG"
    )

    # Azure Identity
    azure_subscription_id: Optional[str] = Field(
        default=None,
        description="Subscription whose VMs and reservations are reconciled",
        validation_alias="AZURE_SUBSCRIPTION_ID"
    )
    azure_tenant_id: Optional[str] = Field(
        default=None,
        description="Tenant for service principal authentication",
        validation_alias="AZURE_TENANT_ID"
    )
    azure_client_id: Optional[str] = Field(
        default=None,
        description="Service principal application id",
        validation_alias="AZURE_CLIENT_ID"
    )
    azure_client_secret: Optional[str] = Field(
        default=None,
        description="Service principal secret (DefaultAzureCredential is used when unset)",
        validation_alias="AZURE_CLIENT_SECRET"
    )
    azure_max_retries: int = Field(
        default=3,
        description="Retry budget handed to the Azure SDK retry policy",
        validation_alias="AZURE_MAX_RETRIES",
        ge=0
    )

    # Analysis Configuration
    feed_timeout_seconds: float = Field(
        default=120.0,
        description="Upper bound for draining either inventory feed",
        validation_alias="FEED_TIMEOUT_SECONDS",
        gt=0
    )
    reserved_resource_types: Annotated[list[str], NoDecode] = Field(
        default=["VirtualMachines"],
        description="Reservation resource types counted as VM capacity",
        validation_alias="RESERVED_RESOURCE_TYPES"
    )
    sort_report: bool = Field(
        default=True,
        description="Sort report rows by location then VM size",
        validation_alias="SORT_REPORT"
    )

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix for environment variables
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("reserved_resource_types", mode="before")
    @classmethod
    def parse_resource_types(cls, value: Any) -> Any:
        """Accept a JSON list or a comma-separated string."""
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]

    @property
    def uses_client_secret(self) -> bool:
        """Whether a full service principal is configured."""
        return bool(
            self.azure_tenant_id and self.azure_client_id and self.azure_client_secret
        )

    def require_subscription_id(self) -> str:
        """
        Return the target subscription id.

        Raises:
            ConfigurationError: If AZURE_SUBSCRIPTION_ID is missing or blank
        """
        subscription_id = (self.azure_subscription_id or "").strip()
        if not subscription_id:
            raise ConfigurationError(
                "AZURE_SUBSCRIPTION_ID is not set in environment variables."
            )
        return subscription_id


def get_settings() -> Settings:
    """
    Get application settings.

    Loads settings from environment variables and .env file.

    Returns:
        Settings instance with all configuration values

    Raises:
        ConfigurationError: If a configured value cannot be parsed
    """
    try:
        return Settings()
    except (ValidationError, SettingsError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def settings() -> Settings:
    """
    Get the global settings instance.

    Creates the settings instance on first call and caches it.

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings
