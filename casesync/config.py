"""Configuration loading for the casesync integration service.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Case-management (SM) endpoint configuration
    sm_endpoint_url: str = Field(
        default="http://localhost:8081/sm/services/SmsStd",
        description="SOAP endpoint of the case-management system",
    )
    sm_namespace: str = Field(
        default="http://sm.example.gov/sms/std",
        description="Target namespace of the SOAP operations",
    )
    sm_message_template: str = Field(
        default="x_g_cfm_vas.VAS SM Outbound",
        description="Name of the outbound SOAP message template",
    )
    sm_operation: str = Field(
        default="SmsStdCreatePersParmCase",
        description="Name of the create operation within the message template",
    )
    sm_auth_profile: str = Field(
        default="VAS SM Dev Basic Auth Creds",
        description="Name of the basic-auth profile used for the call",
    )
    sm_require_auth: bool = Field(
        default=False,
        description="Refuse to call unauthenticated when the auth profile is missing",
    )
    sm_timeout_seconds: float = Field(
        default=30.0,
        description="Transport timeout for the create call in seconds",
    )

    # Credential store configuration
    credentials_file: str = Field(
        default="./credentials.json",
        description="JSON file holding named basic-auth profiles",
    )

    # Record store configuration
    store_sqlite_path: str = Field(
        default="./data/records.db",
        description="SQLite database file path",
    )

    # Trigger configuration
    trigger_field: str = Field(
        default="hhs_id",
        description="Applicant field whose empty-to-populated transition triggers a sync",
    )
    trigger_mode: Literal["sync", "async"] = Field(
        default="sync",
        description="Run synchronization inline with the save or as a background task",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["webhook", "once"] = Field(
        default="webhook",
        description="Serve synchronize requests or synchronize the given applicants and exit",
    )

    # Webhook configuration
    webhook_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on for webhook server",
    )
    webhook_port: int = Field(
        default=8080,
        description="Port to listen on for webhook server",
    )
    webhook_api_key: str = Field(
        default="",
        description="API key for webhook authentication (required for production)",
    )
    webhook_require_auth: bool = Field(
        default=False,
        description="Require API key authentication for webhook endpoints",
    )

    @field_validator("sm_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure the transport timeout is bounded and positive."""
        if v <= 0:
            raise ValueError("sm_timeout_seconds must be positive")
        return v

    @field_validator("sm_endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Ensure the endpoint is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("sm_endpoint_url must start with http:// or https://")
        return v

    @field_validator("trigger_field", "sm_message_template", "sm_operation")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure names used for lookups are not blank."""
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("webhook_port")
    @classmethod
    def validate_webhook_port(cls, v: int) -> int:
        """Ensure webhook port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("webhook_port must be between 1 and 65535")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
