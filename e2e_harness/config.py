"""
Configuration module for the end-to-end harness.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
Harness components never read the environment themselves: they receive the
values resolved here as plain parameters.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HarnessSettings(BaseSettings):
    """
    Runtime settings for a harness run.

    Attributes:
        UI_BASE_URL: Base URL of the storefront under test
        API_BASE_URL: Base URL of the booking API under test
        BOOKER_USER: Username used to obtain booking API tokens
        BOOKER_PASS: Password used to obtain booking API tokens
        CI: Unattended mode flag (more workers, retries, junit output)
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Emit structured JSON log lines instead of colored text
        REQUEST_TIMEOUT: Timeout for booking API requests in seconds
        ACTION_TIMEOUT_MS: Max wait for a single in-page interaction
        NAVIGATION_TIMEOUT_MS: Max wait for a full page navigation
        SCENARIO_TIMEOUT: Total time budget of one scenario attempt in seconds
        ARTIFACTS_DIR: Directory receiving traces, screenshots and videos
        HEADLESS: Run the browser without a visible window
    """

    # Targets
    UI_BASE_URL: str = Field(
        default="https://www.saucedemo.com",
        description="Base URL of the storefront under test",
    )
    API_BASE_URL: str = Field(
        default="https://restful-booker.herokuapp.com",
        description="Base URL of the booking API under test",
    )

    # Credentials
    BOOKER_USER: str = Field(default="admin", description="Booking API username")
    BOOKER_PASS: str = Field(default="password123", description="Booking API password")

    # Execution mode
    CI: bool = Field(
        default=False,
        description="Unattended mode; accepts 'true' or '1'",
    )

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON structured logging",
    )

    # Time budgets
    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=60.0,
        description="Timeout for booking API requests in seconds",
    )
    ACTION_TIMEOUT_MS: int = Field(
        default=10_000,
        gt=0,
        description="Max wait for in-page interactions in milliseconds",
    )
    NAVIGATION_TIMEOUT_MS: int = Field(
        default=30_000,
        gt=0,
        description="Max wait for page navigations in milliseconds",
    )
    SCENARIO_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        description="Total time budget of one scenario attempt in seconds",
    )

    # Browser and artifacts
    ARTIFACTS_DIR: str = Field(
        default="test-results",
        description="Directory for traces, screenshots and videos",
    )
    HEADLESS: bool = Field(default=True, description="Run browser headless")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("UI_BASE_URL", "API_BASE_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """
        Validate that target URLs are properly formatted.

        Args:
            value: The URL to validate

        Returns:
            The validated URL without trailing slash

        Raises:
            ValueError: If URL is invalid
        """
        if not value:
            raise ValueError("Target URL cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(
                f"Target URL must start with http:// or https://, got: {value}"
            )

        return value


@lru_cache(maxsize=1)
def get_settings() -> HarnessSettings:
    """Return the settings for this process, loaded once."""
    return HarnessSettings()
