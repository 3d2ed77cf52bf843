"""Configuration management for the pinning client."""

from pathlib import Path

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pinning.errors import ConfigurationError

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="PINATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials
    api_key: str | None = Field(
        default=None,
        description="Pinata API key",
    )
    api_secret: str | None = Field(
        default=None,
        description="Pinata API secret",
    )
    jwt: str | None = Field(
        default=None,
        description="Pinata JWT used as bearer token",
    )

    # Provider
    base_url: str = Field(
        default="https://api.pinata.cloud",
        description="Pinata REST API base URL",
    )
    gateway_templates: dict[str, str] = Field(
        default={
            "pinata": "https://gateway.pinata.cloud/ipfs/{cid}",
            "ipfsIo": "https://ipfs.io/ipfs/{cid}",
            "cloudflare": "https://cloudflare-ipfs.com/ipfs/{cid}",
            "dweb": "https://dweb.link/ipfs/{cid}",
        },
        description="Retrieval gateway URL templates, in fallback order",
    )
    fallback_gateways: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Number of gateways tried when fetching content",
    )

    # Pagination
    page_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Rows requested per pin list page",
    )
    max_pages: int = Field(
        default=100,
        ge=1,
        description="Hard cap on pin list page requests per listing",
    )

    # Timeouts (seconds)
    upload_timeout: float = Field(default=30.0, gt=0)
    list_timeout: float = Field(default=30.0, gt=0)
    unpinned_timeout: float = Field(default=15.0, gt=0)
    unpin_timeout: float = Field(default=15.0, gt=0)
    status_timeout: float = Field(default=10.0, gt=0)
    auth_timeout: float = Field(default=10.0, gt=0)
    fetch_timeout: float = Field(default=30.0, gt=0)

    # Identity stamped into uploaded documents
    service_name: str = Field(
        default="model-pinning-service",
        description="Service name recorded in upload metadata",
    )
    service_version: str = Field(
        default="1.0.0",
        description="Service version recorded in upload metadata",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    log_format: str = Field(
        default="console",
        pattern="^(console|json)$",
        description="Log format: console or json",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional JSON log file path",
    )

    def missing_credentials(self) -> list[str]:
        """Return the environment variable names of unset credentials."""
        missing = []
        if not self.api_key:
            missing.append("PINATA_API_KEY")
        if not self.api_secret:
            missing.append("PINATA_API_SECRET")
        if not self.jwt:
            missing.append("PINATA_JWT")
        return missing

    def check_credentials(self, strict: bool = False) -> list[str]:
        """Warn about (or reject) missing credentials.

        Args:
            strict: Raise instead of warning

        Returns:
            List of missing variable names

        Raises:
            ConfigurationError: If strict and any credential is missing
        """
        missing = self.missing_credentials()
        if missing:
            if strict:
                raise ConfigurationError(
                    f"Missing IPFS configuration: {', '.join(missing)}"
                )
            logger.warning(
                "pinning_configuration_incomplete",
                missing=missing,
                hint="Get keys from https://pinata.cloud",
            )
        return missing

    @property
    def auth_headers(self) -> dict[str, str]:
        """Get bearer authorization headers for provider requests."""
        return {"Authorization": f"Bearer {self.jwt or ''}"}


# Global settings instance
settings = Settings()
