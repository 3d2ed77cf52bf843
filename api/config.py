"""Server configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """HTTP server settings; read from unprefixed environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Listen port")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    list_limit: int = Field(
        default=1000,
        ge=1,
        description="Rows fetched for listing and statistics endpoints",
    )


# Global settings instance
server_settings = ServerSettings()
