"""
Base configuration settings.

Every settings class reads the same .env file; this one also carries the
HTTP server options of the mentor API.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Shared .env handling plus server options."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", description="development, staging or production")
    debug: bool = Field(default=False, description="Reload on code changes")
    log_level: str = Field(default="INFO", description="Root log level")
    host: str = Field(default="localhost", description="Bind address for uvicorn")
    port: int = Field(default=8082, ge=1, le=65535, description="Bind port for uvicorn")
    api_prefix: str = Field(default="/api/v1", description="Prefix of the HTTP routers")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed by the CORS middleware",
    )
