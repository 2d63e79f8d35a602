"""
Platform Configuration Management

Centralizes all configuration for the contact management platform.
Supports multiple environments (local, dev, prod) with proper secret management.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""

    LOCAL = "local"
    DEV = "dev"
    PROD = "prod"


class PlatformConfig(BaseSettings):
    """
    Platform-wide configuration settings.

    Loads from environment variables with .env file support.
    All secrets should be injected via environment in production.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Field(default=Environment.LOCAL)

    # MongoDB (tenant records live in the default database)
    mongo_db_url: str = Field(default="mongodb://localhost:27017")
    default_database_name: str = Field(default="default")
    tenant_db_prefix: str = Field(default="tenant_")

    # Security
    jwt_secret_key: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expiry_hours: int = Field(default=24)

    # Bootstrap administrator
    admin_username: str = Field(default="admin")
    admin_password: str = Field(default="admin")
    admin_name: str = Field(default="System Administrator")

    # Tenant interceptor path filters (prefix match)
    tenant_interceptor_include_paths: list[str] = Field(default_factory=lambda: ["/"])
    tenant_interceptor_exclude_paths: list[str] = Field(
        default_factory=lambda: [
            "/health",
            "/ping",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/auth/token",
            "/error",
        ]
    )

    # Paging
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Logging
    log_level: str = Field(default="INFO")

    # CORS Configuration
    allowed_origins: str = Field(default="http://localhost:3000")

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Ensure secret key is properly set in non-local environments."""
        env = info.data.get("environment", Environment.LOCAL)
        if env != Environment.LOCAL and v == "change-me-in-production":
            raise ValueError("jwt_secret_key must be set in non-local environments")
        return v

    @field_validator("admin_password")
    @classmethod
    def validate_admin_password(cls, v: str, info) -> str:
        """Refuse the default admin password outside local development."""
        env = info.data.get("environment", Environment.LOCAL)
        if env != Environment.LOCAL and v == "admin":
            raise ValueError("admin_password must be set in non-local environments")
        return v

    @field_validator("default_page_size", "max_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page sizes must be positive")
        return v

    def get_allowed_origins_list(self) -> list[str]:
        """Parse CORS allowed origins into a list."""
        if self.environment == Environment.LOCAL:
            return ["*"]  # Allow all in local development
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PROD

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == Environment.LOCAL


@lru_cache()
def get_config() -> PlatformConfig:
    """
    Get cached platform configuration.

    Uses lru_cache to ensure config is loaded only once.
    """
    return PlatformConfig()


# Export for easy importing
config = get_config()
