"""Configuration management for the DevCamper bootcamps API."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEVCAMPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL"
    )
    mongodb_database: str = Field(default="devcamper", description="MongoDB database name")

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8000, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")
    instance_id: str = Field(default="devcamper-1", description="Instance identifier")
    version: str = Field(default="0.1.0", description="Service version")

    # Auth
    jwt_secret: str = Field(default="change-me-in-production", description="JWT secret key")
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_issuer: Optional[str] = Field(default=None, description="JWT issuer")
    jwt_role_claim: str = Field(default="role", description="Claim holding the caller role")
    admin_role: str = Field(default="admin", description="Role exempt from ownership rules")
    publisher_roles: list[str] = Field(
        default=["publisher", "admin"],
        description="Roles allowed to create, update and delete bootcamps"
    )

    # Listing
    pagination_default_limit: int = Field(default=25, description="Default page size")
    pagination_max_limit: int = Field(default=100, description="Maximum page size")

    # CORS configuration (explicit allowlist for security)
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )
    cors_allowed_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods"
    )
    cors_allowed_headers: list[str] = Field(
        default=["Authorization", "Content-Type", "X-Request-ID"],
        description="Allowed request headers"
    )

    # Validators
    @field_validator("mongodb_url")
    @classmethod
    def validate_mongodb_url(cls, v: str) -> str:
        """Validate MongoDB connection URL format."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("mongodb_url must be a MongoDB URL (mongodb:// or mongodb+srv://)")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str, info) -> str:
        """Validate JWT secret is not default in production."""
        debug = info.data.get("debug", False)
        if v == "change-me-in-production" and not debug:
            raise ValueError("jwt_secret must be changed from default value in production")
        return v

    @field_validator("pagination_default_limit", "pagination_max_limit")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Page sizes must be positive")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
