"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Persistence backend - exactly one store is opened at startup
    store_backend: Literal["postgres", "mongodb"] = Field(
        default="postgres", validation_alias="STORE_BACKEND",
    )

    # Relational store
    database_url: str = Field(default="", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Document store
    mongodb_uri: str = Field(default="", validation_alias="MONGODB_URI")
    mongodb_db: str = Field(default="", validation_alias="MONGODB_DB")
    mongodb_collection: str = Field(default="bookmarks", validation_alias="MONGODB_COLLECTION")
    mongodb_max_pool_size: int = Field(default=10, validation_alias="MONGODB_MAX_POOL_SIZE")

    # Authentication provider
    auth_provider: Literal["supabase", "oidc"] = Field(
        default="supabase", validation_alias="AUTH_PROVIDER",
    )
    supabase_jwt_secret: str = Field(default="", validation_alias="SUPABASE_JWT_SECRET")
    supabase_jwt_audience: str = Field(
        default="authenticated", validation_alias="SUPABASE_JWT_AUDIENCE",
    )
    oidc_issuer: str = Field(default="", validation_alias="OIDC_ISSUER")
    oidc_audience: str = Field(default="", validation_alias="OIDC_AUDIENCE")
    oidc_jwks_url_override: str = Field(default="", validation_alias="OIDC_JWKS_URL")

    # Allow-list - blank means every authenticated principal is admitted
    allowed_email: str | None = Field(default=None, validation_alias="ALLOWED_EMAIL")

    # Third-party metadata lookup (credential stays server-side)
    urlmeta_api_key: str = Field(default="", validation_alias="URLMETA_API_KEY")
    urlmeta_api_url: str = Field(
        default="https://api.urlmeta.org/meta", validation_alias="URLMETA_API_URL",
    )
    urlmeta_timeout: float = Field(default=10.0, validation_alias="URLMETA_TIMEOUT")

    # Development mode - bypasses auth for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_store_backend(self) -> "Settings":
        """Require the connection settings of the selected backend."""
        if self.store_backend == "postgres" and not self.database_url:
            raise ValueError("DATABASE_URL is required when STORE_BACKEND is 'postgres'.")
        if self.store_backend == "mongodb" and not (self.mongodb_uri and self.mongodb_db):
            raise ValueError(
                "MONGODB_URI and MONGODB_DB are required when STORE_BACKEND is 'mongodb'.",
            )
        return self

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so it is only allowed when the
        selected store lives on the local machine.
        """
        if not self.dev_mode:
            return self

        url = self.database_url if self.store_backend == "postgres" else self.mongodb_uri
        try:
            hostname = urlparse(url).hostname or ""
        except ValueError:
            hostname = ""

        if hostname.lower() not in LOCAL_HOSTS:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def oidc_jwks_url(self) -> str:
        """JWKS URL for the OIDC issuer, unless explicitly overridden."""
        if self.oidc_jwks_url_override:
            return self.oidc_jwks_url_override
        return f"{self.oidc_issuer.rstrip('/')}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
