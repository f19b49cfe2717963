"""
ManoSetu Application Settings

Production-grade configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""
    
    model_config = SettingsConfigDict(env_prefix="MANOSETU_DB_")
    
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="manosetu_db", description="Database name")
    user: str = Field(default="manosetu_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")
    
    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class JWTSettings(BaseSettings):
    """Bearer token verification configuration."""
    
    model_config = SettingsConfigDict(env_prefix="MANOSETU_JWT_")
    
    secret_key: SecretStr = Field(default=SecretStr("dev_jwt_secret_key_not_for_production"), description="JWT signing secret")
    algorithm: str = Field(default="HS256", description="JWT algorithm")


class VideoSettings(BaseSettings):
    """
    Media-transport provider configuration.
    
    The certificate signs room credentials and must never
    leave the backend. Only the app id is shared with clients.
    """
    
    model_config = SettingsConfigDict(env_prefix="MANOSETU_VIDEO_")
    
    app_id: str = Field(default="", description="Agora application id")
    app_certificate: SecretStr = Field(default=SecretStr(""), description="Agora application certificate")
    token_ttl_seconds: int = Field(default=3600, ge=60, le=86400, description="Credential lifetime")
    
    def is_configured(self) -> bool:
        """Check whether credentials can be signed."""
        return bool(self.app_id and self.app_certificate.get_secret_value())


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration."""
    
    model_config = SettingsConfigDict(env_prefix="MANOSETU_RATE_LIMIT_")
    
    enabled: bool = Field(default=True)
    requests_per_minute: int = Field(default=60, ge=1, le=1000)
    burst_size: int = Field(default=10, ge=0, le=100)


class SentrySettings(BaseSettings):
    """Sentry error tracking configuration."""
    
    model_config = SettingsConfigDict(env_prefix="MANOSETU_SENTRY_")
    
    dsn: str = Field(default="", description="Sentry DSN (empty disables tracking)")
    traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)


class Settings(BaseSettings):
    """
    Main application settings.
    
    All configuration is loaded from environment variables with MANOSETU_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.
    
    Usage:
        settings = get_settings()
        db_url = settings.database.async_url
    """
    
    model_config = SettingsConfigDict(
        env_prefix="MANOSETU_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins"
    )
    
    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)
    
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Uses LRU cache to ensure settings are only loaded once.
    For testing, use dependency injection to override.
    
    Returns:
        Settings: Application settings instance
    """
    return Settings()
