"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional, Union
import os


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Database - Support both full URL and individual components
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: Optional[str] = None
    POSTGRES_DB: Optional[str] = None

    # CORS - Can be a list or comma-separated string
    CORS_ORIGINS: Union[list, str] = ["*"]  # In production, specify the scanner app origin

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    # Application
    APP_TITLE: str = "Rollcall Check-in Tracker"
    APP_DESCRIPTION: str = "QR badge check-in and attendance tracking"
    APP_VERSION: str = "1.0.0"

    # Environment
    ENVIRONMENT: str = "development"  # development, staging, production

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_JSON: bool = False  # Always on in production

    # Check-in engine
    CHECKIN_MAX_ATTEMPTS: int = 5  # Decision retries after a lost conditional update
    DUPLICATE_SCAN_ALERT_THRESHOLD: int = 3  # Badges scanned more often than this get flagged

    # Rate limiting (slowapi). REDIS_URL switches storage from memory to Redis.
    RATE_LIMIT_ENABLED: bool = True
    REDIS_URL: Optional[str] = None

    # Database Connection Pool Configuration
    DB_POOL_SIZE: int = 15  # Steady-state pool (a few dozen scanner devices)
    DB_MAX_OVERFLOW: int = 25  # Additional connections for doors-open spikes
    DB_POOL_TIMEOUT: int = 10  # Seconds to wait for a pooled connection
    DB_STATEMENT_TIMEOUT_MS: int = 5000  # PostgreSQL statement_timeout
    DB_TIMEOUT_SECONDS: int = 15  # SQLite busy timeout
    DB_CREATE_TABLES: bool = True  # Create missing tables on startup

    def get_database_url(self) -> str:
        """
        Get database URL from either DATABASE_URL or individual components.
        Priority: DATABASE_URL > individual components > default (dev only)
        """
        if self.DATABASE_URL:
            if self.DATABASE_URL.startswith("postgres://"):
                # Heroku-style URLs are not accepted by SQLAlchemy
                return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
            return self.DATABASE_URL

        if all([self.POSTGRES_USER, self.POSTGRES_PASSWORD,
                self.POSTGRES_HOST, self.POSTGRES_DB]):
            port = self.POSTGRES_PORT or "5432"
            return (
                f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{port}/{self.POSTGRES_DB}"
            )

        # Development fallback only
        if self.ENVIRONMENT == "development":
            return "sqlite:///./rollcall.db"

        raise ValueError(
            "Database configuration missing. Provide either DATABASE_URL or "
            "all of: POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_HOST, POSTGRES_DB"
        )

    def validate_production_config(self) -> None:
        """Validate that production-critical settings are properly configured."""
        if self.ENVIRONMENT == "production":
            issues = []

            if self.CORS_ORIGINS == ["*"]:
                issues.append("CORS_ORIGINS should be restricted to specific domains")

            if not self.DATABASE_URL and not self.POSTGRES_HOST:
                issues.append("DATABASE_URL or POSTGRES_* settings are required")

            if self.CHECKIN_MAX_ATTEMPTS < 2:
                issues.append("CHECKIN_MAX_ATTEMPTS must allow at least one retry")

            if issues:
                raise ValueError(
                    "Production configuration errors:\n" +
                    "\n".join(f"  - {issue}" for issue in issues)
                )


settings = Settings()

# Validate production configuration on startup
if os.getenv("ENVIRONMENT") == "production":
    settings.validate_production_config()
