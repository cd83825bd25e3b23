"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
A single ``Settings`` instance is built at startup and handed to the components
that need it (see ``saintshub_api.main.create_app``).
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy connection string (postgresql+asyncpg://...)",
    )

    # JWT
    jwt_secret_key: str = Field(min_length=32, description="Secret key for signing JWTs (minimum 32 characters)")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=60 * 24,
        description="Access token expiration in minutes",
        gt=0,
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name (e.g. production, development, staging)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines on stderr instead of human-readable text",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins (must be explicitly configured)",
    )
    cors_origin_regex: str = Field(
        default="",
        description="Regex pattern for allowed CORS origins",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum API requests per IP address within the rate limit window",
        gt=0,
    )
    rate_limit_window_seconds: int = Field(
        default=15 * 60,
        description="Length of the rate limit window in seconds",
        gt=0,
    )
    max_json_body_bytes: int = Field(
        default=10 * 1024,
        description="Largest accepted JSON or urlencoded request body (multipart uploads are exempt)",
        gt=0,
    )
    trusted_proxy_headers: str = Field(
        default="CF-Connecting-IP,X-Forwarded-For,X-Real-IP",
        description="Comma-separated list of HTTP headers to check for real client IP, in priority order",
    )

    # Mail delivery (transactional HTTP API)
    mail_api_url: str = Field(
        default="https://api.brevo.com/v3/smtp/email",
        description="Transactional email HTTP endpoint",
    )
    mail_api_key: str | None = Field(
        default=None,
        description="API key for the transactional email provider (email is skipped when unset)",
    )
    mail_timeout: float = Field(
        default=15.0,
        description="Email API request timeout in seconds",
        gt=0,
    )
    mail_from_noreply: str = Field(
        default="no-reply@saintshub.app",
        description="Sender address for user-facing notifications",
    )
    mail_from_admin: str = Field(
        default="admin@saintshub.app",
        description="Sender address for administrative notifications",
    )
    admin_notification_email: str = Field(
        default="admin@saintshub.app",
        description="Recipient of new pastor/IT registration notices",
    )

    # Brand
    brand_name: str = Field(default="Saintshub", description="Product name used in emails")
    brand_logo_url: str = Field(default="", description="Logo URL embedded in emails")
    brand_dashboard_url: str = Field(default="", description="Dashboard URL linked from emails")

    # S3-compatible object storage (avatars)
    storage_enabled: bool = Field(
        default=False,
        description="Enable avatar uploads to S3-compatible object storage",
    )
    storage_endpoint_url: str | None = Field(
        default=None,
        description="S3 endpoint URL (e.g. https://<account>.r2.cloudflarestorage.com)",
    )
    storage_access_key_id: str | None = Field(default=None, description="Object storage access key")
    storage_secret_access_key: str | None = Field(default=None, description="Object storage secret key")
    storage_region: str = Field(default="auto", description="Object storage region")
    storage_bucket: str | None = Field(default=None, description="Bucket holding uploaded images")
    storage_public_url: str | None = Field(
        default=None,
        description="Public URL prefix under which stored objects are served",
    )
    storage_avatar_prefix: str = Field(
        default="user-avatars",
        description="Key prefix for user avatar images",
    )

    @field_validator("storage_public_url")
    @classmethod
    def validate_storage_public_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Whether the app runs in production (controls error detail exposure)."""
        return self.environment.strip().lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def trusted_proxy_header_list(self) -> list[str]:
        """Parse trusted proxy headers string into a list."""
        if not self.trusted_proxy_headers.strip():
            return []
        return [h.strip() for h in self.trusted_proxy_headers.split(",") if h.strip()]


def load_settings() -> Settings:
    """Create application settings from the environment."""
    return Settings()  # type: ignore[call-arg]
