"""File Uploader Configuration."""

from datetime import timedelta
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Used when no signing secret is configured. Anyone who knows this value can
# mint valid session tokens, so it must never be used outside development.
INSECURE_DEFAULT_JWT_SECRET = "insecure-development-secret-change-me"

MIN_RECOMMENDED_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "File Uploader"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./app.db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    db_pool_size: int = Field(default=10, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: int = Field(default=30, ge=1)
    db_pool_recycle: int = Field(default=1800, ge=1)

    # Session tokens
    jwt_secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("JWT_SECRET_KEY", "JWT_SECRET", "jwt_secret_key"),
    )
    jwt_algorithm: str = "HS256"
    # Also the retention horizon of the revocation registry
    session_lifetime_hours: int = Field(
        default=24,
        ge=1,
        validation_alias=AliasChoices(
            "SESSION_LIFETIME_HOURS", "JWT_EXPIRATION_HOURS", "session_lifetime_hours"
        ),
    )

    # Password policy and Argon2 cost
    password_min_length: int = Field(default=6, ge=1)
    password_hash_time_cost: int = Field(default=3, ge=1)
    password_hash_memory_cost: int = Field(default=65536, ge=8)
    password_hash_parallelism: int = Field(default=4, ge=1)

    # Uploads
    upload_dir: str = "./uploads"
    max_upload_size: int = Field(default=8 << 20, ge=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is one the logging module understands."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only symmetric HMAC algorithms make sense with a shared secret."""
        if v not in {"HS256", "HS384", "HS512"}:
            raise ValueError(f"Unsupported JWT algorithm: {v} (expected HS256, HS384 or HS512)")
        return v

    @property
    def effective_jwt_secret_key(self) -> str:
        """The signing secret, falling back to the insecure development default."""
        return self.jwt_secret_key or INSECURE_DEFAULT_JWT_SECRET

    @property
    def session_lifetime(self) -> timedelta:
        return timedelta(hours=self.session_lifetime_hours)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def check_security_configuration(self) -> list[str]:
        """Return a list of human-readable security warnings for this configuration."""
        warnings: list[str] = []

        if not self.jwt_secret_key:
            warnings.append(
                "JWT_SECRET_KEY is not set; using the built-in development secret. "
                "Session tokens can be forged by anyone who knows it. "
                'Generate a key with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        elif len(self.jwt_secret_key) < MIN_RECOMMENDED_SECRET_LENGTH:
            warnings.append(
                f"JWT_SECRET_KEY is shorter than {MIN_RECOMMENDED_SECRET_LENGTH} characters; "
                "use a longer random value in production."
            )

        if self.debug:
            warnings.append("Debug mode is enabled; API docs are publicly reachable.")

        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
