"""Configuration management using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database settings
    db_server: str = "localhost"
    db_name: str = "taskflow"
    db_user: str = "taskflow"
    db_password: str = ""
    db_port: int = 5432
    db_pool_size: int = 20
    db_max_overflow: int = 40
    sql_echo: bool = False
    # Full async URL override, e.g. "sqlite+aiosqlite:///./taskflow.db" for local runs
    db_url: Optional[str] = None

    # JWT settings
    jwt_secret: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 7 * 24 * 60

    # Password hashing (bcrypt cost factor)
    password_hash_rounds: int = 12

    # Server settings
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = "http://localhost:3000"

    # Trash retention and cleanup
    trash_retention_days: int = 30
    trash_cleanup_interval_seconds: int = 60 * 60
    trash_cleanup_initial_delay_seconds: int = 5
    # Set False when the ARQ worker owns the cleanup schedule
    trash_cleanup_in_process: bool = True

    # Unauthenticated clients may list active projects when enabled
    public_project_browsing: bool = False

    # ARQ worker settings
    redis_url: str = "redis://localhost:6379/0"
    arq_trash_cleanup_minute: int = 0

    @property
    def database_url(self) -> str:
        """Build the async connection string."""
        if self.db_url:
            return self.db_url
        from urllib.parse import quote_plus
        return (
            f"postgresql+asyncpg://{self.db_user}:{quote_plus(self.db_password)}"
            f"@{self.db_server}:{self.db_port}/{self.db_name}"
        )

    @property
    def sync_database_url(self) -> str:
        """Build the sync connection string for Alembic."""
        if self.db_url:
            # Swap the async driver for its blocking counterpart
            return (
                self.db_url
                .replace("+aiosqlite", "", 1)
                .replace("+asyncpg", "+psycopg2", 1)
            )
        from urllib.parse import quote_plus
        return (
            f"postgresql+psycopg2://{self.db_user}:{quote_plus(self.db_password)}"
            f"@{self.db_server}:{self.db_port}/{self.db_name}"
        )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
