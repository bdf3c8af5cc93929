"""Tests for settings-derived connection strings."""

from taskflow.config import Settings


class TestDatabaseUrls:

    def test_sqlite_override_used_for_migrations(self):
        settings = Settings(db_url="sqlite+aiosqlite:///./dev.db")
        assert settings.database_url == "sqlite+aiosqlite:///./dev.db"
        assert settings.sync_database_url == "sqlite:///./dev.db"

    def test_asyncpg_override_maps_to_psycopg2(self):
        settings = Settings(db_url="postgresql+asyncpg://app:pw@db:5432/taskflow")
        assert settings.sync_database_url == "postgresql+psycopg2://app:pw@db:5432/taskflow"

    def test_assembled_from_parts(self):
        settings = Settings(
            db_url=None,
            db_user="app",
            db_password="p@ss",
            db_server="db",
            db_port=5433,
            db_name="tf",
        )
        assert settings.database_url == "postgresql+asyncpg://app:p%40ss@db:5433/tf"
        assert settings.sync_database_url == "postgresql+psycopg2://app:p%40ss@db:5433/tf"
