"""
Tests for database.py - URL handling and schema definition.
"""

import pytest

from jobdetails.database import Job, async_database_url, create_engine, init_database, jobs_table


class TestAsyncDatabaseUrl:
    """Test driver rewriting."""

    def test_postgresql_uses_asyncpg(self):
        url = async_database_url("postgresql://user:pw@host:5432/jobs")
        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "host"
        assert url.database == "jobs"

    def test_postgres_alias(self):
        """Heroku/Neon style postgres:// is accepted."""
        assert async_database_url("postgres://u:p@h/db").drivername == "postgresql+asyncpg"

    def test_sslmode_translated(self):
        """libpq sslmode becomes asyncpg ssl; channel_binding is dropped."""
        url = async_database_url("postgresql://u:p@h/db?sslmode=require&channel_binding=require")
        assert url.query == {"ssl": "require"}

    def test_sqlite_uses_aiosqlite(self, tmp_path):
        url = async_database_url(f"sqlite:///{tmp_path / 'jobs.db'}")
        assert url.drivername == "sqlite+aiosqlite"

    def test_async_driver_untouched(self):
        url = async_database_url("sqlite+aiosqlite:///jobs.db")
        assert url.drivername == "sqlite+aiosqlite"
        assert url.database == "jobs.db"


class TestSchema:
    """Test the job_details table definition."""

    def test_table_name(self):
        assert Job.__tablename__ == "job_details"

    def test_primary_key(self):
        assert [c.name for c in jobs_table.primary_key.columns] == ["id"]

    def test_nullable_columns(self):
        """Only the optional fields may be NULL."""
        nullable = {c.name for c in jobs_table.columns if c.nullable}
        assert nullable == {"weekly_hours", "attachments", "questions"}

    def test_search_columns_indexed(self):
        indexed = {col.name for index in jobs_table.indexes for col in index.columns}
        assert {"category", "expertise", "time_posted"} <= indexed


class TestInitDatabase:
    """Test table creation."""

    async def test_init_creates_database_file(self, tmp_path):
        """init_database creates the SQLite file and parent directories."""
        db_path = tmp_path / "nested" / "jobs.db"
        engine = create_engine(f"sqlite:///{db_path}")
        try:
            await init_database(engine)
            await init_database(engine)
        finally:
            await engine.dispose()
        assert db_path.exists()
