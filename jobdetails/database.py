"""
Database schema and connection management.

Uses SQLAlchemy's asyncio engine: asyncpg for PostgreSQL, aiosqlite for
SQLite (local development and tests).
"""

from pathlib import Path
from typing import Union

from sqlalchemy import Column, Float, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

Base = declarative_base()

# TEXT[] where the backend has arrays, a JSON list elsewhere. NULL stays NULL.
StringList = JSON(none_as_null=True).with_variant(ARRAY(Text), "postgresql")


class Job(Base):
    """Job posting row."""

    __tablename__ = "job_details"

    id = Column(String, primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    long_description = Column(Text, nullable=False)
    budget = Column(Text, nullable=False)  # formatted, e.g. "$500 - $1,000"
    time_posted = Column(Text, nullable=False, index=True)
    category = Column(Text, nullable=False, index=True)
    expertise = Column(Text, nullable=False, index=True)
    proposals = Column(Integer, nullable=False)
    client_rating = Column(Float, nullable=False)
    client_location = Column(Text, nullable=False)
    job_type = Column(Text, nullable=False)
    project_length = Column(Text, nullable=False)
    weekly_hours = Column(Text, nullable=True)
    skills = Column(StringList, nullable=False)
    activity_on = Column(Text, nullable=False)
    client_history = Column(Text, nullable=False)  # JSON document
    attachments = Column(StringList, nullable=True)
    questions = Column(StringList, nullable=True)


jobs_table = Job.__table__

POSTGRES_DRIVERNAMES = {"postgres", "postgresql", "postgresql+psycopg2", "postgresql+psycopg"}


def async_database_url(database_url: Union[str, URL]) -> URL:
    """
    Rewrite a plain database URL to use an asyncio driver.

    postgres:// and postgresql:// become postgresql+asyncpg://, with libpq's
    sslmode translated to asyncpg's ssl parameter. sqlite:// becomes
    sqlite+aiosqlite://. URLs that already name an async driver pass through.
    """
    url = make_url(database_url)
    if url.drivername in POSTGRES_DRIVERNAMES:
        url = url.set(drivername="postgresql+asyncpg")
    elif url.drivername == "sqlite":
        url = url.set(drivername="sqlite+aiosqlite")

    if url.drivername == "postgresql+asyncpg":
        sslmode = url.query.get("sslmode")
        url = url.difference_update_query(["sslmode", "channel_binding"])
        if sslmode and "ssl" not in url.query:
            url = url.update_query_dict({"ssl": sslmode})
    return url


def _is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def create_engine(database_url: Union[str, URL], pool_size: int = 5, echo: bool = False) -> AsyncEngine:
    """
    Create the pooled async engine shared by all operations.

    Args:
        database_url: Connection URL (sync or async driver form)
        pool_size: Connections kept open (PostgreSQL only)
        echo: Log emitted SQL

    Returns:
        SQLAlchemy AsyncEngine
    """
    url = async_database_url(database_url)

    if url.get_backend_name() == "postgresql":
        return create_async_engine(url, pool_size=pool_size, pool_pre_ping=True, echo=echo)

    if _is_memory_sqlite(url):
        # One shared connection, otherwise every checkout sees an empty database
        return create_async_engine(url, poolclass=StaticPool, echo=echo)

    if url.database:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(url, echo=echo)


async def init_database(engine: AsyncEngine) -> None:
    """
    Create the job_details table and its indexes if they do not exist.

    Safe to call on every start; existing tables and rows are left alone.

    Args:
        engine: Async engine to create the schema on
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
