"""
Job details repository.

Responsibilities:
- Create, read, update, delete and search rows of the job_details table.
- Validate every write before it reaches the database.
- Translate driver failures into the package's error taxonomy.

Non-Responsibilities:
- No caching.
- No retries.
- No locking: update_job reads, merges and writes without guarding against
  a concurrent update of the same id, so one of two racing patches can be
  lost.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import URL
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from .config import Settings, load_settings
from .database import create_engine, init_database, jobs_table
from .errors import DataIntegrityError, DuplicateKeyError, StorageError, ValidationError
from .logger import StructuredLogger, get_logger
from .mapper import from_row, to_row
from .query import DEFAULT_LIMIT, DEFAULT_PAGE, JobSearchQuery, normalize_page
from .schema import normalize_job, validate_job

UNIQUE_VIOLATION = "23505"


def _is_duplicate_key(error: IntegrityError) -> bool:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == UNIQUE_VIOLATION
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message


class JobDetailsDB:
    """Async data-access layer for job postings."""

    def __init__(self, engine: AsyncEngine, logger: Optional[StructuredLogger] = None):
        """
        Args:
            engine: Pooled async engine shared by all operations
            logger: Logger to report to (default: the global logger)
        """
        self._engine = engine
        self.logger = logger or get_logger()

    @classmethod
    def from_url(
        cls,
        database_url: Union[str, URL],
        pool_size: int = 5,
        echo: bool = False,
        logger: Optional[StructuredLogger] = None,
    ) -> "JobDetailsDB":
        return cls(create_engine(database_url, pool_size=pool_size, echo=echo), logger=logger)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "JobDetailsDB":
        """Build the store from Settings, loading them from the environment if omitted."""
        if settings is None:
            settings = load_settings()
        logger = StructuredLogger(level=settings.log_level, log_dir=settings.log_dir)
        return cls.from_url(
            settings.database_url,
            pool_size=settings.pool_size,
            echo=settings.echo_sql,
            logger=logger,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def close(self) -> None:
        """Close all pooled connections."""
        await self._engine.dispose()

    async def __aenter__(self) -> "JobDetailsDB":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Internal helpers

    def _storage_error(self, operation: str, error: Exception) -> StorageError:
        self.logger.record_error(type(error).__name__)
        self.logger.error(f"{operation} failed", error=str(error), error_type=type(error).__name__)
        return StorageError(f"{operation} failed: {error}")

    async def _fetch(self, operation: str, statement, duplicate_id: Optional[str] = None) -> List[Mapping[str, Any]]:
        """Run one statement in its own transaction and return all result rows."""
        self.logger.record_query()
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(statement)
                return list(result.mappings().all()) if result.returns_rows else []
        except IntegrityError as e:
            if duplicate_id is not None and _is_duplicate_key(e):
                self.logger.record_error("DuplicateKeyError")
                self.logger.warning("Duplicate job id", operation=operation, job_id=duplicate_id)
                raise DuplicateKeyError(duplicate_id) from e
            raise self._storage_error(operation, e) from e
        except (SQLAlchemyError, OSError, ValueError, OverflowError) as e:
            # driver bind failures (oversized ints, unencodable text) included
            raise self._storage_error(operation, e) from e

    def _to_record(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            return from_row(row)
        except DataIntegrityError as e:
            self.logger.record_error("DataIntegrityError")
            self.logger.error("Stored job could not be decoded", job_id=row.get("id"), error=str(e))
            raise

    def _reject(self, operation: str, errors: List[str]) -> ValidationError:
        self.logger.record_error("ValidationError")
        self.logger.warning(f"{operation} rejected", violations=len(errors))
        return ValidationError(errors)

    # Operations

    async def initialize_table(self) -> None:
        """Create the job_details table if it does not exist yet."""
        self.logger.record_operation("initialize_table")
        self.logger.record_query()
        try:
            await init_database(self._engine)
        except (SQLAlchemyError, OSError) as e:
            raise self._storage_error("initialize_table", e) from e
        self.logger.info("job_details table ready")

    async def create_job(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate and insert a new job.

        Returns:
            The stored record as read back from the database

        Raises:
            ValidationError: record violates the schema (nothing is written)
            DuplicateKeyError: a job with the same id already exists
            StorageError: any other backend failure
        """
        self.logger.record_operation("create_job")
        errors = validate_job(record)
        if errors:
            raise self._reject("create_job", errors)
        job = normalize_job(record)

        statement = insert(jobs_table).values(**to_row(job)).returning(*jobs_table.c)
        rows = await self._fetch("create_job", statement, duplicate_id=job["id"])
        self.logger.info("Job created", job_id=job["id"])
        return self._to_record(rows[0])

    async def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Look up a job by id. Returns None when it does not exist."""
        self.logger.record_operation("get_job")
        statement = select(jobs_table).where(jobs_table.c.id == job_id)
        rows = await self._fetch("get_job", statement)
        if not rows:
            self.logger.debug("Job not found", job_id=job_id)
            return None
        return self._to_record(rows[0])

    async def update_job(self, job_id: str, patch: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to an existing job.

        The patch is merged over the stored record (top-level fields only;
        a new clientHistory replaces the old one wholesale) and the merged
        record is validated in full before it is written. Setting an optional
        field to None clears it. The id cannot be changed.

        Returns:
            The updated record, or None if no job has this id

        Raises:
            ValidationError: merged record violates the schema (nothing is written)
            StorageError: backend failure
        """
        self.logger.record_operation("update_job")
        if not isinstance(patch, Mapping):
            raise self._reject("update_job", ["Patch must be an object"])

        current = await self.get_job(job_id)
        if current is None:
            return None

        merged = {**current, **patch}
        errors: List[str] = []
        if "id" in patch and patch["id"] != job_id:
            errors.append("Field 'id' is immutable")
        errors.extend(validate_job(merged))
        if errors:
            raise self._reject("update_job", errors)
        job = normalize_job(merged)

        row = to_row(job)
        del row["id"]
        statement = (
            update(jobs_table)
            .where(jobs_table.c.id == job_id)
            .values(**row)
            .returning(*jobs_table.c)
        )
        rows = await self._fetch("update_job", statement)
        if not rows:
            # deleted between the read and the write
            self.logger.debug("Job vanished before update", job_id=job_id)
            return None
        self.logger.info("Job updated", job_id=job_id, fields=sorted(patch))
        return self._to_record(rows[0])

    async def delete_job(self, job_id: str) -> bool:
        """Delete a job by id. Returns True only if a row was removed."""
        self.logger.record_operation("delete_job")
        statement = delete(jobs_table).where(jobs_table.c.id == job_id).returning(jobs_table.c.id)
        rows = await self._fetch("delete_job", statement)
        if rows:
            self.logger.info("Job deleted", job_id=job_id)
        return bool(rows)

    async def search_jobs(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> Dict[str, Any]:
        """
        Search jobs with optional filters, newest first.

        Args:
            filters: Any of category, expertise (exact match) and search
                (case-insensitive substring of title/description/long description)
            page: 1-indexed page number; values below 1 mean page 1
            limit: Page size; values below 1 mean 1

        Returns:
            {"jobs": [...], "total": <matches across all pages>}

        Raises:
            ValueError: unknown filter key or non-string filter value
            StorageError: backend failure
        """
        self.logger.record_operation("search_jobs")
        query = JobSearchQuery.from_filters(filters)
        page, limit, offset = normalize_page(page, limit)

        rows = await self._fetch("search_jobs", query.page_statement(limit, offset))
        if rows:
            total = int(rows[0]["total_count"])
        elif offset > 0:
            # past the last page: the window count has no row to ride on
            count_rows = await self._fetch("search_jobs", query.count_statement())
            total = int(count_rows[0]["total_count"])
        else:
            total = 0

        jobs = [self._to_record(row) for row in rows]
        self.logger.debug("Search complete", filters=dict(filters or {}), page=page, limit=limit, returned=len(jobs), total=total)
        return {"jobs": jobs, "total": total}
