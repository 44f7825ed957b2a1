"""Async data-access layer for job postings."""

__version__ = "0.1.0"

from .errors import (
    ConfigError,
    DataIntegrityError,
    DuplicateKeyError,
    JobDetailsError,
    StorageError,
    ValidationError,
)
from .repository import JobDetailsDB
from .schema import normalize_job, validate_job

__all__ = [
    "ConfigError",
    "DataIntegrityError",
    "DuplicateKeyError",
    "JobDetailsDB",
    "JobDetailsError",
    "StorageError",
    "ValidationError",
    "normalize_job",
    "validate_job",
    "__version__",
]
