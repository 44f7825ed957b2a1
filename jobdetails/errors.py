"""
Error taxonomy for the job details store.

"Not found" is never an error here: lookups return None and deletes
return False so callers can tell "nothing to do" from "something broke".
"""

from typing import List


class JobDetailsError(Exception):
    """Base class for every error raised by this package."""
    pass


class ConfigError(JobDetailsError):
    """Raised when required configuration is missing or malformed."""
    pass


class ValidationError(JobDetailsError):
    """
    Raised when a candidate record violates the job schema.

    Carries every violation found, not just the first one.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        super().__init__(f"Validation failed with {count} {noun}: " + "; ".join(self.errors))


class DuplicateKeyError(JobDetailsError):
    """Raised when creating a job whose id already exists."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job with id '{job_id}' already exists")


class StorageError(JobDetailsError):
    """Raised on any backend failure (connectivity, constraints, driver errors)."""
    pass


class DataIntegrityError(StorageError):
    """Raised when a stored row cannot be decoded back into a job record."""
    pass
