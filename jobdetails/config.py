import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

DATABASE_URL_VARS = ("NEON_DATABASE_URL", "DATABASE_URL")
TRUE_VALUES = {"1", "true", "yes", "on"}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the process environment win.
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


class Settings:
    """Runtime configuration for the job details store."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        echo_sql: bool = False,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.echo_sql = echo_sql
        self.log_level = log_level
        self.log_dir = log_dir

    def __repr__(self) -> str:
        # never echo credentials embedded in the URL
        return f"Settings(pool_size={self.pool_size}, echo_sql={self.echo_sql}, log_level={self.log_level!r})"


def _int_var(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the process environment.

    Reads NEON_DATABASE_URL (falling back to DATABASE_URL),
    JOBDETAILS_POOL_SIZE, JOBDETAILS_ECHO_SQL, JOBDETAILS_LOG_LEVEL and
    JOBDETAILS_LOG_DIR. When environ is None, .env is loaded first.

    Raises:
        ConfigError: if no database URL is set or a value is malformed
    """
    if environ is None:
        load_env()
        environ = os.environ

    database_url = next((environ[v] for v in DATABASE_URL_VARS if environ.get(v)), None)
    if not database_url:
        raise ConfigError(f"Database URL not set. Set one of: {', '.join(DATABASE_URL_VARS)}")

    pool_size = _int_var(environ, "JOBDETAILS_POOL_SIZE", 5)
    if pool_size < 1:
        raise ConfigError("JOBDETAILS_POOL_SIZE must be at least 1")

    log_level = environ.get("JOBDETAILS_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"JOBDETAILS_LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")

    log_dir = environ.get("JOBDETAILS_LOG_DIR")
    return Settings(
        database_url=database_url,
        pool_size=pool_size,
        echo_sql=environ.get("JOBDETAILS_ECHO_SQL", "").strip().lower() in TRUE_VALUES,
        log_level=log_level,
        log_dir=Path(log_dir) if log_dir else None,
    )
