"""
Pytest configuration and shared fixtures.
"""

import copy
import pytest
from typing import Dict, Any

from jobdetails.logger import StructuredLogger, reset_logger
from jobdetails.repository import JobDetailsDB


def make_job(job_id: str = "job-1", **overrides) -> Dict[str, Any]:
    """Build a complete, valid job record; keyword arguments replace fields."""
    job = {
        "id": job_id,
        "title": "Python developer for scraping proxy rotation",
        "description": "Build a scraper that rotates proxies.",
        "longDescription": "We need an experienced developer to maintain our crawler fleet.",
        "budget": "$500 - $1,000",
        "timePosted": "2024-03-01T10:00:00Z",
        "category": "Web Development",
        "expertise": "Expert",
        "proposals": 5,
        "clientRating": 4.8,
        "clientLocation": "United States",
        "jobType": "Fixed Price",
        "projectLength": "1 to 3 months",
        "weeklyHours": "Less than 30 hrs/week",
        "skills": ["Python", "Scrapy", "Proxies"],
        "activityOn": "Last viewed by client: 2 hours ago",
        "clientHistory": {
            "jobsPosted": 12,
            "hireRate": 75,
            "totalSpent": "$10K+",
            "memberSince": "Jan 2019",
            "verificationStatus": {"payment": True, "phone": True, "email": False},
        },
        "attachments": ["spec.pdf"],
        "questions": ["Have you used Scrapy before?"],
    }
    job.update(copy.deepcopy(overrides))
    return job


@pytest.fixture
def valid_job_record() -> Dict[str, Any]:
    """Valid job record with every optional field set."""
    return make_job()


@pytest.fixture
def minimal_job_record() -> Dict[str, Any]:
    """Valid job record without any optional fields."""
    job = make_job("job-minimal")
    for field in ("weeklyHours", "attachments", "questions"):
        del job[field]
    return job


@pytest.fixture
def invalid_job_record() -> Dict[str, Any]:
    """Job record with several violations at once."""
    job = make_job("job-bad")
    del job["title"]
    job["proposals"] = "5"
    job["skills"] = ["Python", 3]
    job["clientHistory"]["verificationStatus"]["email"] = "yes"
    return job


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    """Logger with console output disabled."""
    return StructuredLogger(name="jobdetails.test", level="DEBUG", enable_console=False)


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'jobs.db'}"


@pytest.fixture
async def store(db_url, quiet_logger):
    """JobDetailsDB on a fresh SQLite file with the table created."""
    db = JobDetailsDB.from_url(db_url, logger=quiet_logger)
    await db.initialize_table()
    yield db
    await db.close()


@pytest.fixture(autouse=True)
def _fresh_global_logger():
    reset_logger()
    yield
    reset_logger()
