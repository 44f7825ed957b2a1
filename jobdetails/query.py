"""
Search query construction.

Predicates are accumulated as SQLAlchemy clauses, so every filter value is
sent as a bound parameter and never spliced into the SQL text.
"""

from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy import and_, func, or_, select, true
from sqlalchemy.sql.expression import ColumnElement, Select

from .database import jobs_table

FILTER_KEYS = ("category", "expertise", "search")
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def normalize_page(page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Tuple[int, int, int]:
    """
    Clamp pagination input and compute the row offset.

    page is 1-indexed; anything below 1 is treated as page 1, and a limit
    below 1 as a limit of 1.

    Returns:
        (page, limit, offset)
    """
    page = max(DEFAULT_PAGE, int(page))
    limit = max(1, int(limit))
    return page, limit, (page - 1) * limit


class JobSearchQuery:
    """Conjunction of optional search predicates over job_details."""

    def __init__(self):
        self.conditions: List[ColumnElement] = []

    @classmethod
    def from_filters(cls, filters: Optional[Mapping[str, Any]] = None) -> "JobSearchQuery":
        """
        Build a query from a filter mapping.

        Keys: category (exact), expertise (exact), search (case-insensitive
        substring of title, description or long description). None and empty
        values are skipped.

        Raises:
            ValueError: on an unknown filter key or a value that is not a string
        """
        query = cls()
        filters = filters or {}
        unknown = sorted(set(filters) - set(FILTER_KEYS))
        if unknown:
            raise ValueError(f"Unknown search filter(s): {', '.join(unknown)}")
        not_strings = sorted(k for k, v in filters.items() if v is not None and not isinstance(v, str))
        if not_strings:
            raise ValueError(f"Search filter(s) must be strings: {', '.join(not_strings)}")

        if filters.get("category"):
            query.where_category(filters["category"])
        if filters.get("search"):
            query.where_text(filters["search"])
        if filters.get("expertise"):
            query.where_expertise(filters["expertise"])
        return query

    def where_category(self, category: str) -> "JobSearchQuery":
        self.conditions.append(jobs_table.c.category == category)
        return self

    def where_expertise(self, expertise: str) -> "JobSearchQuery":
        self.conditions.append(jobs_table.c.expertise == expertise)
        return self

    def where_text(self, term: str) -> "JobSearchQuery":
        # autoescape makes % and _ in the term match literally
        c = jobs_table.c
        self.conditions.append(
            or_(
                c.title.icontains(term, autoescape=True),
                c.description.icontains(term, autoescape=True),
                c.long_description.icontains(term, autoescape=True),
            )
        )
        return self

    def where_clause(self) -> ColumnElement:
        return and_(true(), *self.conditions)

    def page_statement(self, limit: int, offset: int) -> Select:
        """
        One page of matches plus the total match count on every row.

        Ordered newest first; id breaks ties so pages never overlap.
        """
        c = jobs_table.c
        return (
            select(jobs_table, func.count().over().label("total_count"))
            .where(self.where_clause())
            .order_by(c.time_posted.desc(), c.id.asc())
            .limit(limit)
            .offset(offset)
        )

    def count_statement(self) -> Select:
        return select(func.count().label("total_count")).select_from(jobs_table).where(self.where_clause())
