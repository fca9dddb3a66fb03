"""
Filtered reads against the hosted tabular store.

Only read queries are built here: equality / inequality / range predicates,
a case-insensitive search across text columns, ordering and pagination.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import sqlalchemy
from sqlalchemy.exc import SQLAlchemyError

from db.connection import DataSourceError, DatabaseClient

logger = logging.getLogger(__name__)


OPERATORS = {"eq", "neq", "gte", "lte"}


@dataclass(frozen=True)
class StoreFilter:
    """A single predicate applied by the store."""

    column: str
    operator: str
    value: Any

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported store operator '{self.operator}'")


@dataclass
class PageResult:
    """One page of rows plus the total count across all pages."""

    rows: List[Dict[str, Any]]
    total: int
    page: int
    page_size: int
    columns: List[str] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 1
        return max(1, -(-self.total // self.page_size))


def build_conditions(
    table: sqlalchemy.Table,
    filters: Sequence[StoreFilter] = (),
    search: Optional[str] = None,
    search_columns: Sequence[str] = (),
) -> List[Any]:
    """Translate filters and search into SQLAlchemy WHERE clauses."""
    conditions = []
    for f in filters:
        if f.column not in table.c:
            raise ValueError(f"Column '{f.column}' not found in table '{table.name}'")
        col = table.c[f.column]
        if f.operator == "eq":
            conditions.append(col == f.value)
        elif f.operator == "neq":
            conditions.append(col != f.value)
        elif f.operator == "gte":
            conditions.append(col >= f.value)
        elif f.operator == "lte":
            conditions.append(col <= f.value)

    if search:
        targets = list(search_columns) or [c.name for c in table.c]
        missing = [name for name in targets if name not in table.c]
        if missing:
            raise ValueError(f"Search columns not found: {', '.join(missing)}")
        pattern = f"%{search}%"
        conditions.append(
            sqlalchemy.or_(
                *[sqlalchemy.cast(table.c[name], sqlalchemy.String).ilike(pattern) for name in targets]
            )
        )
    return conditions


def fetch_rows(
    db: DatabaseClient,
    table_name: str,
    filters: Sequence[StoreFilter] = (),
    search: Optional[str] = None,
    search_columns: Sequence[str] = (),
    order_by: Optional[str] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> PageResult:
    """
    Read a filtered page of rows from a table.

    Args:
        db: DatabaseClient instance
        table_name: Table to read
        filters: Predicates combined with AND
        search: Optional case-insensitive substring searched across columns
        search_columns: Columns to search (all when empty)
        order_by: Optional column to sort ascending
        page: 1-based page number
        page_size: Rows per page; all matching rows when None

    Returns:
        PageResult with plain row dicts
    """
    table = db.table(table_name)
    conditions = build_conditions(table, filters, search, search_columns)

    stmt = sqlalchemy.select(table).where(*conditions)
    count_stmt = sqlalchemy.select(sqlalchemy.func.count()).select_from(table).where(*conditions)

    if order_by is not None:
        if order_by not in table.c:
            raise ValueError(f"Cannot order by unknown column '{order_by}'")
        stmt = stmt.order_by(table.c[order_by].asc())

    page = max(1, page)
    if page_size:
        stmt = stmt.limit(page_size).offset((page - 1) * page_size)

    try:
        with db.engine.connect() as conn:
            rows = [dict(r._mapping) for r in conn.execute(stmt)]
            total = int(conn.execute(count_stmt).scalar_one())
    except SQLAlchemyError as exc:
        logger.error("Query against %s failed: %s", table_name, exc)
        raise DataSourceError(f"Failed to query '{table_name}': {exc}") from exc

    logger.info("Fetched %d of %d rows from %s", len(rows), total, table_name)
    return PageResult(
        rows=rows,
        total=total,
        page=page,
        page_size=page_size or total,
        columns=[c.name for c in table.c],
    )
