from typing import Any, Dict, List, Sequence

import sqlalchemy
from sqlalchemy.exc import SQLAlchemyError

from db.connection import DataSourceError, DatabaseClient
from db.query import StoreFilter, build_conditions


def get_tables(db: DatabaseClient) -> List[str]:
    """
    Return all accessible tables in the database.
    """
    try:
        return sorted(sqlalchemy.inspect(db.engine).get_table_names())
    except SQLAlchemyError as exc:
        raise DataSourceError(f"Failed to list tables: {exc}") from exc


def get_table_columns(db: DatabaseClient, table_name: str) -> List[Dict[str, Any]]:
    """
    Return column metadata for a given table.
    """
    table = db.table(table_name)
    return [
        {
            "name": col.name,
            "type": str(col.type),
            "nullable": bool(col.nullable),
        }
        for col in table.c
    ]


def get_row_count(db: DatabaseClient, table_name: str) -> int:
    """Return total row count for a table."""
    table = db.table(table_name)
    stmt = sqlalchemy.select(sqlalchemy.func.count()).select_from(table)
    try:
        with db.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())
    except SQLAlchemyError as exc:
        raise DataSourceError(f"Failed to count rows in '{table_name}': {exc}") from exc


def get_distinct_values(
    db: DatabaseClient,
    table_name: str,
    column: str,
    filters: Sequence[StoreFilter] = (),
) -> List[Any]:
    """
    Return the sorted distinct non-null values of a column.

    Used to populate cascading dropdowns (e.g. districts within a state).
    """
    table = db.table(table_name)
    if column not in table.c:
        raise ValueError(f"Column '{column}' not found in table '{table_name}'")

    col = table.c[column]
    stmt = (
        sqlalchemy.select(col)
        .where(col.isnot(None), *build_conditions(table, filters))
        .distinct()
        .order_by(col.asc())
    )
    try:
        with db.engine.connect() as conn:
            return [row[0] for row in conn.execute(stmt)]
    except SQLAlchemyError as exc:
        raise DataSourceError(f"Failed to list values of '{column}': {exc}") from exc
