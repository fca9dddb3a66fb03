"""
Visualization endpoints: return Plotly figures as JSON dicts.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from api.dependencies import require_data
from api.session_store import SessionData
from core.profiling import ColumnStats
from core.visualizations import (
    available_charts,
    create_frequency_chart,
    create_grouped_bar,
    create_histogram,
    create_scatter,
)

router = APIRouter(prefix="/api/viz", tags=["visualizations"])


def _fig_response(fig) -> JSONResponse:
    """Serialize a Plotly figure to a JSON response safely."""
    return JSONResponse(content={"figure": json.loads(fig.to_json())})


def _column_stats(session: SessionData, col: str) -> ColumnStats:
    stats = session.insight.column_stats.get(col)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"Column '{col}' not found")
    return stats


def _require_type(stats: ColumnStats, expected: str) -> None:
    if stats.detected_type != expected:
        raise HTTPException(
            status_code=400,
            detail=f"Column '{stats.name}' is {stats.detected_type}, expected {expected}",
        )


@router.get("/histogram/{col}")
def histogram(col: str, session: SessionData = Depends(require_data)):
    """Histogram of a numeric column."""
    stats = _column_stats(session, col)
    _require_type(stats, "numeric")
    try:
        return _fig_response(create_histogram(stats))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/frequency/{col}")
def frequency(
    col: str,
    kind: str = Query("bar", pattern="^(bar|pie)$"),
    session: SessionData = Depends(require_data),
):
    """Bar or pie chart of the most frequent values of a categorical column."""
    stats = _column_stats(session, col)
    _require_type(stats, "categorical")
    try:
        return _fig_response(create_frequency_chart(stats, kind=kind))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/grouped/{category}/{value}")
def grouped_bar(category: str, value: str, session: SessionData = Depends(require_data)):
    """Sum of a numeric column per category."""
    _require_type(_column_stats(session, category), "categorical")
    _require_type(_column_stats(session, value), "numeric")
    return _fig_response(create_grouped_bar(session.current_rows, category, value))


@router.get("/scatter/{x}/{y}")
def scatter(x: str, y: str, session: SessionData = Depends(require_data)):
    """Scatter plot between two numeric columns."""
    for c in (x, y):
        _require_type(_column_stats(session, c), "numeric")
    return _fig_response(create_scatter(session.current_rows, x, y))


@router.get("/charts/{col}")
def charts_for_column(col: str, session: SessionData = Depends(require_data)):
    """Chart kinds that can be drawn for a column."""
    return {"column": col, "charts": available_charts(_column_stats(session, col))}
