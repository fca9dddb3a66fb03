"""
Profiling endpoints: insight report, column statistics, anomalies,
geographic matches, smart filters and the optional remote narrative.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_narrative_client, require_data
from api.models.responses import (
    AnomalyResponse,
    ColumnStatsResponse,
    GeoMatchResponse,
    InsightResponse,
    NarrativeResponse,
    SmartFilterResponse,
)
from api.session_store import SessionData
from core.dataset import json_safe_rows
from core.insights import Insight
from core.profiling import ColumnStats
from integrations.narrative import NarrativeClient, NarrativeServiceError

router = APIRouter(prefix="/api/profile", tags=["profiling"])


@router.get("/insight", response_model=InsightResponse)
def insight(session: SessionData = Depends(require_data)):
    """Return the full insight report for the active dataset."""
    report = session.insight
    return _insight_response(
        report,
        dataset_name=session.dataset_name,
        preview=json_safe_rows(session.current_rows, session.config.app.preview_rows),
    )


@router.get("/columns", response_model=List[ColumnStatsResponse])
def all_columns(session: SessionData = Depends(require_data)):
    """Return statistics for all columns."""
    report = session.insight
    return [
        _column_response(stats, report.per_column_narratives.get(name))
        for name, stats in report.column_stats.items()
    ]


@router.get("/column/{name}", response_model=ColumnStatsResponse)
def single_column(name: str, session: SessionData = Depends(require_data)):
    """Return statistics for a single column."""
    report = session.insight
    stats = report.column_stats.get(name)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"Column '{name}' not found")
    return _column_response(stats, report.per_column_narratives.get(name))


@router.get("/anomalies", response_model=List[AnomalyResponse])
def anomalies(session: SessionData = Depends(require_data)):
    return [AnomalyResponse(**asdict(a)) for a in session.insight.anomalies]


@router.get("/geo", response_model=List[GeoMatchResponse])
def geo_columns(session: SessionData = Depends(require_data)):
    return [GeoMatchResponse(**asdict(m)) for m in session.insight.geo_matches]


@router.get("/filters", response_model=List[SmartFilterResponse])
def smart_filters(session: SessionData = Depends(require_data)):
    return [SmartFilterResponse(**asdict(f)) for f in session.insight.smart_filters]


@router.post("/narrative", response_model=NarrativeResponse)
def narrative(
    session: SessionData = Depends(require_data),
    client: Optional[NarrativeClient] = Depends(get_narrative_client),
):
    """Ask the remote language-model endpoint for free-text insights."""
    if client is None:
        raise HTTPException(status_code=503, detail="Narrative endpoint is not configured")
    try:
        text = client.generate_for(session.insight, session.current_rows)
    except NarrativeServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return NarrativeResponse(insights=text)


def _column_response(stats: ColumnStats, narrative_text: Optional[str]) -> ColumnStatsResponse:
    return ColumnStatsResponse(
        **asdict(stats),
        non_empty_count=stats.non_empty_count,
        narrative=narrative_text,
    )


def _insight_response(report: Insight, dataset_name: Optional[str], preview) -> InsightResponse:
    return InsightResponse(
        dataset_name=dataset_name,
        overview_narrative=report.overview_narrative,
        per_column_narratives=report.per_column_narratives,
        anomalies=[AnomalyResponse(**asdict(a)) for a in report.anomalies],
        dashboard_suggestions=report.dashboard_suggestions,
        geo_matches=[GeoMatchResponse(**asdict(m)) for m in report.geo_matches],
        smart_filters=[SmartFilterResponse(**asdict(f)) for f in report.smart_filters],
        row_count=report.row_count,
        column_count=report.column_count,
        size_bucket=report.size_bucket,
        data_quality_score=report.data_quality_score,
        column_types=report.column_types,
        date_columns=report.date_columns,
        preview=preview,
    )
