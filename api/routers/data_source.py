"""
Data source endpoints: file upload, preloaded datasets, smart filters, export.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response

from api.dependencies import get_session_data, get_store, require_data
from api.models.requests import (
    ApplySelectionsRequest,
    DistinctValuesRequest,
    LoadDatasetRequest,
    StoreFilterModel,
)
from api.models.responses import (
    CurrentDatasetResponse,
    DataLoadResponse,
    DistinctValuesResponse,
    FilterApplicationResponse,
    PreloadedDatasetResponse,
)
from api.session_store import SessionData, sessions
from core.dataset import dataset_columns, json_safe, json_safe_rows
from core.exporting import export_dataset, export_filename
from core.filtering import apply_selections
from core.profiler import profile_dataset
from core.readers import FileDecodeError, decode_file
from db.connection import DataSourceError, DatabaseClient
from db.introspection import get_distinct_values
from db.loader import PRELOADED_DATASETS, get_preloaded, load_dataset
from db.query import StoreFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["data"])

_MEDIA_TYPES = {
    "json": "application/json",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _persist(
    session: SessionData,
    rows: List[Dict[str, Any]],
    name: str,
    source: str,
) -> DataLoadResponse:
    """Store the rows in the session and profile them."""
    session.raw_rows = rows
    session.current_rows = rows
    session.dataset_name = name
    session.source = source
    session.insight = profile_dataset(rows, session.config.profiler)
    session.active_filters = []
    columns = dataset_columns(rows)
    return DataLoadResponse(
        dataset_name=name,
        rows=len(rows),
        columns=len(columns),
        column_names=[str(c) for c in columns],
    )


def _store_filters(filters: List[StoreFilterModel]) -> List[StoreFilter]:
    return [StoreFilter(column=f.column, operator=f.operator, value=f.value) for f in filters]


@router.post("/upload", response_model=DataLoadResponse)
async def upload_file(
    file: UploadFile = File(...),
    session: SessionData = Depends(get_session_data),
):
    """Upload a CSV or Excel file."""
    content = await file.read()
    filename = file.filename or "upload"

    try:
        rows = decode_file(filename, content)
    except FileDecodeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return _persist(session, rows, filename, "upload")


@router.get("/datasets", response_model=List[PreloadedDatasetResponse])
def list_datasets():
    """List the preloaded datasets available from the hosted store."""
    return [
        PreloadedDatasetResponse(key=d.key, label=d.label, table=d.table)
        for d in PRELOADED_DATASETS.values()
    ]


@router.post("/datasets/{key}/load", response_model=DataLoadResponse)
def load_preloaded(
    key: str,
    body: LoadDatasetRequest,
    session: SessionData = Depends(get_session_data),
    store: DatabaseClient = Depends(get_store),
):
    """Load a filtered page of a preloaded dataset and profile it."""
    try:
        spec = get_preloaded(key)
        page_size = body.page_size or session.config.app.max_rows_load
        result = load_dataset(
            store,
            spec.key,
            filters=_store_filters(body.filters),
            search=body.search,
            page=body.page,
            page_size=page_size,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except DataSourceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    response = _persist(session, result.rows, spec.label, spec.key)
    response.total_rows = result.total
    response.page = result.page
    response.total_pages = result.total_pages
    return response


@router.post("/datasets/{key}/distinct", response_model=DistinctValuesResponse)
def distinct_values(
    key: str,
    body: DistinctValuesRequest,
    store: DatabaseClient = Depends(get_store),
):
    """Distinct values of a column, for cascading dropdowns."""
    try:
        spec = get_preloaded(key)
        values = get_distinct_values(store, spec.table, body.column, _store_filters(body.filters))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except DataSourceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    return DistinctValuesResponse(column=body.column, values=[json_safe(v) for v in values])


@router.get("/current-dataset", response_model=CurrentDatasetResponse)
def current_dataset(session: SessionData = Depends(get_session_data)):
    """Return metadata about the currently loaded dataset."""
    if not session.has_data:
        return CurrentDatasetResponse(loaded=False)

    types = session.insight.column_types
    columns = dataset_columns(session.raw_rows or [])
    return CurrentDatasetResponse(
        loaded=True,
        dataset_name=session.dataset_name,
        source=session.source,
        rows=len(session.raw_rows or []),
        filtered_rows=len(session.current_rows),
        columns=len(columns),
        column_names=[str(c) for c in columns],
        numeric_columns=[c for c, t in types.items() if t == "numeric"],
        categorical_columns=[c for c, t in types.items() if t == "categorical"],
        filters_active=bool(session.active_filters),
        active_filters=session.active_filters or None,
    )


@router.post("/filters/apply", response_model=FilterApplicationResponse)
def apply_filter_set(
    body: ApplySelectionsRequest,
    session: SessionData = Depends(require_data),
):
    """Apply smart-filter selections and refresh the active insight."""
    selections = [s.model_dump() for s in body.selections]
    try:
        filtered = apply_selections(session.raw_rows or [], selections)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    session.current_rows = filtered
    session.insight = profile_dataset(filtered, session.config.profiler)
    session.active_filters = selections

    return FilterApplicationResponse(
        row_count=len(filtered),
        column_count=len(dataset_columns(session.raw_rows or [])),
        preview=json_safe_rows(filtered, session.config.app.preview_rows),
        active_filters=body.selections,
    )


@router.post("/filters/reset", response_model=FilterApplicationResponse)
def reset_filters(session: SessionData = Depends(require_data)):
    """Clear all applied filters and restore the loaded dataset."""
    rows = session.raw_rows or []
    session.current_rows = rows
    session.insight = profile_dataset(rows, session.config.profiler)
    session.active_filters = []
    return FilterApplicationResponse(
        row_count=len(rows),
        column_count=len(dataset_columns(rows)),
        preview=json_safe_rows(rows, session.config.app.preview_rows),
        active_filters=[],
    )


@router.get("/export")
def export_current(
    fmt: str = Query("xlsx", alias="format", pattern="^(json|xlsx)$"),
    session: SessionData = Depends(require_data),
):
    """Download the currently filtered rows as JSON or Excel."""
    if not session.current_rows:
        raise HTTPException(status_code=400, detail="No data available to download")

    content = export_dataset(session.current_rows, fmt)
    filename = export_filename(session.dataset_name or "data", fmt)
    logger.info("Exporting %d rows as %s", len(session.current_rows), filename)
    return Response(
        content=content,
        media_type=_MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )



@router.delete("/session")
def clear_session(request: Request):
    """Forget the loaded dataset; the next request opens a fresh workspace."""
    cleared = sessions.drop(request.state.session_id)
    return {"cleared": cleared}
