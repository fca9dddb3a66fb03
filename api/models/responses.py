"""Pydantic response schemas."""

from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel

from api.models.requests import FilterSelection


class DataLoadResponse(BaseModel):
    dataset_name: str
    rows: int
    columns: int
    column_names: List[str]
    total_rows: Optional[int] = None
    page: Optional[int] = None
    total_pages: Optional[int] = None


class PreloadedDatasetResponse(BaseModel):
    key: str
    label: str
    table: str


class DistinctValuesResponse(BaseModel):
    column: str
    values: List[Any]


class HistogramBinResponse(BaseModel):
    lower: float
    upper: float
    count: int


class ColumnStatsResponse(BaseModel):
    name: str
    detected_type: str
    count: int
    empty_count: int
    non_empty_count: int
    unique_count: int
    numeric_count: int = 0
    mean: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    histogram: List[HistogramBinResponse] = []
    examples: List[str] = []
    examples_truncated: bool = False
    top_values: Dict[str, int] = {}
    narrative: Optional[str] = None


class AnomalyResponse(BaseModel):
    column: Optional[str] = None
    kind: str
    message: str
    details: Dict[str, Any] = {}


class GeoMatchResponse(BaseModel):
    column: str
    category: str
    basis: str
    matched: str


class SmartFilterResponse(BaseModel):
    column: str
    filter_type: str
    suggestions: List[str]
    bounds: List[Tuple[float, float]] = []


class InsightResponse(BaseModel):
    dataset_name: Optional[str] = None
    overview_narrative: str
    per_column_narratives: Dict[str, str]
    anomalies: List[AnomalyResponse]
    dashboard_suggestions: List[str]
    geo_matches: List[GeoMatchResponse]
    smart_filters: List[SmartFilterResponse]
    row_count: int
    column_count: int
    size_bucket: str
    data_quality_score: int
    column_types: Dict[str, str]
    date_columns: List[str]
    preview: List[Dict[str, Any]] = []


class NarrativeResponse(BaseModel):
    insights: str


class CurrentDatasetResponse(BaseModel):
    loaded: bool
    dataset_name: Optional[str] = None
    source: Optional[str] = None
    rows: Optional[int] = None
    columns: Optional[int] = None
    column_names: Optional[List[str]] = None
    numeric_columns: Optional[List[str]] = None
    categorical_columns: Optional[List[str]] = None
    filtered_rows: Optional[int] = None
    filters_active: bool = False
    active_filters: Optional[List[FilterSelection]] = None


class FilterApplicationResponse(BaseModel):
    row_count: int
    column_count: int
    preview: List[Dict[str, Any]]
    active_filters: List[FilterSelection]
