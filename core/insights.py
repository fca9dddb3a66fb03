"""
Insight generation engine that translates profiling results into
plain-English narratives, chart suggestions and filter widgets.

Consumes the outputs of the type, statistics, anomaly and geographic passes
and assembles the final report handed to the UI.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence, Tuple

from core.anomalies import AnomalyFinding, no_anomalies_finding
from core.dataset import Dataset
from core.geospatial import GeoColumnMatch, detect_date_columns
from core.profiling import ColumnStats, ColumnType


SizeBucket = Literal["empty", "small", "medium", "large"]
FilterType = Literal["range", "category", "date"]

SMALL_DATASET_ROWS = 100
MEDIUM_DATASET_ROWS = 1000

CATEGORY_FILTER_MAX_DISTINCT = 10
CATEGORY_FILTER_VALUES = 5

QUALITY_PENALTY = 10
DATE_RANGE_LABELS = ("Last 30 days", "Last 3 months", "Last year", "Custom range")

NO_DATA_MESSAGE = "No data available for insights."


@dataclass(frozen=True)
class SmartFilterSpec:
    """A filter widget proposed for one column."""

    column: str
    filter_type: FilterType
    suggestions: List[str]
    bounds: List[Tuple[float, float]] = field(default_factory=list)


@dataclass(frozen=True)
class Insight:
    """Aggregate analysis report for one dataset."""

    overview_narrative: str
    per_column_narratives: Dict[str, str]
    anomalies: List[AnomalyFinding]
    dashboard_suggestions: List[str]
    geo_matches: List[GeoColumnMatch]
    smart_filters: List[SmartFilterSpec]

    row_count: int = 0
    column_count: int = 0
    size_bucket: SizeBucket = "empty"
    data_quality_score: int = 100
    column_types: Dict[str, ColumnType] = field(default_factory=dict)
    column_stats: Dict[str, ColumnStats] = field(default_factory=dict)
    date_columns: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0


def size_bucket(
    row_count: int,
    small: int = SMALL_DATASET_ROWS,
    medium: int = MEDIUM_DATASET_ROWS,
) -> SizeBucket:
    if row_count <= 0:
        return "empty"
    if row_count <= small:
        return "small"
    if row_count <= medium:
        return "medium"
    return "large"


def data_quality_score(stats: Dict[str, ColumnStats], total_rows: int) -> int:
    """
    Score starting at 100, minus ten times the empty-cell share of every
    column that has gaps. Clamped to [0, 100].
    """
    if total_rows <= 0:
        return 100

    score = 100.0
    for column_stats in stats.values():
        if column_stats.empty_count > 0:
            score -= QUALITY_PENALTY * (column_stats.empty_count / total_rows)
    return max(0, min(100, int(round(score))))


def _format_number(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


class InsightGenerator:
    """
    Generates human-readable insights from profiling results and
    proposes dashboard layouts and filters for non-technical users.
    """

    @staticmethod
    def generate_overview(
        row_count: int,
        column_count: int,
        column_types: Dict[str, ColumnType],
        quality_score: int,
        bucket: SizeBucket,
    ) -> str:
        """
        Generate the high-level dataset description.

        Args:
            row_count: Number of rows
            column_count: Number of columns
            column_types: Inferred type per column
            quality_score: Data-quality score (0-100)
            bucket: Qualitative size bucket

        Returns:
            Overview sentence(s)
        """
        if row_count == 0:
            return NO_DATA_MESSAGE

        numeric = sum(1 for t in column_types.values() if t == "numeric")
        categorical = len(column_types) - numeric

        return (
            f"This {bucket} dataset contains {row_count:,} rows and "
            f"{column_count} columns ({numeric} numeric, {categorical} categorical). "
            f"Data quality score: {quality_score}/100."
        )

    @staticmethod
    def generate_column_narrative(stats: ColumnStats) -> str:
        """Describe one column according to its inferred type."""
        if stats.detected_type == "numeric":
            if not stats.has_range:
                return f'Column "{stats.name}" appears numeric but has no usable values.'
            return (
                f'Column "{stats.name}" appears numeric, ranging from '
                f"{_format_number(stats.min)} to {_format_number(stats.max)} "
                f"(mean: {stats.mean:,.2f}, unique: {stats.unique_count})."
            )

        if stats.unique_count == 0:
            return f'Column "{stats.name}" is empty.'
        return (
            f'Column "{stats.name}" is likely categorical ({stats.example_text()}) '
            f"and has {stats.unique_count} unique values."
        )

    @staticmethod
    def generate_dashboard_suggestions(
        column_types: Dict[str, ColumnType],
        date_columns: Sequence[str],
    ) -> List[str]:
        """
        Map the mix of column types to chart suggestions.

        Every rule is evaluated on its own, so several suggestions may apply.
        """
        numeric = [c for c, t in column_types.items() if t == "numeric"]
        categorical = [
            c for c, t in column_types.items()
            if t == "categorical" and c not in date_columns
        ]
        dates = [c for c in date_columns if column_types.get(c) != "numeric"]

        suggestions: List[str] = []

        if categorical and numeric:
            suggestions.append(
                f"Bar chart: compare '{numeric[0]}' across '{categorical[0]}' categories."
            )
            suggestions.append(
                f"Group by '{categorical[0]}' to aggregate '{numeric[0]}' (sum or average)."
            )
        if categorical:
            suggestions.append(f"Pie chart: show the distribution of '{categorical[0]}'.")
        if numeric:
            suggestions.append(f"Histogram: view the distribution of '{numeric[0]}'.")
        if len(numeric) >= 2:
            suggestions.append(
                f"Scatter plot: explore the relationship between '{numeric[0]}' and '{numeric[1]}'."
            )
        if len(categorical) >= 2:
            suggestions.append(
                f"Heatmap: cross-tabulate '{categorical[0]}' against '{categorical[1]}'."
            )
        if dates and numeric:
            suggestions.append(
                f"Time series: track '{numeric[0]}' over '{dates[0]}'."
            )

        return suggestions

    @staticmethod
    def generate_smart_filters(
        stats: Dict[str, ColumnStats],
        date_columns: Sequence[str],
        max_distinct: int = CATEGORY_FILTER_MAX_DISTINCT,
        max_values: int = CATEGORY_FILTER_VALUES,
    ) -> List[SmartFilterSpec]:
        """Propose a filter widget for each column that supports one."""
        filters: List[SmartFilterSpec] = []

        for column, column_stats in stats.items():
            if column_stats.detected_type == "numeric":
                if column_stats.has_range:
                    filters.append(_range_filter(column_stats))
            elif 0 < column_stats.unique_count <= max_distinct:
                filters.append(
                    SmartFilterSpec(
                        column=column,
                        filter_type="category",
                        suggestions=list(column_stats.top_values)[:max_values],
                    )
                )
            elif column in date_columns:
                filters.append(
                    SmartFilterSpec(
                        column=column,
                        filter_type="date",
                        suggestions=list(DATE_RANGE_LABELS),
                    )
                )

        return filters


def _range_filter(stats: ColumnStats) -> SmartFilterSpec:
    """Split the value span into low / medium / high thirds."""
    low, high = stats.min, stats.max
    step = (high - low) / 3
    edges = [low, low + step, low + 2 * step, high]
    bounds = [(edges[i], edges[i + 1]) for i in range(3)]
    labels = ["Low", "Medium", "High"]
    return SmartFilterSpec(
        column=stats.name,
        filter_type="range",
        suggestions=[
            f"{label} ({_format_number(lo)} - {_format_number(hi)})"
            for label, (lo, hi) in zip(labels, bounds)
        ],
        bounds=bounds,
    )


def empty_insight() -> Insight:
    return Insight(
        overview_narrative=NO_DATA_MESSAGE,
        per_column_narratives={},
        anomalies=[no_anomalies_finding()],
        dashboard_suggestions=[],
        geo_matches=[],
        smart_filters=[],
    )


def build_insight(
    columns: Sequence[str],
    types: Dict[str, ColumnType],
    stats: Dict[str, ColumnStats],
    anomalies: List[AnomalyFinding],
    geo_matches: List[GeoColumnMatch],
    dataset: Dataset,
    date_columns: Optional[Sequence[str]] = None,
    small_rows: int = SMALL_DATASET_ROWS,
    medium_rows: int = MEDIUM_DATASET_ROWS,
    max_distinct: int = CATEGORY_FILTER_MAX_DISTINCT,
    max_values: int = CATEGORY_FILTER_VALUES,
) -> Insight:
    """
    Compose the final report from the outputs of the analysis passes.

    Date columns are detected from ``dataset`` unless supplied.
    """
    if not dataset:
        return empty_insight()

    row_count = len(dataset)
    if date_columns is None:
        date_columns = detect_date_columns(dataset, columns)

    bucket = size_bucket(row_count, small_rows, medium_rows)
    score = data_quality_score(stats, row_count)

    return Insight(
        overview_narrative=InsightGenerator.generate_overview(
            row_count, len(columns), types, score, bucket
        ),
        per_column_narratives={
            col: InsightGenerator.generate_column_narrative(stats[col])
            for col in columns
            if col in stats
        },
        anomalies=list(anomalies) or [no_anomalies_finding()],
        dashboard_suggestions=InsightGenerator.generate_dashboard_suggestions(
            types, date_columns
        ),
        geo_matches=list(geo_matches),
        smart_filters=InsightGenerator.generate_smart_filters(
            stats, date_columns, max_distinct, max_values
        ),
        row_count=row_count,
        column_count=len(columns),
        size_bucket=bucket,
        data_quality_score=score,
        column_types=dict(types),
        column_stats=dict(stats),
        date_columns=list(date_columns),
    )
