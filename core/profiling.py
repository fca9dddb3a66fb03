"""
Column profiling for loosely-typed tabular data.

Infers numeric vs categorical columns, then derives per-column summary
statistics, histogram bins and frequency tables from raw row records.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

import numpy as np
import pandas as pd

from core.dataset import (
    Dataset,
    dataset_columns,
    empty_mask,
    normalize_value,
    numeric_series,
    to_frame,
)


ColumnType = Literal["numeric", "categorical"]

NUMERIC_THRESHOLD = 0.5
EXAMPLE_VALUES = 3
HISTOGRAM_BINS = 8
FREQUENCY_TOP_N = 10
TRUNCATION_MARK = "…"


@dataclass(frozen=True)
class HistogramBin:
    """One equal-width histogram bucket."""

    lower: float
    upper: float
    count: int

    @property
    def label(self) -> str:
        return f"{self.lower:.1f}-{self.upper:.1f}"


@dataclass(frozen=True)
class ColumnStats:
    """Descriptive statistics for a single column."""

    name: str
    detected_type: ColumnType

    # Basic counts
    count: int
    empty_count: int
    unique_count: int

    # Numeric columns
    numeric_count: int = 0
    mean: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    histogram: List[HistogramBin] = field(default_factory=list)

    # Categorical columns
    examples: List[str] = field(default_factory=list)
    examples_truncated: bool = False
    top_values: Dict[str, int] = field(default_factory=dict)

    @property
    def non_empty_count(self) -> int:
        return self.count - self.empty_count

    @property
    def empty_percentage(self) -> float:
        return (self.empty_count / self.count * 100) if self.count else 0.0

    @property
    def has_range(self) -> bool:
        return self.mean is not None

    def example_text(self) -> str:
        """Quoted example values with a trailing mark when more exist."""
        quoted = ", ".join(f'"{value}"' for value in self.examples)
        if self.examples_truncated:
            quoted = f"{quoted}, {TRUNCATION_MARK}" if quoted else TRUNCATION_MARK
        return quoted


def numeric_fraction(series: pd.Series) -> float:
    """Share of all cells (empty ones included) that hold a finite number."""
    if len(series) == 0:
        return 0.0
    return float(numeric_series(series).notna().sum()) / len(series)


def detect_column_type(
    series: pd.Series, threshold: float = NUMERIC_THRESHOLD
) -> ColumnType:
    """
    Classify a raw column.

    A column is numeric iff the fraction of its values that parse as a
    finite number is strictly greater than ``threshold``. Empty cells stay
    in the denominator.
    """
    return "numeric" if numeric_fraction(series) > threshold else "categorical"


def infer_types(
    dataset: Dataset, threshold: float = NUMERIC_THRESHOLD
) -> Dict[str, ColumnType]:
    """
    Infer the type of every column in the dataset.

    Args:
        dataset: Ordered sequence of row records
        threshold: Numeric-fraction cutoff

    Returns:
        Mapping of column name to type, in first-row key order
    """
    if not dataset:
        return {}

    df = to_frame(dataset)
    return {col: detect_column_type(df[col], threshold) for col in df.columns}


def histogram_bins(values: pd.Series, bins: int = HISTOGRAM_BINS) -> List[HistogramBin]:
    """
    Equal-width bins between min and max of the values.

    The maximum lands in the last bin. A zero span falls back to
    unit-width bins starting at the single value.
    """
    clean = values.dropna().to_numpy(dtype=float)
    if clean.size == 0:
        return []

    low, high = float(clean.min()), float(clean.max())
    if high == low:
        high = low + bins

    counts, edges = np.histogram(clean, bins=bins, range=(low, high))
    return [
        HistogramBin(lower=float(edges[i]), upper=float(edges[i + 1]), count=int(counts[i]))
        for i in range(len(counts))
    ]


def frequency_table(values: pd.Series, top_n: int = FREQUENCY_TOP_N) -> Dict[str, int]:
    """Most frequent normalized values, highest count first."""
    if values.empty:
        return {}
    counts = values.map(normalize_value).value_counts()
    return {str(k): int(v) for k, v in counts.head(top_n).items()}


def profile_column(
    series: pd.Series,
    detected_type: ColumnType,
    example_count: int = EXAMPLE_VALUES,
    bins: int = HISTOGRAM_BINS,
    top_n: int = FREQUENCY_TOP_N,
) -> ColumnStats:
    """
    Compute statistics for one column given its inferred type.

    Empty cells are counted regardless of type. Numeric aggregates only use
    cells that parse as finite numbers and are left unset when there are none.
    """
    name = str(series.name)
    count = len(series)
    empties = empty_mask(series)
    empty_count = int(empties.sum())
    present = series[~empties]
    normalized = present.map(normalize_value)

    if detected_type == "numeric":
        numbers = numeric_series(present).dropna()
        if numbers.empty:
            return ColumnStats(
                name=name,
                detected_type=detected_type,
                count=count,
                empty_count=empty_count,
                unique_count=int(normalized.nunique()),
            )
        low, high = float(numbers.min()), float(numbers.max())
        # float summation can push the mean a hair outside [min, max]
        mean = min(max(float(numbers.sum() / len(numbers)), low), high)
        return ColumnStats(
            name=name,
            detected_type=detected_type,
            count=count,
            empty_count=empty_count,
            unique_count=int(numbers.nunique()),
            numeric_count=int(len(numbers)),
            mean=mean,
            min=low,
            max=high,
            histogram=histogram_bins(numbers, bins),
        )

    distinct = normalized.drop_duplicates().tolist()
    return ColumnStats(
        name=name,
        detected_type=detected_type,
        count=count,
        empty_count=empty_count,
        unique_count=len(distinct),
        examples=distinct[:example_count],
        examples_truncated=len(distinct) > example_count,
        top_values=frequency_table(present, top_n),
    )


def compute_stats(
    dataset: Dataset,
    types: Dict[str, ColumnType],
    example_count: int = EXAMPLE_VALUES,
    bins: int = HISTOGRAM_BINS,
    top_n: int = FREQUENCY_TOP_N,
) -> Dict[str, ColumnStats]:
    """
    Compute statistics for every column of the dataset.

    Columns missing from ``types`` are treated as categorical.
    """
    if not dataset:
        return {}

    df = to_frame(dataset)
    return {
        col: profile_column(
            df[col],
            types.get(col, "categorical"),
            example_count=example_count,
            bins=bins,
            top_n=top_n,
        )
        for col in dataset_columns(dataset)
    }
