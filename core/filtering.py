"""Apply smart-filter selections to in-memory datasets."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from core.dataset import Dataset, normalize_value, numeric_series, to_frame
from core.geospatial import parse_date
from core.insights import DATE_RANGE_LABELS


FilterDict = Dict[str, Any]

_RELATIVE_OFFSETS = {
    "Last 30 days": pd.Timedelta(days=30),
    "Last 3 months": pd.DateOffset(months=3),
    "Last year": pd.DateOffset(years=1),
}


def apply_selections(
    dataset: Dataset,
    selections: Sequence[FilterDict],
    now: Optional[pd.Timestamp] = None,
) -> List[Dict[str, Any]]:
    """
    Apply a sequence of filter selections and return the matching rows.

    Each selection names a column and a filter type (``range``, ``category``
    or ``date``). Selections are combined with AND; row order is preserved.
    """
    rows = [dict(row) for row in dataset]
    if not rows or len(selections) == 0:
        return rows

    df = to_frame(rows)
    mask = pd.Series(True, index=df.index)

    for raw_filter in selections:
        column = raw_filter.get("column")
        ftype = (raw_filter.get("type") or "").lower()

        if column not in df.columns:
            raise ValueError(f"Column '{column}' not found for filtering")

        series = df[column]
        if ftype == "range":
            mask &= _range_mask(series, raw_filter)
        elif ftype == "category":
            mask &= _category_mask(series, raw_filter)
        elif ftype == "date":
            mask &= _date_mask(series, raw_filter, now)
        else:
            raise ValueError(f"Unsupported filter type '{ftype}' for column '{column}'")

    return [rows[i] for i in mask[mask].index]


def _range_mask(series: pd.Series, raw_filter: FilterDict) -> pd.Series:
    low, high = _range_bounds(raw_filter)
    if low is None and high is None:
        raise ValueError("Range filters require a range")

    numbers = numeric_series(series)
    mask = numbers.notna()
    if low is not None:
        mask &= numbers >= float(low)
    if high is not None:
        mask &= numbers <= float(high)
    return mask


def _category_mask(series: pd.Series, raw_filter: FilterDict) -> pd.Series:
    values = raw_filter.get("values")
    if values is None and raw_filter.get("value") is not None:
        values = [raw_filter["value"]]
    if not values:
        raise ValueError("Category filters require at least one value")

    wanted = {normalize_value(v) for v in values}
    normalized = series.map(lambda v: None if v is None else normalize_value(v))
    mask = normalized.isin(wanted)
    return ~mask if raw_filter.get("exclude") else mask


def _date_mask(
    series: pd.Series, raw_filter: FilterDict, now: Optional[pd.Timestamp]
) -> pd.Series:
    label = raw_filter.get("label") or "Custom range"
    if label not in DATE_RANGE_LABELS:
        raise ValueError(f"Unsupported date range '{label}'")

    if label == "Custom range":
        low, high = _range_bounds(raw_filter)
        if low is None and high is None:
            raise ValueError("Custom date ranges require a start or end")
        start = _naive(pd.to_datetime(low)) if low is not None else None
        end = _naive(pd.to_datetime(high)) if high is not None else None
    else:
        end = _naive(pd.Timestamp(now) if now is not None else pd.Timestamp.now())
        start = end - _RELATIVE_OFFSETS[label]

    parsed = series.map(lambda v: _naive(parse_date(v)))
    mask = parsed.notna()
    if start is not None:
        mask &= parsed.map(lambda d: d is not None and d >= start)
    if end is not None:
        mask &= parsed.map(lambda d: d is not None and d <= end)
    return mask.astype(bool)


def _naive(value: Optional[pd.Timestamp]) -> Optional[pd.Timestamp]:
    if value is None or pd.isna(value):
        return None
    if value.tzinfo is not None:
        return value.tz_convert(None)
    return value


def _range_bounds(raw_filter: FilterDict) -> Tuple[Any, Any]:
    range_values = raw_filter.get("range")
    if isinstance(range_values, (list, tuple)) and len(range_values) == 2:
        return range_values[0], range_values[1]
    return None, None
