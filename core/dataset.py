"""
Helpers for working with in-memory datasets.

A dataset is an ordered sequence of row records (plain mappings). The column
set is taken from the first row's keys; later rows may omit keys, which is
treated the same as an empty cell.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd


Row = Mapping[str, Any]
Dataset = Sequence[Row]


def dataset_columns(dataset: Dataset) -> List[str]:
    """Return column names in first-row key order."""
    if not dataset:
        return []
    return list(dataset[0].keys())


def to_frame(dataset: Dataset) -> pd.DataFrame:
    """
    Build an object-typed DataFrame from the dataset rows.

    Values are kept exactly as received so that type inference is not
    influenced by pandas' own dtype guessing.
    """
    columns = dataset_columns(dataset)
    records = [[row.get(col) for col in columns] for row in dataset]
    return pd.DataFrame(records, columns=columns, dtype=object)


def is_empty(value: Any) -> bool:
    """True for None, NaN/NaT and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT or value is pd.NA


def parse_number(value: Any) -> float:
    """
    Parse a cell as a finite number.

    Returns NaN for anything that is empty, non-numeric or infinite.
    Booleans are treated as flags, not numbers.
    """
    if is_empty(value) or isinstance(value, (bool, np.bool_)):
        return np.nan

    if isinstance(value, (int, float, Decimal, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        # float() accepts digit separators and spelled-out nan/inf
        if "_" in text or not any(ch.isdigit() for ch in text):
            return np.nan
        try:
            number = float(text)
        except ValueError:
            return np.nan
    else:
        return np.nan

    return number if math.isfinite(number) else np.nan


def normalize_value(value: Any) -> str:
    """String form used for distinct counting and category matching."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def numeric_series(series: pd.Series) -> pd.Series:
    """Map a raw column to floats, NaN where the cell is not a finite number."""
    return series.map(parse_number).astype(float)


def empty_mask(series: pd.Series) -> pd.Series:
    return series.map(is_empty).astype(bool)


def records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a DataFrame back to plain row records with None for missing cells."""
    cleaned = df.astype(object).where(df.notna(), None)
    return cleaned.to_dict(orient="records")


def json_safe(value: Any) -> Any:
    """Cell value that survives JSON encoding."""
    if is_empty(value) and not isinstance(value, str):
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Decimal):
        return float(value)
    return value


def json_safe_rows(dataset: Dataset, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    rows = list(dataset) if limit is None else list(dataset)[:limit]
    return [{key: json_safe(value) for key, value in row.items()} for row in rows]
