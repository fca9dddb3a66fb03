"""Heuristics for spotting geographic and date columns by name or content."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

import pandas as pd

from config.settings import DEFAULT_GAZETTEER, GazetteerEntry
from core.dataset import Dataset, is_empty


GeoCategory = Literal["state", "district", "pincode", "location"]
MatchBasis = Literal["name_keyword", "content_sample"]


GEO_NAME_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "state": ("state", "states", "province", "region"),
    "district": ("district", "districts", "city", "cities", "county"),
    "pincode": ("pin", "pincode", "postal", "zip", "zipcode"),
    "location": ("location", "place", "area", "locality"),
}

GEO_SAMPLE_SIZE = 5

_NUMERIC_TEXT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_YEAR = re.compile(r"(?<!\d)\d{4}(?!\d)")
MIN_DATE_YEAR = 1000


@dataclass(frozen=True)
class GeoColumnMatch:
    column: str
    category: str
    basis: MatchBasis
    matched: str


def detect_geo_columns(columns: Sequence[str]) -> List[GeoColumnMatch]:
    """
    Match column names against the geographic keyword sets.

    A column may match several categories; each category is reported once.
    """
    matches: List[GeoColumnMatch] = []
    for column in columns:
        lowered = str(column).lower()
        for category, keywords in GEO_NAME_KEYWORDS.items():
            keyword = next((kw for kw in keywords if kw in lowered), None)
            if keyword is not None:
                matches.append(
                    GeoColumnMatch(
                        column=column,
                        category=category,
                        basis="name_keyword",
                        matched=keyword,
                    )
                )
    return matches


def sample_values(dataset: Dataset, column: str, size: int = GEO_SAMPLE_SIZE) -> List[Any]:
    """First ``size`` non-empty values of a column."""
    sampled: List[Any] = []
    for row in dataset:
        value = row.get(column)
        if is_empty(value):
            continue
        sampled.append(value)
        if len(sampled) >= size:
            break
    return sampled


def detect_geo_by_content(
    dataset: Dataset,
    columns: Sequence[str],
    gazetteer: Optional[Sequence[GazetteerEntry]] = None,
    sample_size: int = GEO_SAMPLE_SIZE,
) -> List[GeoColumnMatch]:
    """
    Look for gazetteer place names inside sampled column values.

    Runs only as a fallback when no column name looks geographic.
    """
    entries = DEFAULT_GAZETTEER if gazetteer is None else gazetteer
    matches: List[GeoColumnMatch] = []

    for column in columns:
        samples = [str(v).lower() for v in sample_values(dataset, column, sample_size)]
        if not samples:
            continue
        for entry in entries:
            name = next(
                (n for n in entry.names if any(n in sample for sample in samples)),
                None,
            )
            if name is not None:
                matches.append(
                    GeoColumnMatch(
                        column=column,
                        category=entry.category,
                        basis="content_sample",
                        matched=name,
                    )
                )
    return matches


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a cell as a date.

    Plain numbers are rejected so that numeric columns are not mistaken
    for epoch timestamps. Text must carry a four-digit year; fragments
    such as "May" or "Dec 5" are not dates.
    """
    if isinstance(value, (datetime, date)):
        return pd.Timestamp(value)
    if not isinstance(value, str) or is_empty(value):
        return None

    text = value.strip()
    if _NUMERIC_TEXT.match(text) or not _YEAR.search(text):
        return None

    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if pd.isna(parsed) or parsed.year < MIN_DATE_YEAR:
        return None
    return parsed


def is_date_candidate(values: Sequence[Any]) -> bool:
    return any(parse_date(value) is not None for value in values)


def detect_date_columns(
    dataset: Dataset,
    columns: Sequence[str],
    sample_size: int = GEO_SAMPLE_SIZE,
) -> List[str]:
    """Columns where at least one sampled value parses as a date."""
    return [
        column
        for column in columns
        if is_date_candidate(sample_values(dataset, column, sample_size))
    ]
