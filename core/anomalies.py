"""
Anomaly detection over raw tabular data.

Flags numeric outliers (values more than N standard deviations from the
column mean), identifier-like all-unique columns and heavily duplicated
columns. Always returns at least one finding so callers have something to
display.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

import numpy as np
import pandas as pd
from scipy import stats

from core.dataset import Dataset, dataset_columns, empty_mask, normalize_value, numeric_series, to_frame
from core.profiling import ColumnType


AnomalyKind = Literal["outlier_values", "all_unique", "high_duplication", "no_anomalies"]

OUTLIER_SIGMA = 2.0
MIN_OUTLIER_SAMPLES = 6
MIN_UNIQUE_SAMPLES = 4
DUPLICATION_RATIO = 0.8

NO_ANOMALIES_MESSAGE = "No significant anomalies detected in the data."


@dataclass(frozen=True)
class AnomalyFinding:
    """A single anomaly flagged for a column."""

    column: Optional[str]
    kind: AnomalyKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_sentinel(self) -> bool:
        return self.kind == "no_anomalies"


def no_anomalies_finding() -> AnomalyFinding:
    return AnomalyFinding(column=None, kind="no_anomalies", message=NO_ANOMALIES_MESSAGE)


def detect_outliers_zscore(
    values: pd.Series,
    sigma: float = OUTLIER_SIGMA,
    min_samples: int = MIN_OUTLIER_SAMPLES,
) -> pd.Series:
    """
    Return the values lying more than ``sigma`` population standard
    deviations from the mean.

    Fewer than ``min_samples`` values, or a constant column, yield no
    outliers.
    """
    clean = values.dropna().astype(float)
    if len(clean) < min_samples:
        return clean.iloc[0:0]

    arr = clean.to_numpy()
    if float(np.std(arr)) == 0.0:
        return clean.iloc[0:0]

    z_scores = np.abs(stats.zscore(arr, ddof=0))
    return clean[z_scores > sigma]


def _outlier_finding(
    column: str,
    series: pd.Series,
    sigma: float,
    min_samples: int,
) -> Optional[AnomalyFinding]:
    numbers = numeric_series(series).dropna()
    outliers = detect_outliers_zscore(numbers, sigma=sigma, min_samples=min_samples)
    if outliers.empty:
        return None

    low, high = float(outliers.min()), float(outliers.max())
    return AnomalyFinding(
        column=column,
        kind="outlier_values",
        message=(
            f"Column '{column}' has {len(outliers)} outlier(s) beyond "
            f"{sigma:g} standard deviations (range: {low:g} to {high:g})."
        ),
        details={
            "outlier_count": int(len(outliers)),
            "min": low,
            "max": high,
            "mean": float(numbers.mean()),
            "std": float(numbers.std(ddof=0)),
        },
    )


def _uniqueness_findings(
    column: str,
    series: pd.Series,
    min_unique_samples: int,
    duplication_ratio: float,
) -> List[AnomalyFinding]:
    present = series[~empty_mask(series)].map(normalize_value)
    total = len(present)
    if total == 0:
        return []

    distinct = int(present.nunique())
    findings = []

    if total >= min_unique_samples and distinct == total:
        findings.append(
            AnomalyFinding(
                column=column,
                kind="all_unique",
                message=f"Column '{column}' has all unique values (possible identifier).",
                details={"non_empty_count": total, "unique_count": distinct},
            )
        )

    ratio = (total - distinct) / total
    if ratio > duplication_ratio:
        findings.append(
            AnomalyFinding(
                column=column,
                kind="high_duplication",
                message=(
                    f"Column '{column}' has high duplication "
                    f"({ratio * 100:.0f}% duplicate values)."
                ),
                details={
                    "non_empty_count": total,
                    "unique_count": distinct,
                    "duplicate_ratio": ratio,
                },
            )
        )

    return findings


def detect_anomalies(
    dataset: Dataset,
    types: Dict[str, ColumnType],
    sigma: float = OUTLIER_SIGMA,
    min_outlier_samples: int = MIN_OUTLIER_SAMPLES,
    min_unique_samples: int = MIN_UNIQUE_SAMPLES,
    duplication_ratio: float = DUPLICATION_RATIO,
) -> List[AnomalyFinding]:
    """
    Scan every column for anomalies.

    Findings are ordered by column, then outlier, uniqueness and duplication
    checks within a column. When nothing is found a single sentinel finding
    is returned.
    """
    findings: List[AnomalyFinding] = []

    if dataset:
        df = to_frame(dataset)
        for col in dataset_columns(dataset):
            series = df[col]
            if types.get(col) == "numeric":
                outlier = _outlier_finding(col, series, sigma, min_outlier_samples)
                if outlier is not None:
                    findings.append(outlier)
            findings.extend(
                _uniqueness_findings(col, series, min_unique_samples, duplication_ratio)
            )

    if not findings:
        findings.append(no_anomalies_finding())

    return findings
