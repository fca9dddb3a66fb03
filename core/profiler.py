"""
Tabular profiler entry point.

Runs type inference once, then the statistics, anomaly, geographic and date
passes over the same dataset snapshot, and merges everything into an
``Insight``. Every call is a pure function of its input rows.
"""

import logging
from typing import Optional

from config.settings import ProfilerConfig
from core.anomalies import detect_anomalies
from core.dataset import Dataset, dataset_columns
from core.geospatial import detect_date_columns, detect_geo_by_content, detect_geo_columns
from core.insights import Insight, build_insight, empty_insight
from core.profiling import compute_stats, infer_types

logger = logging.getLogger(__name__)


def profile_dataset(dataset: Dataset, config: Optional[ProfilerConfig] = None) -> Insight:
    """
    Profile a dataset and return the full insight report.

    Args:
        dataset: Ordered sequence of row records; the first row defines columns
        config: Profiler thresholds and gazetteer (defaults when omitted)

    Returns:
        Insight aggregate. An empty dataset yields the "no data" report.
    """
    cfg = config or ProfilerConfig()

    if not dataset:
        logger.debug("Empty dataset supplied; returning no-data insight")
        return empty_insight()

    columns = dataset_columns(dataset)
    types = infer_types(dataset, threshold=cfg.numeric_threshold)

    stats = compute_stats(
        dataset,
        types,
        example_count=cfg.example_values,
        bins=cfg.histogram_bins,
        top_n=cfg.frequency_top_n,
    )
    anomalies = detect_anomalies(
        dataset,
        types,
        sigma=cfg.outlier_sigma,
        min_outlier_samples=cfg.min_outlier_samples,
        min_unique_samples=cfg.min_unique_samples,
        duplication_ratio=cfg.duplication_ratio,
    )

    geo_matches = detect_geo_columns(columns)
    if not geo_matches:
        geo_matches = detect_geo_by_content(
            dataset, columns, gazetteer=cfg.gazetteer, sample_size=cfg.geo_sample_size
        )
    date_columns = detect_date_columns(dataset, columns, sample_size=cfg.geo_sample_size)

    logger.debug(
        "Profiled %d rows x %d columns: %d anomaly finding(s), %d geo match(es), %d date column(s)",
        len(dataset),
        len(columns),
        len(anomalies),
        len(geo_matches),
        len(date_columns),
    )

    return build_insight(
        columns,
        types,
        stats,
        anomalies,
        geo_matches,
        dataset,
        date_columns=date_columns,
        small_rows=cfg.small_dataset_rows,
        medium_rows=cfg.medium_dataset_rows,
        max_distinct=cfg.category_filter_max_distinct,
        max_values=cfg.category_filter_values,
    )
