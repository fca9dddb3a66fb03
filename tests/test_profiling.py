"""Tests for type inference and column statistics."""

import pytest
import pandas as pd

from core.profiling import (
    NUMERIC_THRESHOLD,
    compute_stats,
    detect_column_type,
    frequency_table,
    histogram_bins,
    infer_types,
)


class TestInferTypes:
    """Tests for column type inference."""

    def test_numeric_strings_are_numeric(self):
        rows = [{"a": "1"}, {"a": "2.5"}, {"a": "x"}]
        assert infer_types(rows) == {"a": "numeric"}

    def test_exactly_half_numeric_is_categorical(self):
        rows = [{"a": "1"}, {"a": "x"}]
        assert NUMERIC_THRESHOLD == 0.5
        assert infer_types(rows) == {"a": "categorical"}

    def test_empty_values_stay_in_denominator(self):
        rows = [{"a": "1"}, {"a": ""}, {"a": None}]
        assert infer_types(rows) == {"a": "categorical"}

    def test_all_empty_column_is_categorical(self):
        rows = [{"a": ""}, {"a": "  "}, {"a": ""}]
        assert infer_types(rows) == {"a": "categorical"}

    def test_empty_dataset(self):
        assert infer_types([]) == {}

    def test_column_order_follows_first_row(self, mixed_rows):
        assert list(infer_types(mixed_rows)) == ["name", "age", "city", "score", "joined"]

    def test_mixed_rows_types(self, mixed_rows):
        types = infer_types(mixed_rows)
        assert types["age"] == "numeric"
        assert types["score"] == "numeric"
        assert types["name"] == "categorical"
        assert types["city"] == "categorical"
        assert types["joined"] == "categorical"

    def test_idempotent(self, mixed_rows):
        assert infer_types(mixed_rows) == infer_types(mixed_rows)

    def test_missing_keys_in_later_rows(self):
        rows = [{"a": 1, "b": "x"}, {"a": 2}, {"a": 3}]
        assert infer_types(rows) == {"a": "numeric", "b": "categorical"}

    def test_booleans_and_spelled_infinity_are_not_numbers(self):
        series = pd.Series([True, False, "inf", "nan", 1], dtype=object)
        assert detect_column_type(series) == "categorical"


class TestComputeStats:
    """Tests for per-column statistics."""

    def test_numeric_stats(self):
        rows = [{"a": v} for v in [1, 2, 3, 4, 100]]
        stats = compute_stats(rows, {"a": "numeric"})["a"]

        assert stats.min == 1
        assert stats.max == 100
        assert stats.mean == pytest.approx(22.0)
        assert stats.numeric_count == 5
        assert stats.unique_count == 5
        assert stats.min <= stats.mean <= stats.max

    def test_mean_within_bounds_for_repeated_decimals(self):
        rows = [{"a": 0.1} for _ in range(3)]
        stats = compute_stats(rows, {"a": "numeric"})["a"]
        assert stats.min <= stats.mean <= stats.max

    def test_empty_accounting(self):
        rows = [{"a": "1"}, {"a": ""}, {"a": None}, {"a": "3"}]
        stats = compute_stats(rows, {"a": "numeric"})["a"]

        assert stats.count == 4
        assert stats.empty_count == 2
        assert stats.non_empty_count == 2
        assert stats.empty_count + stats.non_empty_count == stats.count
        assert stats.mean == pytest.approx(2.0)

    def test_numeric_without_usable_values_has_no_aggregates(self):
        rows = [{"a": "x"}, {"a": ""}]
        stats = compute_stats(rows, {"a": "numeric"})["a"]

        assert stats.mean is None
        assert stats.min is None
        assert stats.max is None
        assert stats.histogram == []

    def test_categorical_examples_in_first_seen_order(self):
        rows = [{"c": v} for v in ["b", "a", "b", "c", "d"]]
        stats = compute_stats(rows, {"c": "categorical"})["c"]

        assert stats.unique_count == 4
        assert stats.examples == ["b", "a", "c"]
        assert stats.examples_truncated is True
        assert stats.example_text() == '"b", "a", "c", …'

    def test_categorical_values_are_trimmed(self):
        rows = [{"c": " a"}, {"c": "a "}, {"c": "b"}]
        stats = compute_stats(rows, {"c": "categorical"})["c"]

        assert stats.unique_count == 2
        assert stats.examples_truncated is False

    def test_top_values(self):
        rows = [{"c": v} for v in ["b", "a", "b", "c"]]
        stats = compute_stats(rows, {"c": "categorical"})["c"]

        assert list(stats.top_values)[0] == "b"
        assert stats.top_values["b"] == 2

    def test_missing_type_defaults_to_categorical(self):
        rows = [{"c": 1}, {"c": 2}]
        stats = compute_stats(rows, {})["c"]
        assert stats.detected_type == "categorical"

    def test_empty_dataset(self):
        assert compute_stats([], {}) == {}


class TestHistogramAndFrequency:
    """Tests for histogram bins and frequency tables."""

    def test_max_lands_in_last_bin(self):
        bins = histogram_bins(pd.Series([float(v) for v in range(9)]), bins=8)

        assert len(bins) == 8
        assert sum(b.count for b in bins) == 9
        assert bins[-1].count == 2
        assert bins[0].lower == 0
        assert bins[-1].upper == 8

    def test_constant_values_use_unit_bins(self):
        bins = histogram_bins(pd.Series([5.0, 5.0, 5.0]), bins=8)

        assert bins[0].lower == 5
        assert bins[0].upper == 6
        assert bins[0].count == 3

    def test_empty_values(self):
        assert histogram_bins(pd.Series([], dtype=float)) == []

    def test_frequency_table_limits_and_orders(self):
        values = pd.Series(["x"] * 5 + ["y"] * 3 + [str(i) for i in range(20)], dtype=object)
        table = frequency_table(values, top_n=10)

        assert len(table) == 10
        assert list(table)[:2] == ["x", "y"]
        assert table["x"] == 5
