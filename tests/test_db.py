"""Tests for the hosted-store query layer against a SQLite file."""

import pytest

from config.settings import DatabaseConfig
from db.connection import DataSourceError
from db.introspection import get_distinct_values, get_row_count, get_table_columns, get_tables
from db.loader import get_preloaded, load_dataset, state_name
from db.query import StoreFilter, fetch_rows


class TestConnection:
    """Tests for configuration and connectivity."""

    def test_sqlite_connection_string(self):
        config = DatabaseConfig(
            host="", port=0, database="/tmp/x.db", username="", password="", driver="sqlite"
        )
        assert config.connection_string == "sqlite:////tmp/x.db"

    def test_postgres_connection_string(self):
        config = DatabaseConfig(
            host="db", port=5432, database="census", username="u", password="p"
        )
        assert config.connection_string == "postgresql://u:p@db:5432/census"

    def test_test_connection(self, sqlite_store):
        assert sqlite_store.test_connection() is True

    def test_unknown_table(self, sqlite_store):
        with pytest.raises(DataSourceError, match="does not exist"):
            sqlite_store.table("Missing")


class TestFetchRows:
    """Tests for filtered, searched and paged reads."""

    def test_equality_filter(self, sqlite_store):
        result = fetch_rows(sqlite_store, "Cencus_2011", filters=[StoreFilter("State", "eq", 27)])
        assert result.total == 2
        assert {row["Name"] for row in result.rows} == {"Pune", "Nagpur"}

    def test_range_filters(self, sqlite_store):
        result = fetch_rows(
            sqlite_store,
            "Cencus_2011",
            filters=[StoreFilter("TOT_P", "gte", 5000000), StoreFilter("TOT_P", "lte", 8000000)],
        )
        assert {row["Name"] for row in result.rows} == {"Surat", "Ahmedabad"}

    def test_not_equal(self, sqlite_store):
        result = fetch_rows(sqlite_store, "Cencus_2011", filters=[StoreFilter("TRU", "neq", "Total")])
        assert result.total == 2

    def test_pagination_and_order(self, sqlite_store):
        result = fetch_rows(sqlite_store, "Cencus_2011", order_by="Name", page=2, page_size=2)

        assert [row["Name"] for row in result.rows] == ["Nagpur", "Pune"]
        assert result.total == 5
        assert result.total_pages == 3

    def test_search_is_case_insensitive(self, sqlite_store):
        result = fetch_rows(sqlite_store, "Darpan_NGO", search="trust", search_columns=["Name of NPO"])
        assert [row["Name of NPO"] for row in result.rows] == ["Seva Trust"]

    def test_unknown_filter_column(self, sqlite_store):
        with pytest.raises(ValueError, match="not found"):
            fetch_rows(sqlite_store, "Cencus_2011", filters=[StoreFilter("Nope", "eq", 1)])

    def test_invalid_operator(self):
        with pytest.raises(ValueError, match="Unsupported store operator"):
            StoreFilter("State", "like", "x")


class TestIntrospection:
    """Tests for table metadata helpers."""

    def test_tables(self, sqlite_store):
        assert get_tables(sqlite_store) == ["Cencus_2011", "Darpan_NGO"]

    def test_columns_and_count(self, sqlite_store):
        names = [c["name"] for c in get_table_columns(sqlite_store, "Darpan_NGO")]
        assert "Name of NPO" in names
        assert get_row_count(sqlite_store, "Darpan_NGO") == 3

    def test_distinct_values_with_filter(self, sqlite_store):
        values = get_distinct_values(
            sqlite_store, "Darpan_NGO", "District", [StoreFilter("State", "eq", "Maharashtra")]
        )
        assert values == ["Nagpur", "Pune"]


class TestPreloadedDatasets:
    """Tests for the census and NGO loaders."""

    def test_census_rows_carry_state_names(self, sqlite_store):
        result = load_dataset(sqlite_store, "census")
        names = {row["Name"]: row["StateName"] for row in result.rows}

        assert names["Pune"] == "MAHARASHTRA"
        assert names["Surat"] == "GUJARAT"
        assert names["Atlantis"] == "Unknown State (99)"
        assert result.columns[-1] == "StateName"

    def test_ngo_rows_ordered_by_name(self, sqlite_store):
        result = load_dataset(sqlite_store, "ngo")
        assert [row["Name of NPO"] for row in result.rows] == [
            "Asha Foundation", "Green Earth", "Seva Trust",
        ]
        assert "StateName" not in result.rows[0]

    def test_unknown_dataset(self):
        with pytest.raises(ValueError, match="Unknown dataset"):
            get_preloaded("weather")

    def test_state_name_for_bad_code(self):
        assert state_name("abc") == "Unknown State (abc)"
        assert state_name(30) == "GOA"
