"""Test fixtures and configuration for pytest."""

import pytest
import requests
import pandas as pd

from config.settings import DatabaseConfig
from db.connection import DatabaseClient


@pytest.fixture
def mixed_rows():
    """Rows with numeric strings, categories, identifiers and dates."""
    cities = ["Pune", "Mumbai", "Delhi"]
    return [
        {
            "name": f"Person {i}",
            "age": str(20 + i),
            "city": cities[i % 3],
            "score": 50 + i,
            "joined": f"2024-01-{i + 1:02d}",
        }
        for i in range(12)
    ]


@pytest.fixture
def rows_with_empties():
    """Two columns, the second half-empty."""
    return [
        {"value": str(i), "note": "" if i < 5 else "ok"}
        for i in range(10)
    ]


@pytest.fixture
def sqlite_store(tmp_path):
    """DatabaseClient backed by a temporary SQLite file with both preloaded tables."""
    config = DatabaseConfig(
        host="",
        port=0,
        database=str(tmp_path / "store.db"),
        username="",
        password="",
        driver="sqlite",
    )
    client = DatabaseClient(config)

    census = pd.DataFrame({
        "Name": ["Pune", "Nagpur", "Surat", "Ahmedabad", "Atlantis"],
        "State": [27, 27, 24, 24, 99],
        "District": [1, 2, 3, 4, 5],
        "Level": ["DISTRICT"] * 5,
        "TRU": ["Total", "Urban", "Total", "Rural", "Total"],
        "TOT_P": [9400000, 4600000, 6000000, 7200000, 10],
    })
    ngo = pd.DataFrame({
        "Name of NPO": ["Seva Trust", "Asha Foundation", "Green Earth"],
        "State": ["Maharashtra", "Gujarat", "Maharashtra"],
        "District": ["Pune", "Surat", "Nagpur"],
        "Type": ["Trust", "Society", "Trust"],
        "Sectors working in": ["Education", "Health", "Environment"],
    })
    census.to_sql("Cencus_2011", client.engine, index=False)
    ngo.to_sql("Darpan_NGO", client.engine, index=False)

    yield client
    client.close()


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, body=None, status=200, invalid_json=False):
        self.body = body
        self.status = status
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Server Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.body


class StubSession:
    """Records posted payloads and replays a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def narrative_session():
    """Factory for stubbed HTTP sessions used by the narrative client."""
    def _make(body=None, status=200, invalid_json=False, error=None):
        return StubSession(StubResponse(body, status, invalid_json), error=error)
    return _make
