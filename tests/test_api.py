"""HTTP tests for the FastAPI application."""

import json

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_narrative_client, get_store
from api.main import app
from core.exporting import to_excel_bytes
from integrations.narrative import NarrativeClient


XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CSV = (
    b"name,age,city\n"
    b"Asha,34,Pune\n"
    b"Ravi,28,Mumbai\n"
    b"Meera,45,Pune\n"
    b"Kiran,51,Delhi\n"
)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def loaded_client(client):
    response = client.post(
        "/api/data/upload", files={"file": ("people.csv", CSV, "text/csv")}
    )
    assert response.status_code == 200
    return client


class TestHealthAndSession:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_no_dataset_loaded(self, client):
        response = client.get("/api/profile/insight")
        assert response.status_code == 400

    def test_current_dataset_empty(self, client):
        assert client.get("/api/data/current-dataset").json()["loaded"] is False

    def test_clear_session(self, loaded_client):
        assert loaded_client.delete("/api/data/session").json() == {"cleared": True}
        assert loaded_client.get("/api/profile/insight").status_code == 400


class TestUpload:
    def test_upload_csv(self, client):
        response = client.post(
            "/api/data/upload", files={"file": ("people.csv", CSV, "text/csv")}
        )
        body = response.json()

        assert response.status_code == 200
        assert body["rows"] == 4
        assert body["column_names"] == ["name", "age", "city"]

    def test_unsupported_file(self, client):
        response = client.post(
            "/api/data/upload", files={"file": ("notes.txt", b"hello", "text/plain")}
        )
        assert response.status_code == 400


class TestExcelUpload:
    def test_numeric_header_columns(self, client):
        content = to_excel_bytes([
            {"State": "Goa", 2011: 100},
            {"State": "Kerala", 2011: 200},
            {"State": "Assam", 2011: 300},
        ])
        upload = client.post(
            "/api/data/upload", files={"file": ("census.xlsx", content, XLSX_TYPE)}
        )
        assert upload.status_code == 200
        assert upload.json()["column_names"] == ["State", "2011"]

        insight = client.get("/api/profile/insight")
        assert insight.status_code == 200
        assert insight.json()["column_types"]["2011"] == "numeric"

        filtered = client.post(
            "/api/data/filters/apply",
            json={"selections": [{"column": "2011", "type": "range", "range": [150, 300]}]},
        )
        assert filtered.json()["row_count"] == 2


class TestProfileEndpoints:
    def test_insight(self, loaded_client):
        body = loaded_client.get("/api/profile/insight").json()

        assert body["row_count"] == 4
        assert body["column_types"] == {"name": "categorical", "age": "numeric", "city": "categorical"}
        assert body["geo_matches"][0]["column"] == "city"
        assert body["size_bucket"] == "small"
        assert len(body["preview"]) == 4

    def test_column(self, loaded_client):
        body = loaded_client.get("/api/profile/column/age").json()

        assert body["mean"] == pytest.approx(39.5)
        assert body["min"] == 28
        assert body["max"] == 51
        assert body["non_empty_count"] == 4
        assert "appears numeric" in body["narrative"]

    def test_unknown_column(self, loaded_client):
        assert loaded_client.get("/api/profile/column/missing").status_code == 404

    def test_columns_and_anomalies(self, loaded_client):
        columns = loaded_client.get("/api/profile/columns").json()
        assert [c["name"] for c in columns] == ["name", "age", "city"]

        anomalies = loaded_client.get("/api/profile/anomalies").json()
        assert anomalies[0] == {
            "column": "name",
            "kind": "all_unique",
            "message": "Column 'name' has all unique values (possible identifier).",
            "details": {"non_empty_count": 4, "unique_count": 4},
        }

    def test_smart_filters(self, loaded_client):
        filters = loaded_client.get("/api/profile/filters").json()
        types = {f["column"]: f["filter_type"] for f in filters}
        assert types["age"] == "range"
        assert types["city"] == "category"


class TestFilterEndpoints:
    def test_apply_and_reset(self, loaded_client):
        response = loaded_client.post(
            "/api/data/filters/apply",
            json={"selections": [{"column": "city", "type": "category", "values": ["Pune"]}]},
        )
        assert response.status_code == 200
        assert response.json()["row_count"] == 2

        current = loaded_client.get("/api/data/current-dataset").json()
        assert current["filtered_rows"] == 2
        assert current["rows"] == 4
        assert current["filters_active"] is True

        assert loaded_client.get("/api/profile/insight").json()["row_count"] == 2

        reset = loaded_client.post("/api/data/filters/reset").json()
        assert reset["row_count"] == 4

    def test_bad_selection(self, loaded_client):
        response = loaded_client.post(
            "/api/data/filters/apply",
            json={"selections": [{"column": "missing", "type": "range", "range": [0, 1]}]},
        )
        assert response.status_code == 400

    def test_export_json(self, loaded_client):
        response = loaded_client.get("/api/data/export?format=json")

        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        assert len(json.loads(response.content)) == 4


class TestVisualizationEndpoints:
    def test_histogram(self, loaded_client):
        response = loaded_client.get("/api/viz/histogram/age")
        assert response.status_code == 200
        assert "figure" in response.json()

    def test_histogram_on_categorical(self, loaded_client):
        assert loaded_client.get("/api/viz/histogram/city").status_code == 400

    def test_frequency_pie(self, loaded_client):
        assert loaded_client.get("/api/viz/frequency/city?kind=pie").status_code == 200

    def test_grouped(self, loaded_client):
        assert loaded_client.get("/api/viz/grouped/city/age").status_code == 200

    def test_available_charts(self, loaded_client):
        body = loaded_client.get("/api/viz/charts/city").json()
        assert body["charts"] == ["bar", "pie"]


class TestNarrativeEndpoint:
    def test_not_configured(self, loaded_client):
        app.dependency_overrides[get_narrative_client] = lambda: None
        assert loaded_client.post("/api/profile/narrative").status_code == 503

    def test_configured(self, loaded_client, narrative_session):
        session = narrative_session({"insights": "Pune dominates."})
        app.dependency_overrides[get_narrative_client] = lambda: NarrativeClient(
            "http://narrative.test", session=session
        )

        response = loaded_client.post("/api/profile/narrative")
        assert response.json() == {"insights": "Pune dominates."}

    def test_upstream_failure(self, loaded_client, narrative_session):
        session = narrative_session(status=503)
        app.dependency_overrides[get_narrative_client] = lambda: NarrativeClient(
            "http://narrative.test", session=session
        )
        assert loaded_client.post("/api/profile/narrative").status_code == 502


class TestPreloadedEndpoints:
    def test_list(self, client):
        keys = [d["key"] for d in client.get("/api/data/datasets").json()]
        assert keys == ["census", "ngo"]

    def test_load_census(self, client, sqlite_store):
        app.dependency_overrides[get_store] = lambda: sqlite_store
        response = client.post(
            "/api/data/datasets/census/load",
            json={"filters": [{"column": "State", "operator": "eq", "value": 27}]},
        )
        body = response.json()

        assert response.status_code == 200
        assert body["rows"] == 2
        assert body["total_rows"] == 2
        assert "StateName" in body["column_names"]

        current = client.get("/api/data/current-dataset").json()
        assert current["source"] == "census"

    def test_unknown_dataset(self, client, sqlite_store):
        app.dependency_overrides[get_store] = lambda: sqlite_store
        response = client.post("/api/data/datasets/weather/load", json={})
        assert response.status_code == 400

    def test_distinct(self, client, sqlite_store):
        app.dependency_overrides[get_store] = lambda: sqlite_store
        response = client.post(
            "/api/data/datasets/ngo/distinct",
            json={"column": "State"},
        )
        assert response.json()["values"] == ["Gujarat", "Maharashtra"]
