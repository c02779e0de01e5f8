"""Tests for the REST API and its query layer over the fixture Parquet schema."""

import duckdb
import pytest
from fastapi.testclient import TestClient

from api import queries
from api.main import app
from shared.config import reload_settings


@pytest.fixture
def client(processed_dir):
    return TestClient(app)


class TestYears:
    def test_available_years(self, client):
        resp = client.get("/api/v1.0/year")

        assert resp.status_code == 200
        assert resp.json() == {"availableYears": ["2016", "2017"]}


class TestCasesByYear:
    def test_returns_case_wrappers_in_date_order(self, client):
        resp = client.get("/api/v1.0/year/2016")

        assert resp.status_code == 200
        body = resp.json()
        assert [w["case"]["id"] for w in body] == [101, 102, 103, 104, 106]

    def test_full_chain(self, client):
        first = client.get("/api/v1.0/year/2016").json()[0]["case"]

        assert first["problem"] == "Fight"
        assert first["date"].startswith("2016-01-01 00:51:00")
        assert first["latitude"] == pytest.approx(44.978)
        assert first["precinct"] == "01"
        assert first["neighborhood"] == "Downtown West"
        assert first["force"]["force_type"] == "Bodily Force"
        assert first["force"]["force_type_action"] == "Body Weight to Pin"
        assert first["force"]["subject"] == {
            "id": 101, "race": "White", "sex": "Male",
            "age": 25, "role": "A", "injury": False,
        }

    def test_missing_levels_are_null(self, client):
        by_id = {w["case"]["id"]: w["case"] for w in client.get("/api/v1.0/year/2016").json()}

        assert by_id[104]["force"]["subject"] is None
        assert by_id[106]["force"] is None
        assert by_id[106]["latitude"] is None
        assert by_id[106]["precinct"] is None

    def test_unknown_year_is_empty(self, client):
        resp = client.get("/api/v1.0/year/1999")

        assert resp.status_code == 200
        assert resp.json() == []

    def test_non_numeric_year_rejected(self, client):
        assert client.get("/api/v1.0/year/latest").status_code == 422


class TestDemographics:
    def test_counts_largest_first(self, client):
        body = client.get("/api/v1.0/year/2016/demographics").json()

        assert body["year"] == 2016
        assert body["race"] == [
            {"value": "White", "count": 2},
            {"value": "Black", "count": 1},
        ]
        assert body["sex"] == [
            {"value": "Female", "count": 1},
            {"value": "Male", "count": 1},
        ]

    def test_empty_values_not_counted(self, client):
        body = client.get("/api/v1.0/year/2017/demographics").json()

        assert body["race"] == []
        assert body["sex"] == [{"value": "Male", "count": 1}]


class TestQueries:
    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()

        assert "/api/v1.0/year" in body["endpoints"]

    def test_missing_tables_raise(self):
        with pytest.raises(duckdb.Error):
            queries.get_available_years()

    def test_data_dir_with_quote(self, monkeypatch, tmp_path):
        data_dir = tmp_path / "o'brien" / "data"
        out = data_dir / "processed"
        out.mkdir(parents=True)
        target = str(out / "cases.parquet").replace("'", "''")
        duckdb.execute(f"""
            COPY (SELECT * FROM (VALUES (1, 2016), (2, 2018)) t(case_id, year))
            TO '{target}' (FORMAT PARQUET)
        """)
        monkeypatch.setenv("UOF_DATA_DIR", str(data_dir))
        reload_settings()

        assert queries.get_available_years() == ["2016", "2018"]
