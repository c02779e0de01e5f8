"""
Shared fixtures:
- Settings isolation (UOF_* environment, cached settings)
- A tiny processed Parquet schema for the API and query tests
- Case wrappers for the aggregator and view tests
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import duckdb
import pytest

from api.models import CaseWrapper
from shared.config import reload_settings

# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Point the data directory at a temp dir and drop cached settings around each test."""
    monkeypatch.setenv("UOF_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("UOF_MAPBOX_TOKEN", raising=False)
    monkeypatch.delenv("UOF_API_BASE_URL", raising=False)
    reload_settings()
    yield
    monkeypatch.undo()
    reload_settings()


# =============================================================================
# Processed schema
# =============================================================================

_TABLE_SQL = {
    "precincts": """
        SELECT * FROM (VALUES (1, '01'), (2, '03')) t(precinct_id, name)
    """,
    "neighborhoods": """
        SELECT * FROM (VALUES
            (1, 'Downtown West', 1),
            (2, 'Phillips West', 2)
        ) t(neighborhood_id, name, precinct_id)
    """,
    "force_categories": """
        SELECT * FROM (VALUES
            (1, 'Bodily Force', 'Body Weight to Pin'),
            (2, 'Chemical Irritant', 'Crowd Control Mace')
        ) t(force_category_id, force_type, force_type_action)
    """,
    "subjects": """
        SELECT * FROM (VALUES
            (101, 'White', 'Male', 25, 'A', false),
            (102, 'Black', 'Female', 31, 'A', true),
            (103, 'White', CAST(NULL AS VARCHAR), 40, 'A', false),
            (105, '', 'Male', 19, 'B', false)
        ) t(subject_id, race, sex, age, role, injury)
    """,
    "forces": """
        SELECT * FROM (VALUES
            (101, 101, 1, 'Tensed'),
            (102, 102, 2, 'Fled'),
            (103, 103, 1, CAST(NULL AS VARCHAR)),
            (104, CAST(NULL AS BIGINT), 1, 'Commission of Crime'),
            (105, 105, 2, CAST(NULL AS VARCHAR))
        ) t(force_id, subject_id, force_category_id, resistance)
    """,
    "cases": """
        SELECT case_id, case_number, CAST(response_date AS TIMESTAMP) AS response_date,
               YEAR(CAST(response_date AS TIMESTAMP)) AS year,
               problem, is_911_call, primary_offense, latitude, longitude,
               precinct_id, neighborhood_id, force_id
        FROM (VALUES
            (101, '16-000101', '2016-01-01 00:51:00', 'Fight', true, 'ASLT5', 44.978, -93.272, 1, 1, 101),
            (102, '16-000102', '2016-02-11 13:20:00', 'Suspicious Person', false, 'OBSTRU', 44.956, -93.265, 2, 2, 102),
            (103, '16-000103', '2016-03-05 08:00:00', 'Domestic', true, 'DASLT', 44.957, -93.264, 2, 2, 103),
            (104, '16-000104', '2016-04-20 19:45:00', 'Assault', true, 'ASLT4', 44.979, -93.271, 1, 1, 104),
            (106, '16-000106', '2016-05-02 02:10:00', 'Traffic Stop', false, CAST(NULL AS VARCHAR),
                  CAST(NULL AS DOUBLE), CAST(NULL AS DOUBLE), CAST(NULL AS BIGINT), CAST(NULL AS BIGINT), CAST(NULL AS BIGINT)),
            (105, '17-000105', '2017-07-04 23:30:00', 'Disturbance', false, 'DISCON', 44.975, -93.270, 1, 1, 105)
        ) t(case_id, case_number, response_date, problem, is_911_call, primary_offense,
            latitude, longitude, precinct_id, neighborhood_id, force_id)
    """,
}


@pytest.fixture
def processed_dir(tmp_path: Path) -> Path:
    """Write the fixture schema where the settings expect processed tables."""
    out = tmp_path / "data" / "processed"
    out.mkdir(parents=True)
    con = duckdb.connect()
    try:
        for name, sql in _TABLE_SQL.items():
            con.execute(f"COPY ({sql}) TO '{out / f'{name}.parquet'}' (FORMAT PARQUET)")
    finally:
        con.close()
    return out


# =============================================================================
# Case wrappers
# =============================================================================


def _make_case(
    case_id: int,
    *,
    race: str | None = None,
    sex: str | None = None,
    force: bool = True,
    subject: bool = True,
    latitude: float | None = 44.97,
    longitude: float | None = -93.26,
    problem: str = "Fight",
    date: str = "2016-01-01 00:51:00",
) -> CaseWrapper:
    force_data = None
    if force:
        force_data = {
            "id": case_id,
            "force_type": "Bodily Force",
            "subject": {"id": case_id, "race": race, "sex": sex} if subject else None,
        }
    return CaseWrapper.model_validate({
        "case": {
            "id": case_id,
            "date": date,
            "problem": problem,
            "latitude": latitude,
            "longitude": longitude,
            "force": force_data,
        }
    })


@pytest.fixture
def case_factory():
    """Build a CaseWrapper; `force=False` or `subject=False` cuts the chain at that level."""
    return _make_case


@pytest.fixture
def sample_cases() -> list[CaseWrapper]:
    return [
        _make_case(1, race="White", sex="Male"),
        _make_case(2, race="Black", sex="Female"),
        _make_case(3, force=False),
        _make_case(4, race="White", sex=""),
        _make_case(5, subject=False, latitude=None),
    ]
