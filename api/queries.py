"""Shared query layer for API and MCP server."""

from __future__ import annotations

import logging

import duckdb

from shared.config import get_settings

logger = logging.getLogger(__name__)

def _table(name: str) -> str:
    path = get_settings().processed_dir / f"{name}.parquet"
    return "'" + str(path).replace("'", "''") + "'"


def _run(sql: str, params: list | None = None) -> list[dict]:
    con = duckdb.connect()
    try:
        cur = con.execute(sql, params or [])
        columns = [d[0] for d in cur.description]
        return [dict(zip(columns, row)) for row in cur.fetchall()]
    finally:
        con.close()


# ── Years ─────────────────────────────────────────────────────────────

def get_available_years() -> list[str]:
    """Years with at least one case, ascending, as text."""
    rows = _run(f"""
        SELECT DISTINCT year FROM {_table("cases")}
        WHERE year IS NOT NULL
        ORDER BY year
    """)
    return [str(r["year"]) for r in rows]


# ── Cases by year ────────────────────────────────────────────────────

_CASE_COLUMNS = """
    c.case_id, c.case_number,
    CAST(c.response_date AS VARCHAR) AS date,
    c.problem, c.latitude, c.longitude, c.is_911_call, c.primary_offense,
    p.name AS precinct, n.name AS neighborhood,
    f.force_id, fc.force_type, fc.force_type_action, f.resistance,
    s.subject_id, s.race, s.sex, s.age, s.role, s.injury
"""


def _joined_cases() -> str:
    return f"""
        FROM {_table("cases")} c
        LEFT JOIN {_table("precincts")} p ON c.precinct_id = p.precinct_id
        LEFT JOIN {_table("neighborhoods")} n ON c.neighborhood_id = n.neighborhood_id
        LEFT JOIN {_table("forces")} f ON c.force_id = f.force_id
        LEFT JOIN {_table("force_categories")} fc ON f.force_category_id = fc.force_category_id
        LEFT JOIN {_table("subjects")} s ON f.subject_id = s.subject_id
    """


def _nest(row: dict) -> dict:
    """Turn one flat joined row into the ``{"case": {..., "force": {..., "subject": ...}}}`` shape."""
    subject = None
    if row["subject_id"] is not None:
        subject = {
            "id": row["subject_id"],
            "race": row["race"],
            "sex": row["sex"],
            "age": row["age"],
            "role": row["role"],
            "injury": row["injury"],
        }

    force = None
    if row["force_id"] is not None:
        force = {
            "id": row["force_id"],
            "force_type": row["force_type"],
            "force_type_action": row["force_type_action"],
            "resistance": row["resistance"],
            "subject": subject,
        }

    return {
        "case": {
            "id": row["case_id"],
            "case_number": row["case_number"],
            "date": row["date"],
            "problem": row["problem"],
            "latitude": row["latitude"],
            "longitude": row["longitude"],
            "is_911_call": row["is_911_call"],
            "primary_offense": row["primary_offense"],
            "precinct": row["precinct"],
            "neighborhood": row["neighborhood"],
            "force": force,
        }
    }


def get_cases_by_year(year: int) -> list[dict]:
    """All cases for a year with their force action and subject nested inside."""
    rows = _run(f"""
        SELECT {_CASE_COLUMNS}
        {_joined_cases()}
        WHERE c.year = ?
        ORDER BY c.response_date, c.case_id
    """, [year])
    logger.debug("year %s: %d cases", year, len(rows))
    return [_nest(r) for r in rows]


# ── Demographics ─────────────────────────────────────────────────────

def _count_by(column: str, year: int) -> list[dict]:
    return _run(f"""
        SELECT s.{column} AS value, COUNT(*) AS count
        FROM {_table("cases")} c
        JOIN {_table("forces")} f ON c.force_id = f.force_id
        JOIN {_table("subjects")} s ON f.subject_id = s.subject_id
        WHERE c.year = ? AND s.{column} IS NOT NULL AND s.{column} != ''
        GROUP BY s.{column}
        ORDER BY count DESC, value
    """, [year])


def get_demographics(year: int) -> dict:
    """Subject race and sex counts for a year, largest first."""
    return {
        "year": year,
        "race": _count_by("race", year),
        "sex": _count_by("sex", year),
    }
