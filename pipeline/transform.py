"""Transform the raw use-of-force CSV into the relational Parquet tables.

Tables written to data/processed:

    precincts(precinct_id, name)
    neighborhoods(neighborhood_id, name, precinct_id)
    force_categories(force_category_id, force_type, force_type_action)
    subjects(subject_id, race, sex, age, role, injury)
    forces(force_id, subject_id, force_category_id, resistance)
    cases(case_id, case_number, response_date, year, problem, is_911_call,
          primary_offense, latitude, longitude, precinct_id, neighborhood_id, force_id)

Each raw row is one case. Its force action shares the case id and exists only
when a force type was recorded; its subject shares the id too and exists only
when any demographic was recorded.
"""

from __future__ import annotations

from pathlib import Path

import duckdb

from pipeline.ingest import RAW_FILE_NAME
from shared.config import get_settings

TABLES = (
    "precincts",
    "neighborhoods",
    "force_categories",
    "subjects",
    "forces",
    "cases",
)


def _export(con: duckdb.DuckDBPyConnection, sql: str, path: Path) -> int:
    """Run COPY ... TO parquet ZSTD. Returns row count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    con.execute(f"COPY ({sql}) TO '{path}' (FORMAT PARQUET, COMPRESSION ZSTD)")
    count = con.execute(f"SELECT COUNT(*) FROM '{path}'").fetchone()[0]
    size_mb = path.stat().st_size / (1 << 20)
    print(f"    {path.name}: {count:,} rows ({size_mb:.1f} MB)")
    return count


def _yes_no(col: str) -> str:
    return f"CASE UPPER(TRIM({col})) WHEN 'YES' THEN true WHEN 'NO' THEN false END"


def _text(col: str) -> str:
    return f"NULLIF(TRIM({col}), '')"


# ── Stage: raw CSV -> typed rows ─────────────────────────────────────────

def _stage(con: duckdb.DuckDBPyConnection, src: Path) -> None:
    print(f"\n  Staging {src.name}")

    con.execute(f"""
        CREATE OR REPLACE TABLE raw_uof AS
        SELECT * FROM read_csv('{src}', header=true, all_varchar=true)
    """)

    # ResponseDate comes as "2016/01/01 00:51:00+00" or ISO "2016-01-01T00:51:00Z"
    con.execute(f"""
        CREATE OR REPLACE TABLE staged AS
        SELECT * EXCLUDE (_rn) FROM (
            SELECT
                TRY_CAST(PoliceUseOfForceID AS BIGINT) AS case_id,
                {_text("CaseNumber")} AS case_number,
                TRY_CAST(REPLACE(LEFT(ResponseDate, 19), '/', '-') AS TIMESTAMP) AS response_date,
                {_text("Problem")} AS problem,
                {_yes_no("Is911Call")} AS is_911_call,
                {_text("PrimaryOffense")} AS primary_offense,
                {_yes_no("SubjectInjury")} AS injury,
                {_text("SubjectRole")} AS role,
                {_text("ForceType")} AS force_type,
                {_text("ForceTypeAction")} AS force_type_action,
                {_text("Race")} AS race,
                {_text("Sex")} AS sex,
                TRY_CAST(EventAge AS INT) AS age,
                {_text("TypeOfResistance")} AS resistance,
                {_text("Precinct")} AS precinct,
                {_text("Neighborhood")} AS neighborhood,
                TRY_CAST(CenterLatitude AS DOUBLE) AS latitude,
                TRY_CAST(CenterLongitude AS DOUBLE) AS longitude,
                ROW_NUMBER() OVER (
                    PARTITION BY TRY_CAST(PoliceUseOfForceID AS BIGINT)
                    ORDER BY TRY_CAST(REPLACE(LEFT(DateAdded, 19), '/', '-') AS TIMESTAMP) DESC NULLS LAST
                ) AS _rn
            FROM raw_uof
            WHERE TRY_CAST(PoliceUseOfForceID AS BIGINT) IS NOT NULL
        )
        WHERE _rn = 1
    """)
    count = con.execute("SELECT COUNT(*) FROM staged").fetchone()[0]
    print(f"    -> {count:,} deduplicated use-of-force records")


# ── Lookup tables ────────────────────────────────────────────────────────

def _build_lookups(con: duckdb.DuckDBPyConnection) -> None:
    con.execute("""
        CREATE OR REPLACE TABLE precincts AS
        SELECT ROW_NUMBER() OVER (ORDER BY precinct) AS precinct_id,
               precinct AS name
        FROM (SELECT DISTINCT precinct FROM staged WHERE precinct IS NOT NULL)
    """)

    # A neighborhood belongs to the precinct most of its cases were filed under
    con.execute("""
        CREATE OR REPLACE TABLE neighborhoods AS
        SELECT ROW_NUMBER() OVER (ORDER BY n.neighborhood) AS neighborhood_id,
               n.neighborhood AS name,
               p.precinct_id
        FROM (
            SELECT neighborhood, MODE(precinct) AS precinct
            FROM staged
            WHERE neighborhood IS NOT NULL
            GROUP BY neighborhood
        ) n
        LEFT JOIN precincts p ON n.precinct = p.name
    """)

    con.execute("""
        CREATE OR REPLACE TABLE force_categories AS
        SELECT ROW_NUMBER() OVER (ORDER BY force_type, force_type_action NULLS FIRST)
                   AS force_category_id,
               force_type, force_type_action
        FROM (
            SELECT DISTINCT force_type, force_type_action
            FROM staged
            WHERE force_type IS NOT NULL
        )
    """)


# ── Entity tables ────────────────────────────────────────────────────────

def _build_entities(con: duckdb.DuckDBPyConnection) -> None:
    con.execute("""
        CREATE OR REPLACE TABLE subjects AS
        SELECT case_id AS subject_id, race, sex, age, role, injury
        FROM staged
        WHERE race IS NOT NULL OR sex IS NOT NULL OR age IS NOT NULL
    """)

    con.execute("""
        CREATE OR REPLACE TABLE forces AS
        SELECT s.case_id AS force_id,
               sub.subject_id,
               fc.force_category_id,
               s.resistance
        FROM staged s
        LEFT JOIN subjects sub ON s.case_id = sub.subject_id
        LEFT JOIN force_categories fc
               ON s.force_type = fc.force_type
              AND s.force_type_action IS NOT DISTINCT FROM fc.force_type_action
        WHERE s.force_type IS NOT NULL
    """)

    con.execute("""
        CREATE OR REPLACE TABLE cases AS
        SELECT s.case_id, s.case_number, s.response_date,
               YEAR(s.response_date) AS year,
               s.problem, s.is_911_call, s.primary_offense,
               s.latitude, s.longitude,
               p.precinct_id, n.neighborhood_id,
               f.force_id
        FROM staged s
        LEFT JOIN precincts p ON s.precinct = p.name
        LEFT JOIN neighborhoods n ON s.neighborhood = n.name
        LEFT JOIN forces f ON s.case_id = f.force_id
        ORDER BY s.response_date, s.case_id
    """)


def transform(raw_path: Path | None = None, out_dir: Path | None = None) -> dict[str, int]:
    """Build every table. Returns row counts by table name."""
    settings = get_settings()
    src = raw_path or settings.raw_dir / RAW_FILE_NAME
    out_dir = out_dir or settings.processed_dir

    con = duckdb.connect()
    try:
        _stage(con, src)
        _build_lookups(con)
        _build_entities(con)

        print("\n  Writing tables:")
        return {
            name: _export(con, f"SELECT * FROM {name}", out_dir / f"{name}.parquet")
            for name in TABLES
        }
    finally:
        con.close()


if __name__ == "__main__":
    transform()
