"""Validate the processed use-of-force tables."""

from __future__ import annotations

from pathlib import Path

import duckdb

from pipeline.transform import TABLES
from shared.config import get_settings

MPLS_LAT_MIN, MPLS_LAT_MAX = 44.88, 45.06
MPLS_LNG_MIN, MPLS_LNG_MAX = -93.34, -93.19

# (child table, column, parent table, parent key)
FOREIGN_KEYS = [
    ("cases", "force_id", "forces", "force_id"),
    ("cases", "precinct_id", "precincts", "precinct_id"),
    ("cases", "neighborhood_id", "neighborhoods", "neighborhood_id"),
    ("forces", "subject_id", "subjects", "subject_id"),
    ("forces", "force_category_id", "force_categories", "force_category_id"),
    ("neighborhoods", "precinct_id", "precincts", "precinct_id"),
]

# Year-over-year swings are only flagged once a year has this many cases
YOY_MIN_CASES = 100


def _q(sql: str) -> list:
    con = duckdb.connect()
    try:
        return con.execute(sql).fetchall()
    finally:
        con.close()


def _scalar(sql: str):
    rows = _q(sql)
    return rows[0][0] if rows else None


def _header(num: int, title: str) -> None:
    print(f"\n{'─' * 64}")
    print(f"  Check {num}: {title}")
    print(f"{'─' * 64}")


def validate(out_dir: Path | None = None) -> int:
    """Run all validation checks. Returns count of issues found."""
    out_dir = out_dir or get_settings().processed_dir
    issues = 0
    paths = {name: out_dir / f"{name}.parquet" for name in TABLES}
    cases = paths["cases"]
    subjects = paths["subjects"]

    # ── Check 1: File existence ──
    _header(1, "File existence")
    for name, path in paths.items():
        if path.exists():
            size_mb = path.stat().st_size / (1 << 20)
            print(f"  PASS  {name}: {size_mb:.1f} MB")
        else:
            print(f"  FAIL  {name}: NOT FOUND")
            issues += 1

    # ── Check 2: Case row count ──
    _header(2, "Case row count")
    if cases.exists():
        count = _scalar(f"SELECT COUNT(*) FROM '{cases}'")
        if count:
            print(f"  PASS  {count:,} cases")
        else:
            print("  FAIL  no cases")
            issues += 1

    # ── Check 3: Date range ──
    _header(3, "Response date range")
    if cases.exists():
        min_yr = _scalar(f"SELECT MIN(year) FROM '{cases}'")
        max_yr = _scalar(f"SELECT MAX(year) FROM '{cases}'")
        undated = _scalar(f"SELECT COUNT(*) FROM '{cases}' WHERE year IS NULL")
        if min_yr is not None:
            print(f"  PASS  {min_yr} - {max_yr}")
        else:
            print("  FAIL  no dated cases")
            issues += 1
        if undated:
            print(f"  WARN  {undated:,} cases without a parseable response date")
            issues += 1

    # ── Check 4: Geographic bounds ──
    _header(4, "Geographic bounds (Minneapolis)")
    if cases.exists():
        outliers = _scalar(f"""
            SELECT COUNT(*) FROM '{cases}'
            WHERE latitude IS NOT NULL AND (
                latitude < {MPLS_LAT_MIN} OR latitude > {MPLS_LAT_MAX}
                OR longitude < {MPLS_LNG_MIN} OR longitude > {MPLS_LNG_MAX}
            )
        """)
        total_geo = _scalar(f"SELECT COUNT(*) FROM '{cases}' WHERE latitude IS NOT NULL")
        pct = (outliers / total_geo * 100) if total_geo else 0
        if pct < 1:
            print(f"  PASS  {outliers:,} outliers ({pct:.2f}% of geo records)")
        else:
            print(f"  WARN  {outliers:,} outliers ({pct:.2f}%)")
            issues += 1

    # ── Check 5: Foreign keys ──
    _header(5, "Foreign key orphans")
    for child, col, parent, key in FOREIGN_KEYS:
        if not (paths[child].exists() and paths[parent].exists()):
            continue
        orphans = _scalar(f"""
            SELECT COUNT(*) FROM '{paths[child]}' c
            WHERE c.{col} IS NOT NULL
              AND c.{col} NOT IN (SELECT {key} FROM '{paths[parent]}')
        """)
        if orphans == 0:
            print(f"  PASS  {child}.{col} -> {parent}")
        else:
            print(f"  FAIL  {child}.{col}: {orphans:,} orphans")
            issues += 1

    # ── Check 6: Duplicate case ids ──
    _header(6, "Case deduplication")
    if cases.exists():
        dupes = _scalar(f"""
            SELECT COUNT(*) FROM (
                SELECT case_id FROM '{cases}'
                GROUP BY case_id HAVING COUNT(*) > 1
            )
        """)
        if dupes == 0:
            print("  PASS  No duplicate case_id")
        else:
            print(f"  FAIL  {dupes:,} duplicate case ids")
            issues += 1

    # ── Check 7: Subject demographics ──
    _header(7, "Subject race / sex completeness")
    if subjects.exists():
        total = _scalar(f"SELECT COUNT(*) FROM '{subjects}'")
        for col in ["race", "sex"]:
            nulls = _scalar(f"SELECT COUNT(*) FROM '{subjects}' WHERE {col} IS NULL")
            pct = (nulls / total * 100) if total else 0
            print(f"  INFO  {col}: {nulls:,} nulls ({pct:.1f}%)")

    # ── Check 8: Year-over-year anomalies (>50% change) ──
    _header(8, "Year-over-year case volume anomalies")
    if cases.exists():
        rows = _q(f"""
            SELECT year, COUNT(*) AS n FROM '{cases}'
            WHERE year IS NOT NULL
            GROUP BY year ORDER BY year
        """)
        for i in range(1, len(rows)):
            prev_yr, prev_n = rows[i - 1]
            curr_yr, curr_n = rows[i]
            change = (curr_n - prev_n) / prev_n * 100 if prev_n else 0
            flagged = abs(change) > 50 and prev_n >= YOY_MIN_CASES
            if flagged:
                issues += 1
            status = "WARN" if flagged else "PASS"
            print(f"  {status}  {prev_yr}->{curr_yr}: {change:+.1f}% ({prev_n:,} -> {curr_n:,})")

    # ── Summary ──
    print(f"\n{'=' * 64}")
    if issues == 0:
        print("  All checks passed!")
    else:
        print(f"  {issues} issue(s) found")
    print(f"{'=' * 64}")

    return issues


if __name__ == "__main__":
    validate()
