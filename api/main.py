"""FastAPI application for Minneapolis police use-of-force data."""

from __future__ import annotations

from fastapi import FastAPI, Path

from api import queries
from api.models import AvailableYears, CaseWrapper, Demographics

API_PREFIX = "/api/v1.0"

app = FastAPI(
    title="Minneapolis Police Use of Force API",
    description="Use-of-force cases with their force action and subject demographics, by year",
    version="0.1.0",
)


@app.get("/")
def root():
    return {
        "message": "Minneapolis Police Use of Force API",
        "endpoints": [
            f"{API_PREFIX}/year",
            f"{API_PREFIX}/year/{{year}}",
            f"{API_PREFIX}/year/{{year}}/demographics",
        ],
    }


@app.get(f"{API_PREFIX}/year", response_model=AvailableYears)
def available_years():
    """Years for which case records exist."""
    return {"availableYears": queries.get_available_years()}


@app.get(f"{API_PREFIX}/year/{{year}}", response_model=list[CaseWrapper])
def cases_by_year(
    year: int = Path(..., description="Calendar year of the response date"),
):
    """Every case for a year; unknown years return an empty list."""
    return queries.get_cases_by_year(year)


@app.get(f"{API_PREFIX}/year/{{year}}/demographics", response_model=Demographics)
def demographics(
    year: int = Path(..., description="Calendar year of the response date"),
):
    """Subject race and sex counts for a year, largest first."""
    return queries.get_demographics(year)
