"""Pydantic models for the API responses, also used by the dashboard client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Subject(BaseModel):
    id: int
    race: str | None = None
    sex: str | None = None
    age: int | None = None
    role: str | None = None
    injury: bool | None = None


class ForceAction(BaseModel):
    id: int
    force_type: str | None = None
    force_type_action: str | None = None
    resistance: str | None = None
    subject: Subject | None = None


class Case(BaseModel):
    id: int
    case_number: str | None = None
    date: str | None = None
    problem: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_911_call: bool | None = None
    primary_offense: str | None = None
    precinct: str | None = None
    neighborhood: str | None = None
    force: ForceAction | None = None


class CaseWrapper(BaseModel):
    case: Case


class AvailableYears(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    available_years: list[str] = Field(alias="availableYears")


class DemographicRow(BaseModel):
    value: str
    count: int


class Demographics(BaseModel):
    year: int
    race: list[DemographicRow]
    sex: list[DemographicRow]
