"""Per-year demographic tallies for the pie charts.

A tally walks ``case -> force -> subject`` for every record. A record whose
force action or subject is missing, or whose value for the dimension is empty,
is skipped on its own; the scan always continues with the next record.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from api.models import CaseWrapper, Subject

RACE = "race"
SEX = "sex"
DIMENSIONS = (RACE, SEX)


@dataclass(frozen=True)
class Tally:
    dimension: str
    counts: list[tuple[str, int]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(n for _, n in self.counts)

    def records(self) -> list[dict]:
        """Chart rows, e.g. ``[{"race": "White", "count": 2}, ...]``."""
        return [{self.dimension: value, "count": n} for value, n in self.counts]


@dataclass(frozen=True)
class NoData:
    dimension: str
    reason: str


TallyResult = Tally | NoData


def _subject(wrapper: CaseWrapper) -> Subject | None:
    force = wrapper.case.force
    if force is None:
        return None
    return force.subject


def tally(cases: Iterable[CaseWrapper], dimension: str) -> TallyResult:
    """Count subjects by ``dimension`` in first-seen order."""
    if dimension not in DIMENSIONS:
        raise ValueError(f"unknown tally dimension: {dimension!r}")

    counts: Counter[str] = Counter()
    seen = 0
    for wrapper in cases:
        seen += 1
        subject = _subject(wrapper)
        if subject is None:
            continue
        value = getattr(subject, dimension)
        if not value:
            continue
        counts[value] += 1

    if not counts:
        reason = "no cases" if seen == 0 else f"no {dimension} data"
        return NoData(dimension, reason)
    # Counter keeps insertion order, which is first-seen order here
    return Tally(dimension, list(counts.items()))


def race_tally(cases: Iterable[CaseWrapper]) -> TallyResult:
    return tally(cases, RACE)


def sex_tally(cases: Iterable[CaseWrapper]) -> TallyResult:
    return tally(cases, SEX)


def aggregate(cases: list[CaseWrapper]) -> dict[str, TallyResult]:
    """Fresh tallies for every chart dimension, race first."""
    return {dimension: tally(cases, dimension) for dimension in DIMENSIONS}
