"""Tests for the per-year race / sex tallies."""

import pytest

from dashboard.aggregate import (
    RACE,
    SEX,
    NoData,
    Tally,
    aggregate,
    race_tally,
    sex_tally,
    tally,
)


class TestTally:
    def test_counts_in_first_seen_order(self, case_factory):
        cases = [
            case_factory(1, race="White"),
            case_factory(2, race="Black"),
            case_factory(3, race="White"),
        ]

        result = race_tally(cases)

        assert isinstance(result, Tally)
        assert result.records() == [
            {"race": "White", "count": 2},
            {"race": "Black", "count": 1},
        ]

    def test_no_force_anywhere_is_no_data_for_both(self, case_factory):
        cases = [case_factory(i, force=False) for i in range(3)]

        results = aggregate(cases)

        assert isinstance(results[RACE], NoData)
        assert isinstance(results[SEX], NoData)

    def test_missing_chain_skips_only_that_record(self, case_factory):
        """A broken record early in the list must not end the scan."""
        cases = [
            case_factory(1, force=False),
            case_factory(2, subject=False),
            case_factory(3, race="Asian", sex="Female"),
        ]

        assert race_tally(cases).counts == [("Asian", 1)]
        assert sex_tally(cases).counts == [("Female", 1)]

    def test_empty_and_missing_values_are_ignored(self, case_factory):
        cases = [
            case_factory(1, race="", sex="Male"),
            case_factory(2, race=None, sex="Male"),
        ]

        assert isinstance(race_tally(cases), NoData)
        assert sex_tally(cases).counts == [("Male", 2)]

    def test_total_matches_contributing_records(self, sample_cases):
        """Only records with force, subject, and a non-empty value are counted."""
        race = race_tally(sample_cases)
        sex = sex_tally(sample_cases)

        assert race.total == 3
        assert sex.total == 2
        assert sex.records() == [
            {"sex": "Male", "count": 1},
            {"sex": "Female", "count": 1},
        ]

    def test_no_cases_reason(self):
        result = tally([], RACE)

        assert result == NoData(RACE, "no cases")

    def test_no_values_reason(self, case_factory):
        result = tally([case_factory(1, force=False)], SEX)

        assert result == NoData(SEX, "no sex data")

    def test_unknown_dimension(self, sample_cases):
        with pytest.raises(ValueError, match="unknown tally dimension"):
            tally(sample_cases, "age")

    def test_recomputed_per_call(self, case_factory):
        first = race_tally([case_factory(1, race="White")])
        second = race_tally([case_factory(2, race="Black")])

        assert first.counts == [("White", 1)]
        assert second.counts == [("Black", 1)]

    def test_aggregate_orders_race_then_sex(self, sample_cases):
        assert list(aggregate(sample_cases)) == [RACE, SEX]
