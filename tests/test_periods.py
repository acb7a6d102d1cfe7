"""Unit tests for the period validator."""

from decimal import Decimal

import pytest

from app.models.enums import ChargeType
from app.services.errors import RuleValidationError
from app.services.periods import Period, find_coverage_gaps, validate_periods


def period(days_from, days_to, rate="0.01", charge_type=ChargeType.PERCENTAGE, daily=True):
    return Period(days_from, days_to, charge_type, Decimal(rate), daily)


class TestValidatePeriods:

    def test_returns_sorted_copy(self):
        periods = [period(10, None), period(0, 4), period(5, 9)]
        ordered = validate_periods(periods)

        assert [p.days_from for p in ordered] == [0, 5, 10]
        # a lista original não é alterada
        assert [p.days_from for p in periods] == [10, 0, 5]

    def test_empty_list_is_rejected(self):
        with pytest.raises(RuleValidationError) as exc:
            validate_periods([])
        assert exc.value.field == "periods"

    def test_negative_start_is_rejected(self):
        with pytest.raises(RuleValidationError):
            validate_periods([period(-1, 5)])

    def test_end_before_start_is_rejected(self):
        with pytest.raises(RuleValidationError) as exc:
            validate_periods([period(5, 4)])
        assert exc.value.field == "periods.0.days_to"

    def test_single_day_period_is_valid(self):
        assert len(validate_periods([period(3, 3)])) == 1

    def test_overlap_is_rejected(self):
        with pytest.raises(RuleValidationError, match="sobrepõe"):
            validate_periods([period(0, 10), period(10, 20)])

    def test_error_messages_name_the_day_range(self):
        with pytest.raises(RuleValidationError) as exc:
            validate_periods([period(0, 10), period(10, None)])
        assert exc.value.message == (
            "Período #1 (dias 0 a 10) se sobrepõe ao Período #2 (dia 10 em diante)."
        )

    def test_touching_periods_are_valid(self):
        validate_periods([period(0, 9), period(10, 19), period(20, None)])

    def test_two_open_ended_periods_are_rejected(self):
        with pytest.raises(RuleValidationError, match="Apenas um"):
            validate_periods([period(0, None), period(10, None)])

    def test_open_ended_period_must_be_last(self):
        with pytest.raises(RuleValidationError, match="último"):
            validate_periods([period(0, None), period(10, 20)])

    def test_percentage_above_hundred_percent_is_rejected(self):
        with pytest.raises(RuleValidationError):
            validate_periods([period(0, None, rate="1.5")])

    def test_fixed_rate_above_one_is_valid(self):
        validate_periods([period(0, None, rate="350", charge_type=ChargeType.FIXED)])

    def test_negative_rate_is_rejected(self):
        with pytest.raises(RuleValidationError):
            validate_periods([period(0, None, rate="-1", charge_type=ChargeType.FIXED)])

    def test_gaps_are_allowed(self):
        ordered = validate_periods([period(0, 9), period(20, None)])
        assert len(ordered) == 2

    def test_accepted_lists_never_overlap(self):
        lists = [
            [period(0, 0), period(1, 1), period(2, None)],
            [period(5, 9), period(0, 4)],
            [period(30, None), period(0, 9), period(15, 29)],
        ]
        for periods in lists:
            ordered = validate_periods(periods)
            assert sum(1 for p in ordered if p.days_to is None) <= 1
            for prev, nxt in zip(ordered, ordered[1:]):
                assert prev.days_to is not None
                assert prev.days_to < nxt.days_from


class TestCoverageGaps:

    def test_full_coverage_has_no_gaps(self):
        assert find_coverage_gaps([period(0, 9), period(10, None)]) == []

    def test_gap_between_periods(self):
        assert find_coverage_gaps([period(0, 9), period(20, None)]) == [(10, 19)]

    def test_gap_before_first_period(self):
        assert find_coverage_gaps([period(1, None)]) == [(0, 0)]

    def test_capped_last_period_leaves_tail_uncovered(self):
        assert find_coverage_gaps([period(0, 9)]) == [(10, None)]
