"""
Tests for payment frequency predicates and amount resolution.
"""

from datetime import date, timedelta

import pytest
from cashflowlab.core.entities import (
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    RecurringIncome,
    TwiceMonthlySchedule,
)
from cashflowlab.core.frequencies import (
    effective_day,
    is_biweekly_day_of_week_payment_due,
    is_biweekly_payment_due,
    is_day_of_week_payment_due,
    is_monthly_payment_due,
    is_payment_due,
    is_twice_monthly_payment_due,
    is_weekly_payment_due,
    resolve_income_amount,
    twice_monthly_amount,
)


def _walk(start: date, days: int):
    for offset in range(days):
        yield offset, start + timedelta(days=offset)


class TestMonthEndClamping:
    """A configured day past the end of the month lands on the last day."""

    def test_day_31_in_february_non_leap(self):
        assert effective_day(31, date(2025, 2, 1)) == 28
        assert is_monthly_payment_due(date(2025, 2, 28), 31)
        assert not is_monthly_payment_due(date(2025, 2, 27), 31)

    def test_day_31_in_february_leap(self):
        assert is_monthly_payment_due(date(2024, 2, 29), 31)
        assert not is_monthly_payment_due(date(2024, 2, 28), 31)

    def test_day_31_in_30_day_month(self):
        assert is_monthly_payment_due(date(2025, 4, 30), 31)
        assert is_monthly_payment_due(date(2025, 5, 31), 31)
        assert not is_monthly_payment_due(date(2025, 5, 30), 31)

    def test_day_30_in_february(self):
        assert is_monthly_payment_due(date(2025, 2, 28), 30)

    def test_day_within_month_is_unchanged(self):
        assert effective_day(15, date(2025, 2, 1)) == 15


class TestWeekdayRules:
    def test_day_of_week_uses_iso_numbering(self):
        # 2025-01-06 is a Monday, 2025-01-12 a Sunday
        assert is_day_of_week_payment_due(date(2025, 1, 6), 1)
        assert is_day_of_week_payment_due(date(2025, 1, 12), 7)
        assert not is_day_of_week_payment_due(date(2025, 1, 6), 7)

    def test_biweekly_day_of_week_anchors_on_first_match(self):
        """Fridays from 2025-01-01: Jan 3, 17 and 31 pay; Jan 10 and 24 don't."""
        first: dict[str, int] = {}
        paid = [
            day
            for offset, day in _walk(date(2025, 1, 1), 31)
            if is_biweekly_day_of_week_payment_due(day, offset, 5, "p1", first)
        ]
        assert paid == [date(2025, 1, 3), date(2025, 1, 17), date(2025, 1, 31)]
        assert first == {"p1": 2}

    def test_anchor_maps_are_per_source(self):
        first: dict[str, int] = {}
        start = date(2025, 1, 1)
        is_biweekly_day_of_week_payment_due(start + timedelta(days=2), 2, 5, "a", first)
        is_biweekly_day_of_week_payment_due(start + timedelta(days=5), 5, 1, "b", first)
        assert first == {"a": 2, "b": 5}


class TestLegacyIntervalRules:
    """Legacy weekly/biweekly anchor on the first clamped day-of-month match."""

    def test_weekly_from_payment_day(self):
        first: dict[str, int] = {}
        paid = [
            day
            for offset, day in _walk(date(2025, 1, 1), 31)
            if is_weekly_payment_due(day, offset, 5, "w", first)
        ]
        assert paid == [
            date(2025, 1, 5),
            date(2025, 1, 12),
            date(2025, 1, 19),
            date(2025, 1, 26),
        ]

    def test_biweekly_from_payment_day(self):
        first: dict[str, int] = {}
        paid = [
            day
            for offset, day in _walk(date(2025, 1, 1), 40)
            if is_biweekly_payment_due(day, offset, 10, "b", first)
        ]
        assert paid == [date(2025, 1, 10), date(2025, 1, 24), date(2025, 2, 7)]

    def test_no_anchor_before_first_match(self):
        first: dict[str, int] = {}
        assert not is_weekly_payment_due(date(2025, 1, 1), 0, 20, "w", first)
        assert first == {}


class TestTwiceMonthly:
    def test_due_on_both_clamped_days(self):
        assert is_twice_monthly_payment_due(date(2025, 2, 15), 15, 31)
        assert is_twice_monthly_payment_due(date(2025, 2, 28), 15, 31)
        assert not is_twice_monthly_payment_due(date(2025, 2, 16), 15, 31)

    def test_override_amounts(self):
        schedule = TwiceMonthlySchedule(5, 20, first_amount=300_000, second_amount=150_000)
        assert twice_monthly_amount(schedule, 100_000, date(2025, 1, 5)) == 300_000
        assert twice_monthly_amount(schedule, 100_000, date(2025, 1, 20)) == 150_000

    def test_base_amount_without_overrides(self):
        schedule = TwiceMonthlySchedule(5, 20)
        assert twice_monthly_amount(schedule, 100_000, date(2025, 1, 5)) == 100_000
        assert twice_monthly_amount(schedule, 100_000, date(2025, 1, 20)) == 100_000

    def test_single_override_falls_back_to_base(self):
        schedule = TwiceMonthlySchedule(5, 20, first_amount=300_000)
        assert not schedule.has_variable_amounts
        assert twice_monthly_amount(schedule, 100_000, date(2025, 1, 5)) == 100_000


class TestResolveIncomeAmount:
    def _income(self, **kwargs):
        defaults = dict(
            id="p1",
            name="Income",
            amount=100_000,
            frequency="monthly",
            certainty="guaranteed",
        )
        defaults.update(kwargs)
        return RecurringIncome(**defaults)

    def test_monthly_schedule(self):
        income = self._income(schedule=DayOfMonthSchedule(15))
        assert resolve_income_amount(income, date(2025, 1, 15), 14, {}) == 100_000
        assert resolve_income_amount(income, date(2025, 1, 14), 13, {}) is None

    def test_weekly_schedule_matches_every_weekday(self):
        income = self._income(frequency="weekly", schedule=DayOfWeekSchedule(3))
        due = [
            day
            for offset, day in _walk(date(2025, 1, 1), 14)
            if is_payment_due(income, day, offset, {})
        ]
        assert due == [date(2025, 1, 1), date(2025, 1, 8)]

    def test_biweekly_schedule_is_anchored(self):
        income = self._income(frequency="biweekly", schedule=DayOfWeekSchedule(3))
        first: dict[str, int] = {}
        due = [
            day
            for offset, day in _walk(date(2025, 1, 1), 29)
            if is_payment_due(income, day, offset, first)
        ]
        assert due == [date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 29)]

    def test_twice_monthly_schedule(self):
        income = self._income(
            frequency="twice-monthly",
            schedule=TwiceMonthlySchedule(1, 15, first_amount=70_000, second_amount=30_000),
        )
        assert resolve_income_amount(income, date(2025, 1, 1), 0, {}) == 70_000
        assert resolve_income_amount(income, date(2025, 1, 15), 14, {}) == 30_000
        assert resolve_income_amount(income, date(2025, 1, 2), 1, {}) is None

    def test_legacy_monthly_payment_day(self):
        income = self._income(payment_day=31)
        assert resolve_income_amount(income, date(2025, 4, 30), 0, {}) == 100_000

    def test_unknown_schedule_type(self):
        income = self._income(schedule=object())
        with pytest.raises(TypeError, match="Unsupported payment schedule"):
            resolve_income_amount(income, date(2025, 1, 1), 0, {})
