"""
Payment frequency handlers.

Pure predicates deciding whether a payment is due on a calendar day. Anchored
frequencies (legacy weekly/biweekly by day-of-month, and biweekly by weekday)
cannot be decided from the date alone: their cycle starts at the first
matching day inside the simulated horizon. They take a ``first_occurrences``
map (source id -> day offset of the first occurrence) that is owned by one
simulation call and threaded through the whole horizon walk.
"""

from __future__ import annotations

import calendar
from datetime import date

from .entities import (
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    RecurringIncome,
    TwiceMonthlySchedule,
)
from .kinds import Frequency

WEEK_DAYS = 7
FORTNIGHT_DAYS = 14


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def effective_day(payment_day: int, day: date) -> int:
    """
    Effective payment day for the month containing ``day``.

    A configured day past the end of the month clamps to the last day, so day 31
    lands on Feb 28 (Feb 29 in leap years) and on the 30th of 30-day months.
    """
    return min(payment_day, days_in_month(day))


def is_monthly_payment_due(day: date, payment_day: int) -> bool:
    return day.day == effective_day(payment_day, day)


def is_day_of_week_payment_due(day: date, day_of_week: int) -> bool:
    """True when ``day`` falls on the ISO weekday ``day_of_week`` (1=Mon..7=Sun)."""
    return day.isoweekday() == day_of_week


def is_twice_monthly_payment_due(day: date, first_day: int, second_day: int) -> bool:
    return day.day in (effective_day(first_day, day), effective_day(second_day, day))


def twice_monthly_amount(
    schedule: TwiceMonthlySchedule, base_amount: int, day: date
) -> int:
    """
    Amount paid by a twice-monthly schedule on a due ``day``.

    Override amounts apply only when both are configured; otherwise every
    occurrence pays ``base_amount``.
    """
    if schedule.has_variable_amounts:
        if day.day == effective_day(schedule.first_day, day):
            return schedule.first_amount
        if day.day == effective_day(schedule.second_day, day):
            return schedule.second_amount
    return base_amount


def _is_interval_payment_due(
    matches: bool,
    day_offset: int,
    interval: int,
    source_id: str,
    first_occurrences: dict[str, int],
) -> bool:
    # The first matching day anchors the series; later ones count from there.
    if source_id not in first_occurrences:
        if matches:
            first_occurrences[source_id] = day_offset
            return True
        return False

    days_since_first = day_offset - first_occurrences[source_id]
    return days_since_first > 0 and days_since_first % interval == 0


def is_weekly_payment_due(
    day: date,
    day_offset: int,
    payment_day: int,
    source_id: str,
    first_occurrences: dict[str, int],
) -> bool:
    """
    Legacy weekly rule: first clamped day-of-month match, then every 7 days.

    Args:
        day: Calendar day being evaluated
        day_offset: Days since the start of the horizon (0-indexed)
        payment_day: Configured day of month (1-31)
        source_id: Key into ``first_occurrences``
        first_occurrences: Per-call anchor map, updated in place
    """
    return _is_interval_payment_due(
        is_monthly_payment_due(day, payment_day),
        day_offset,
        WEEK_DAYS,
        source_id,
        first_occurrences,
    )


def is_biweekly_payment_due(
    day: date,
    day_offset: int,
    payment_day: int,
    source_id: str,
    first_occurrences: dict[str, int],
) -> bool:
    """Legacy biweekly rule: first clamped day-of-month match, then every 14 days."""
    return _is_interval_payment_due(
        is_monthly_payment_due(day, payment_day),
        day_offset,
        FORTNIGHT_DAYS,
        source_id,
        first_occurrences,
    )


def is_biweekly_day_of_week_payment_due(
    day: date,
    day_offset: int,
    day_of_week: int,
    source_id: str,
    first_occurrences: dict[str, int],
) -> bool:
    """
    Biweekly rule anchored on a weekday.

    Due when ``day`` is the configured weekday and a non-negative multiple of
    14 days has elapsed since the source's first matching weekday.
    """
    if not is_day_of_week_payment_due(day, day_of_week):
        return False
    return _is_interval_payment_due(
        True, day_offset, FORTNIGHT_DAYS, source_id, first_occurrences
    )


def resolve_income_amount(
    income: RecurringIncome,
    day: date,
    day_offset: int,
    first_occurrences: dict[str, int],
) -> int | None:
    """
    Evaluate one recurring income on one day.

    Dispatches on the schedule variant (or on the legacy ``payment_day`` when
    the income has no schedule) and resolves the occurrence amount.

    Returns:
        The amount due in cents, or None when nothing is due on ``day``
    """
    schedule = income.schedule
    frequency = Frequency(income.frequency)

    if schedule is None:
        if income.payment_day is None:
            return None
        if frequency is Frequency.MONTHLY:
            due = is_monthly_payment_due(day, income.payment_day)
        elif frequency is Frequency.WEEKLY:
            due = is_weekly_payment_due(
                day, day_offset, income.payment_day, income.id, first_occurrences
            )
        elif frequency is Frequency.BIWEEKLY:
            due = is_biweekly_payment_due(
                day, day_offset, income.payment_day, income.id, first_occurrences
            )
        else:
            due = False
        return income.amount if due else None

    if isinstance(schedule, DayOfMonthSchedule):
        due = is_monthly_payment_due(day, schedule.day_of_month)
        return income.amount if due else None

    if isinstance(schedule, TwiceMonthlySchedule):
        if not is_twice_monthly_payment_due(day, schedule.first_day, schedule.second_day):
            return None
        return twice_monthly_amount(schedule, income.amount, day)

    if isinstance(schedule, DayOfWeekSchedule):
        if frequency is Frequency.BIWEEKLY:
            due = is_biweekly_day_of_week_payment_due(
                day, day_offset, schedule.day_of_week, income.id, first_occurrences
            )
        else:
            due = is_day_of_week_payment_due(day, schedule.day_of_week)
        return income.amount if due else None

    raise TypeError(f"Unsupported payment schedule: {type(schedule).__name__}")


def is_payment_due(
    income: RecurringIncome,
    day: date,
    day_offset: int,
    first_occurrences: dict[str, int],
) -> bool:
    """True when ``income`` pays anything on ``day``."""
    return resolve_income_amount(income, day, day_offset, first_occurrences) is not None
