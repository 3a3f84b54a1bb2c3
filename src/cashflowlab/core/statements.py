"""
Future credit-card statement helpers.

A FutureStatement declares the bill a card will charge in a specific month.
The store is expected to hold at most one row per (card, month, year); the
lookup here takes the first match when that contract is broken.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import date

from .entities import FutureStatement
from .errors import ErrorKind, ValidationError

FUTURE_STATEMENT_WINDOW_MONTHS = 12
MIN_FUTURE_STATEMENT_YEAR = 2020


def _month_index(month: int, year: int) -> int:
    return year * 12 + (month - 1)


def add_months(month: int, year: int, months: int) -> tuple[int, int]:
    """Shift a (month, year) pair by ``months`` (may be negative)."""
    index = _month_index(month, year) + months
    return index % 12 + 1, index // 12


def is_distant_future_month(month: int, year: int, today: date) -> bool:
    """True when (month, year) lies after the month following ``today``."""
    next_month, next_year = add_months(today.month, today.year, 1)
    return _month_index(month, year) > _month_index(next_month, next_year)


def is_month_in_past(month: int, year: int, today: date) -> bool:
    return _month_index(month, year) < _month_index(today.month, today.year)


def is_current_month(month: int, year: int, today: date) -> bool:
    return month == today.month and year == today.year


def is_within_rolling_window(
    month: int,
    year: int,
    today: date,
    months: int = FUTURE_STATEMENT_WINDOW_MONTHS,
) -> bool:
    """True when (month, year) is one of the ``months`` months starting at today's month."""
    offset = _month_index(month, year) - _month_index(today.month, today.year)
    return 0 <= offset < months


def available_month_options(
    today: date, months: int = FUTURE_STATEMENT_WINDOW_MONTHS
) -> list[tuple[int, int]]:
    """
    The (month, year) pairs a statement may be declared for.

    Args:
        today: Current calendar day
        months: Window length, starting at the current month

    Returns:
        List of (month, year) pairs in chronological order

    Example:
        ```python
        available_month_options(date(2025, 11, 20), months=3)
        # [(11, 2025), (12, 2025), (1, 2026)]
        ```
    """
    return [add_months(today.month, today.year, i) for i in range(months)]


def format_month_year(month: int, year: int) -> str:
    """Human-readable label, e.g. ``"March/2025"``."""
    return f"{calendar.month_name[month]}/{year}"


def validate_future_statement(statement: FutureStatement) -> None:
    """
    Check a future statement's fields.

    Raises:
        ValidationError: If the card id is empty, the month is outside 1-12,
            the year is before 2020 or the amount is not a non-negative
            integer. Zero amounts are allowed.
    """
    label = statement.id or statement.credit_card_id
    if not isinstance(statement.credit_card_id, str) or not statement.credit_card_id:
        raise ValidationError(
            "Invalid future statement: credit card id is required",
            ErrorKind.INVALID_INPUT,
            label,
            {"credit_card_id": statement.credit_card_id},
        )
    checks = [
        ("target_month", statement.target_month, 1 <= _as_int(statement.target_month, 0) <= 12,
         "month must be between 1 and 12"),
        ("target_year", statement.target_year,
         _as_int(statement.target_year, 0) >= MIN_FUTURE_STATEMENT_YEAR,
         f"year must be {MIN_FUTURE_STATEMENT_YEAR} or later"),
        ("amount", statement.amount, _as_int(statement.amount, -1) >= 0,
         "amount must be a non-negative integer in cents"),
    ]
    for field_name, value, ok, message in checks:
        if not ok:
            raise ValidationError(
                f"Invalid future statement: {message}, got {value!r}",
                ErrorKind.INVALID_INPUT,
                label,
                {field_name: value},
            )


def _as_int(value, fallback: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return fallback


def find_future_statement(
    statements: Sequence[FutureStatement],
    credit_card_id: str,
    month: int,
    year: int,
) -> FutureStatement | None:
    """First statement declared for (card, month, year), or None."""
    return next(
        (
            statement
            for statement in statements
            if statement.credit_card_id == credit_card_id
            and statement.target_month == month
            and statement.target_year == year
        ),
        None,
    )
