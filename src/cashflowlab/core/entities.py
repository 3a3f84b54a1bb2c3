"""
Input entities consumed by the cashflow engine.

These records are owned and persisted by an external store; the engine only
reads them. All monetary amounts are integers in minor currency units (cents).

Payment schedules form a closed variant set (:data:`PaymentSchedule`): a
day-of-week schedule for weekly/biweekly income, a day-of-month schedule for
monthly income, and a twice-monthly schedule with optional per-occurrence
override amounts. The frequency of an income must match the shape of its
schedule; the validator enforces that pairing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

from .kinds import AccountType, Certainty, Frequency


@dataclass(frozen=True, slots=True)
class DayOfWeekSchedule:
    """Pay on an ISO weekday (1=Monday .. 7=Sunday)."""

    day_of_week: int


@dataclass(frozen=True, slots=True)
class DayOfMonthSchedule:
    """Pay on a day of the month (1-31), clamped to the month length."""

    day_of_month: int


@dataclass(frozen=True, slots=True)
class TwiceMonthlySchedule:
    """
    Pay on two days of the month, each clamped to the month length.

    ``first_amount`` and ``second_amount`` override the income's base amount on
    the respective day. They must be set together or not at all.
    """

    first_day: int
    second_day: int
    first_amount: int | None = None
    second_amount: int | None = None

    @property
    def has_variable_amounts(self) -> bool:
        return self.first_amount is not None and self.second_amount is not None


PaymentSchedule = Union[DayOfWeekSchedule, DayOfMonthSchedule, TwiceMonthlySchedule]


@dataclass(frozen=True, slots=True)
class Account:
    """
    Bank account.

    Attributes:
        id: Stable identifier
        name: Display name
        type: Account kind; only ``checking`` contributes to the starting balance
        balance: Last balance typed in by the user, in cents
        balance_updated_at: When ``balance`` was last updated (timestamp or ISO string)
    """

    id: str
    name: str
    type: AccountType
    balance: int
    balance_updated_at: datetime | date | str | None = None


@dataclass(frozen=True, slots=True)
class RecurringIncome:
    """
    Recurring income source (a "project").

    Attributes:
        id: Stable identifier, also the key for anchored-frequency state
        name: Display name
        amount: Base amount per occurrence in cents
        frequency: Recurrence kind
        certainty: Guaranteed income is the only income counted pessimistically
        schedule: Payment schedule whose shape matches ``frequency``
        payment_day: Legacy day-of-month anchor, used only when ``schedule`` is None
        is_active: Inactive incomes are ignored entirely
    """

    id: str
    name: str
    amount: int
    frequency: Frequency
    certainty: Certainty
    schedule: PaymentSchedule | None = None
    payment_day: int | None = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class SingleShotIncome:
    """Income that happens exactly once, on ``date``."""

    id: str
    name: str
    amount: int
    date: date
    certainty: Certainty


@dataclass(frozen=True, slots=True)
class FixedExpense:
    """Monthly expense due on ``due_day`` (1-31, clamped to the month length)."""

    id: str
    name: str
    amount: int
    due_day: int
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class SingleShotExpense:
    """Expense that happens exactly once, on ``date``."""

    id: str
    name: str
    amount: int
    date: date


@dataclass(frozen=True, slots=True)
class CreditCard:
    """
    Credit card.

    Attributes:
        id: Stable identifier, referenced by future statements
        name: Display name
        statement_balance: Amount due at the next due date, in cents
        due_day: Day of month the bill is paid (1-31, clamped)
        balance_updated_at: When ``statement_balance`` was last updated
    """

    id: str
    name: str
    statement_balance: int
    due_day: int
    balance_updated_at: datetime | date | str | None = None


@dataclass(frozen=True, slots=True)
class FutureStatement:
    """
    User-declared bill amount for one card in one future month.

    The store guarantees at most one row per (card, month, year).
    """

    credit_card_id: str
    target_month: int
    target_year: int
    amount: int
    id: str | None = None
