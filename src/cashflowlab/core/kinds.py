"""
CashflowLab kind constants.

String-valued enums for every closed vocabulary the engine understands. Because
they subclass ``str``, raw strings coming from catalogs or a persistence layer
compare equal to the enum members without conversion.
"""

from __future__ import annotations

from enum import Enum


class AccountType(str, Enum):
    """Bank account kinds. Only checking accounts feed the starting balance."""

    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"


class Certainty(str, Enum):
    """How sure the household is that an income will actually arrive."""

    GUARANTEED = "guaranteed"
    PROBABLE = "probable"
    UNCERTAIN = "uncertain"


class Frequency(str, Enum):
    """Recurring income frequencies."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    TWICE_MONTHLY = "twice-monthly"
    MONTHLY = "monthly"


class ExpenseSourceType(str, Enum):
    """Origin of a materialized expense event."""

    EXPENSE = "expense"
    CREDIT_CARD = "credit_card"


class Scenario(str, Enum):
    """The two parallel projections produced for every run."""

    OPTIMISTIC = "optimistic"
    PESSIMISTIC = "pessimistic"


class HealthStatus(str, Enum):
    """Coarse projection health derived from danger-day counts."""

    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"


def all_values(enum_cls: type[Enum]) -> list[str]:
    """Enumerate the raw string values of a kind enum (for messages and docs)."""
    return [member.value for member in enum_cls]
