"""
Results and output structures for CashflowLab.

A :class:`Projection` is the outbound value of every engine call: the full
day-by-day trajectory of both scenarios plus a :class:`ScenarioSummary` per
scenario. Summaries are pure reductions over the daily snapshots.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import pandas as pd

from .events import ExpenseEvent, IncomeEvent
from .kinds import Certainty, ExpenseSourceType, Scenario


@dataclass(frozen=True, slots=True)
class DangerDay:
    """A day on which a scenario's running balance is negative."""

    date: date
    day_offset: int
    balance: int


@dataclass(frozen=True, slots=True)
class DailySnapshot:
    """
    Financial state at the end of one calendar day.

    Attributes:
        date: Calendar day
        day_offset: 0-indexed offset from the projection start
        optimistic_balance: Running balance including all active income (cents)
        pessimistic_balance: Running balance including guaranteed income only (cents)
        income_events: Income occurring on this day (all certainties)
        expense_events: Expenses occurring on this day (same for both scenarios)
        is_optimistic_danger: ``optimistic_balance < 0``
        is_pessimistic_danger: ``pessimistic_balance < 0``
    """

    date: date
    day_offset: int
    optimistic_balance: int
    pessimistic_balance: int
    income_events: tuple[IncomeEvent, ...] = ()
    expense_events: tuple[ExpenseEvent, ...] = ()
    is_optimistic_danger: bool = False
    is_pessimistic_danger: bool = False

    def balance(self, scenario: Scenario) -> int:
        if scenario is Scenario.OPTIMISTIC:
            return self.optimistic_balance
        return self.pessimistic_balance

    def is_danger(self, scenario: Scenario) -> bool:
        if scenario is Scenario.OPTIMISTIC:
            return self.is_optimistic_danger
        return self.is_pessimistic_danger


@dataclass(frozen=True, slots=True)
class ScenarioSummary:
    """Aggregate totals and danger days for one scenario."""

    total_income: int
    total_expenses: int
    end_balance: int
    danger_days: tuple[DangerDay, ...] = ()

    @property
    def danger_day_count(self) -> int:
        return len(self.danger_days)


@dataclass(frozen=True)
class Projection:
    """
    Complete cashflow projection.

    Attributes:
        start_date: First projected day
        end_date: Last projected day
        starting_balance: Balance the first day builds on (cents)
        days: One snapshot per projected day, in order
        optimistic: Summary of the optimistic scenario
        pessimistic: Summary of the pessimistic scenario
    """

    start_date: date
    end_date: date
    starting_balance: int
    days: list[DailySnapshot] = field(default_factory=list)
    optimistic: ScenarioSummary = field(
        default_factory=lambda: ScenarioSummary(0, 0, 0)
    )
    pessimistic: ScenarioSummary = field(
        default_factory=lambda: ScenarioSummary(0, 0, 0)
    )

    def summary(self, scenario: Scenario) -> ScenarioSummary:
        if scenario is Scenario.OPTIMISTIC:
            return self.optimistic
        return self.pessimistic

    def to_frame(self) -> pd.DataFrame:
        """
        Tabular view with one row per day.

        Returns:
            DataFrame indexed by day (DatetimeIndex named ``date``) with columns
            ``day_offset``, ``optimistic_income``, ``pessimistic_income``,
            ``expenses``, ``optimistic_balance``, ``pessimistic_balance``,
            ``is_optimistic_danger`` and ``is_pessimistic_danger``.
        """
        columns = [
            "day_offset",
            "optimistic_income",
            "pessimistic_income",
            "expenses",
            "optimistic_balance",
            "pessimistic_balance",
            "is_optimistic_danger",
            "is_pessimistic_danger",
        ]
        rows = [
            {
                "day_offset": day.day_offset,
                "optimistic_income": optimistic_income(day.income_events),
                "pessimistic_income": pessimistic_income(day.income_events),
                "expenses": total_expenses(day.expense_events),
                "optimistic_balance": day.optimistic_balance,
                "pessimistic_balance": day.pessimistic_balance,
                "is_optimistic_danger": day.is_optimistic_danger,
                "is_pessimistic_danger": day.is_pessimistic_danger,
            }
            for day in self.days
        ]
        index = pd.DatetimeIndex(
            [pd.Timestamp(day.date) for day in self.days], name="date"
        )
        return pd.DataFrame(rows, index=index, columns=columns)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (dates as ISO strings)."""
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "starting_balance": self.starting_balance,
            "days": [_snapshot_to_dict(day) for day in self.days],
            "optimistic": _summary_to_dict(self.optimistic),
            "pessimistic": _summary_to_dict(self.pessimistic),
        }


def optimistic_income(events: Sequence[IncomeEvent]) -> int:
    """All income counts in the optimistic scenario."""
    return sum(event.amount for event in events)


def pessimistic_income(events: Sequence[IncomeEvent]) -> int:
    """Only guaranteed income counts in the pessimistic scenario."""
    return sum(
        event.amount for event in events if event.certainty == Certainty.GUARANTEED
    )


def total_expenses(events: Sequence[ExpenseEvent]) -> int:
    return sum(event.amount for event in events)


def scenario_income(events: Sequence[IncomeEvent], scenario: Scenario) -> int:
    if scenario is Scenario.OPTIMISTIC:
        return optimistic_income(events)
    return pessimistic_income(events)


def generate_scenario_summary(
    days: Sequence[DailySnapshot], scenario: Scenario
) -> ScenarioSummary:
    """
    Reduce daily snapshots to one scenario's summary.

    Income is scenario-specific, expenses are shared by both scenarios, the end
    balance is the last day's balance and danger days keep day order. An empty
    sequence yields zero totals, end balance 0 and no danger days.

    Args:
        days: Daily snapshots in day order
        scenario: Which scenario to summarize

    Returns:
        ScenarioSummary for ``scenario``
    """
    scenario = Scenario(scenario)
    income = 0
    expenses = 0
    danger_days: list[DangerDay] = []

    for day in days:
        income += scenario_income(day.income_events, scenario)
        expenses += total_expenses(day.expense_events)
        if day.is_danger(scenario):
            danger_days.append(DangerDay(day.date, day.day_offset, day.balance(scenario)))

    end_balance = days[-1].balance(scenario) if len(days) > 0 else 0

    return ScenarioSummary(
        total_income=income,
        total_expenses=expenses,
        end_balance=end_balance,
        danger_days=tuple(danger_days),
    )


def build_projection(
    starting_balance: int, days: Sequence[DailySnapshot], start_date: date
) -> Projection:
    """Wrap a snapshot sequence into a Projection with both summaries."""
    day_list = list(days)
    end_date = day_list[-1].date if day_list else start_date
    return Projection(
        start_date=start_date,
        end_date=end_date,
        starting_balance=starting_balance,
        days=day_list,
        optimistic=generate_scenario_summary(day_list, Scenario.OPTIMISTIC),
        pessimistic=generate_scenario_summary(day_list, Scenario.PESSIMISTIC),
    )


def _snapshot_to_dict(day: DailySnapshot) -> dict[str, Any]:
    return {
        "date": day.date.isoformat(),
        "day_offset": day.day_offset,
        "optimistic_balance": day.optimistic_balance,
        "pessimistic_balance": day.pessimistic_balance,
        "income_events": [
            {
                "source_id": event.source_id,
                "source_name": event.source_name,
                "amount": event.amount,
                "certainty": Certainty(event.certainty).value,
            }
            for event in day.income_events
        ],
        "expense_events": [
            {
                "source_id": event.source_id,
                "source_name": event.source_name,
                "source_type": ExpenseSourceType(event.source_type).value,
                "amount": event.amount,
            }
            for event in day.expense_events
        ],
        "is_optimistic_danger": day.is_optimistic_danger,
        "is_pessimistic_danger": day.is_pessimistic_danger,
    }


def _summary_to_dict(summary: ScenarioSummary) -> dict[str, Any]:
    return {
        "total_income": summary.total_income,
        "total_expenses": summary.total_expenses,
        "end_balance": summary.end_balance,
        "danger_days": [
            {
                "date": danger.date.isoformat(),
                "day_offset": danger.day_offset,
                "balance": danger.balance,
            }
            for danger in summary.danger_days
        ],
        "danger_day_count": summary.danger_day_count,
    }
