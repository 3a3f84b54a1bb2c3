"""
Quick demonstration of today's estimate and the KPI helpers for CashflowLab.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone

from cashflowlab import (
    Account,
    CreditCard,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    EngineInput,
    EngineOptions,
    FixedExpense,
    FutureStatement,
    RecurringIncome,
    SingleShotExpense,
    balance_vs_time,
    danger_ranges,
    health_message,
    lowest_balance,
    project_from_today,
    stale_entities,
    surplus_deficit,
)


def pretty(data: dict) -> str:
    """Return JSON formatted output."""
    return json.dumps(data, indent=2, sort_keys=True)


def build_household() -> EngineInput:
    return EngineInput(
        accounts=[
            Account(
                "main",
                "Main Checking",
                "checking",
                350_000,
                balance_updated_at="2025-03-03T19:00:00-03:00",
            ),
            Account("reserve", "Reserve", "savings", 1_500_000),
        ],
        projects=[
            RecurringIncome(
                "salary",
                "Salary",
                600_000,
                "monthly",
                "guaranteed",
                schedule=DayOfMonthSchedule(5),
            ),
            RecurringIncome(
                "market",
                "Saturday market",
                45_000,
                "biweekly",
                "probable",
                schedule=DayOfWeekSchedule(6),
            ),
        ],
        expenses=[
            FixedExpense("rent", "Rent", 280_000, due_day=8),
            FixedExpense("school", "School", 120_000, due_day=31),
        ],
        credit_cards=[CreditCard("visa", "Visa", 210_000, due_day=12)],
        single_shot_expenses=[
            SingleShotExpense("iptu", "Property tax", 180_000, date(2025, 3, 20))
        ],
        future_statements=[FutureStatement("visa", 6, 2025, 90_000)],
        options=EngineOptions(
            projection_days=60,
            time_zone="America/Sao_Paulo",
            now=datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc),
        ),
    )


def main() -> None:
    engine_input = build_household()
    estimate, projection = project_from_today(engine_input)

    print("Estimated balances for today:")
    print(pretty(estimate.to_dict()))

    print("\nHealth:", health_message(projection))
    for danger in danger_ranges(projection):
        print(f"  {danger.start} .. {danger.end}: {danger.scenario}")

    print("\nSurplus / deficit (cents):")
    print(surplus_deficit(projection))
    print("\nLowest balance:")
    print(lowest_balance(projection))

    stale = stale_entities(engine_input.accounts, engine_input.credit_cards, engine_input.options.now)
    print("\nNeeds updating:", ", ".join(entity.name for entity in stale) or "nothing")

    fig, _ = balance_vs_time(projection)
    fig.write_html("household_balance.html")
    print("\nChart written to household_balance.html")


if __name__ == "__main__":
    main()
