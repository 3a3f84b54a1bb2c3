"""
CashflowLab - Day-by-day household cashflow projections

CashflowLab projects a household's checking balance day by day over a short
horizon, under two scenarios at once: an optimistic one that counts every
active income and a pessimistic one that counts guaranteed income only.
Days on which a scenario's balance goes negative are flagged as danger days.

Key Features:
- **Two scenarios per run**: optimistic and pessimistic balances side by side
- **Calendar-day semantics**: every date is a day in an explicit IANA time zone
- **Flexible schedules**: weekly, biweekly, twice-monthly and monthly income
- **Credit cards**: live statement balance for the next bills, declared
  future statements beyond that
- **Today's estimate**: bridges stale stored balances to today without
  counting any event twice
- **Tabular and chart views**: pandas frames and Plotly charts

Quick Start:
    ```python
    from datetime import date
    from cashflowlab import (
        Account, DayOfMonthSchedule, EngineInput, EngineOptions, FixedExpense,
        RecurringIncome, calculate_cashflow,
    )

    projection = calculate_cashflow(
        EngineInput(
            accounts=[Account("main", "Main", "checking", 500_000)],
            projects=[
                RecurringIncome("salary", "Salary", 200_000, "monthly", "guaranteed",
                                schedule=DayOfMonthSchedule(15)),
            ],
            expenses=[FixedExpense("rent", "Rent", 100_000, due_day=10)],
            options=EngineOptions(start_date=date(2025, 1, 1), projection_days=30),
        )
    )
    projection.pessimistic.end_balance  # 600_000 cents
    ```

Amounts are integer cents throughout.
"""

# Version information
__version__ = "0.1.0"
__author__ = "CashflowLab Team"
__description__ = "Day-by-day household cashflow projections"

from .charts import balance_vs_time, daily_flows, save_chart
from .core import (
    Account,
    AccountType,
    CatalogError,
    Certainty,
    CreditCard,
    DailySnapshot,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    EngineInput,
    EngineOptions,
    ErrorKind,
    EstimatedTodayBalance,
    FixedExpense,
    FormatError,
    Frequency,
    FutureStatement,
    HealthStatus,
    Projection,
    RecurringIncome,
    Scenario,
    ScenarioSummary,
    SingleShotExpense,
    SingleShotIncome,
    TwiceMonthlySchedule,
    ValidationError,
    calculate_cashflow,
    calculate_estimated_today_balance,
    calculate_starting_balance,
    generate_scenario_summary,
    get_checking_balance_update_base,
    load_catalog,
    project_from_today,
    rebase_projection_from_estimated_today,
    validate_and_filter_input,
)
from .kpi import (
    danger_ranges,
    days_since_update,
    health_message,
    health_status,
    is_stale,
    lowest_balance,
    stale_entities,
    surplus_deficit,
)

# Define what gets imported with "from cashflowlab import *"
__all__ = [
    # Entities
    "Account",
    "CreditCard",
    "DayOfMonthSchedule",
    "DayOfWeekSchedule",
    "FixedExpense",
    "FutureStatement",
    "RecurringIncome",
    "SingleShotExpense",
    "SingleShotIncome",
    "TwiceMonthlySchedule",
    # Kinds
    "AccountType",
    "Certainty",
    "Frequency",
    "HealthStatus",
    "Scenario",
    # Errors
    "CatalogError",
    "ErrorKind",
    "FormatError",
    "ValidationError",
    # Engine
    "EngineInput",
    "EngineOptions",
    "DailySnapshot",
    "Projection",
    "ScenarioSummary",
    "EstimatedTodayBalance",
    "calculate_cashflow",
    "calculate_starting_balance",
    "calculate_estimated_today_balance",
    "generate_scenario_summary",
    "get_checking_balance_update_base",
    "project_from_today",
    "rebase_projection_from_estimated_today",
    "validate_and_filter_input",
    "load_catalog",
    # KPI utilities
    "danger_ranges",
    "days_since_update",
    "health_message",
    "health_status",
    "is_stale",
    "lowest_balance",
    "stale_entities",
    "surplus_deficit",
    # Charts
    "balance_vs_time",
    "daily_flows",
    "save_chart",
]
