"""
Core module for CashflowLab.

This module contains the cashflow engine: entities, validation, the daily
simulator, scenario summaries and today's balance estimation.
"""

from .catalog_loader import CatalogDefinition, CatalogError, load_catalog
from .dates import (
    DEFAULT_TIME_ZONE,
    add_days,
    days_between,
    format_date_only,
    parse_date_only,
    to_date_only,
    today_in_time_zone,
)
from .entities import (
    Account,
    CreditCard,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    FixedExpense,
    FutureStatement,
    PaymentSchedule,
    RecurringIncome,
    SingleShotExpense,
    SingleShotIncome,
    TwiceMonthlySchedule,
)
from .errors import ErrorKind, FormatError, ValidationError
from .estimate import (
    BalanceUpdateBase,
    BaseFailureReason,
    BaseKind,
    BaseResult,
    EstimatedFlags,
    EstimatedTodayBalance,
    calculate_estimated_today_balance,
    get_checking_balance_update_base,
    project_from_today,
    rebase_projection_from_estimated_today,
)
from .events import ExpenseEvent, IncomeEvent
from .kinds import (
    AccountType,
    Certainty,
    ExpenseSourceType,
    Frequency,
    HealthStatus,
    Scenario,
)
from .results import (
    DailySnapshot,
    DangerDay,
    Projection,
    ScenarioSummary,
    generate_scenario_summary,
)
from .simulator import calculate_cashflow, calculate_starting_balance
from .validation import (
    DEFAULT_PROJECTION_DAYS,
    EngineInput,
    EngineOptions,
    ValidatedInput,
    validate_and_filter_input,
)

__all__ = [
    # Errors
    "ErrorKind",
    "FormatError",
    "ValidationError",
    "CatalogError",
    # Kinds
    "AccountType",
    "Certainty",
    "ExpenseSourceType",
    "Frequency",
    "HealthStatus",
    "Scenario",
    # Entities
    "Account",
    "CreditCard",
    "DayOfMonthSchedule",
    "DayOfWeekSchedule",
    "FixedExpense",
    "FutureStatement",
    "PaymentSchedule",
    "RecurringIncome",
    "SingleShotExpense",
    "SingleShotIncome",
    "TwiceMonthlySchedule",
    # Events and Results
    "IncomeEvent",
    "ExpenseEvent",
    "DailySnapshot",
    "DangerDay",
    "Projection",
    "ScenarioSummary",
    "generate_scenario_summary",
    # Dates
    "DEFAULT_TIME_ZONE",
    "add_days",
    "days_between",
    "format_date_only",
    "parse_date_only",
    "to_date_only",
    "today_in_time_zone",
    # Engine
    "DEFAULT_PROJECTION_DAYS",
    "EngineInput",
    "EngineOptions",
    "ValidatedInput",
    "validate_and_filter_input",
    "calculate_cashflow",
    "calculate_starting_balance",
    # Estimation
    "BalanceUpdateBase",
    "BaseFailureReason",
    "BaseKind",
    "BaseResult",
    "EstimatedFlags",
    "EstimatedTodayBalance",
    "calculate_estimated_today_balance",
    "get_checking_balance_update_base",
    "project_from_today",
    "rebase_projection_from_estimated_today",
    # Catalogs
    "CatalogDefinition",
    "load_catalog",
]
