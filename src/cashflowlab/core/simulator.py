"""
Daily cashflow simulator.

Walks the projection horizon one calendar day at a time, materializes income
and expense events per day from the validated entities, resolves credit-card
amounts, and accumulates the optimistic and pessimistic running balances.

The simulator is pure with respect to its arguments: "today" (used by the
credit-card current/next-month rule) comes from the resolved options, never
from the wall clock.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from datetime import date
from itertools import accumulate

from .dates import day_range
from .entities import (
    Account,
    CreditCard,
    FixedExpense,
    FutureStatement,
    RecurringIncome,
    SingleShotExpense,
    SingleShotIncome,
)
from .events import ExpenseEvent, IncomeEvent
from .frequencies import is_monthly_payment_due, resolve_income_amount
from .kinds import AccountType, Certainty, ExpenseSourceType
from .results import (
    DailySnapshot,
    Projection,
    build_projection,
    optimistic_income,
    pessimistic_income,
    total_expenses,
)
from .statements import is_distant_future_month
from .validation import EngineInput, ValidatedInput, validate_and_filter_input

logger = logging.getLogger(__name__)

# credit_card_amount_for_date <- create_credit_card_events <- simulate_days
# <- calculate_cashflow <- caller
_USER_STACKLEVEL = 5


def calculate_starting_balance(accounts: Sequence[Account]) -> int:
    """Sum of checking account balances; 0 when there are none."""
    return sum(
        account.balance for account in accounts if account.type == AccountType.CHECKING
    )


def credit_card_amount_for_date(
    card: CreditCard,
    future_statements: Sequence[FutureStatement],
    day: date,
    today: date,
) -> int:
    """
    Resolve the amount a card charges on a due ``day``.

    The current month, the next month and past months use the card's
    ``statement_balance`` (the bill coming due). Months further out use the
    declared FutureStatement for (card, month, year), or 0 when none is
    declared: undeclared far-future bills are never extrapolated.

    Args:
        card: The credit card
        future_statements: Declared statements for all cards
        day: Due day being resolved
        today: Real "today", not the projection start

    Returns:
        Amount in cents
    """
    if not is_distant_future_month(day.month, day.year, today):
        return card.statement_balance

    matches = [
        statement
        for statement in future_statements
        if statement.credit_card_id == card.id
        and statement.target_month == day.month
        and statement.target_year == day.year
    ]
    if len(matches) > 1:
        warnings.warn(
            f"Credit card {card.id!r} has {len(matches)} future statements for "
            f"{day.year}-{day.month:02d}; using the first one",
            stacklevel=_USER_STACKLEVEL,
        )
    return matches[0].amount if matches else 0


def create_income_events(
    day: date,
    day_offset: int,
    projects: Sequence[RecurringIncome],
    first_occurrences: dict[str, int],
) -> list[IncomeEvent]:
    """Materialize the recurring income due on ``day``."""
    events = []
    for project in projects:
        amount = resolve_income_amount(project, day, day_offset, first_occurrences)
        if amount is not None:
            events.append(
                IncomeEvent(project.id, project.name, amount, Certainty(project.certainty))
            )
    return events


def create_single_shot_income_events(
    day: date, income: Sequence[SingleShotIncome]
) -> list[IncomeEvent]:
    return [
        IncomeEvent(item.id, item.name, item.amount, Certainty(item.certainty))
        for item in income
        if item.date == day
    ]


def create_fixed_expense_events(
    day: date, expenses: Sequence[FixedExpense]
) -> list[ExpenseEvent]:
    return [
        ExpenseEvent(expense.id, expense.name, ExpenseSourceType.EXPENSE, expense.amount)
        for expense in expenses
        if is_monthly_payment_due(day, expense.due_day)
    ]


def create_single_shot_expense_events(
    day: date, expenses: Sequence[SingleShotExpense]
) -> list[ExpenseEvent]:
    return [
        ExpenseEvent(expense.id, expense.name, ExpenseSourceType.EXPENSE, expense.amount)
        for expense in expenses
        if expense.date == day
    ]


def create_credit_card_events(
    day: date,
    credit_cards: Sequence[CreditCard],
    future_statements: Sequence[FutureStatement],
    today: date,
) -> list[ExpenseEvent]:
    events = []
    for card in credit_cards:
        if is_monthly_payment_due(day, card.due_day):
            amount = credit_card_amount_for_date(card, future_statements, day, today)
            events.append(
                ExpenseEvent(card.id, card.name, ExpenseSourceType.CREDIT_CARD, amount)
            )
    return events


def simulate_days(
    validated: ValidatedInput, starting_balance: int
) -> list[DailySnapshot]:
    """
    Walk the horizon and emit one snapshot per day.

    Both running balances start at ``starting_balance``; each day adds that
    scenario's income and subtracts the day's total expenses. Pessimistic
    income is the guaranteed part of the optimistic event list. The
    guaranteed-only project subset is walked alongside with its own anchor map
    so both derivations can be cross-checked.

    Args:
        validated: Output of :func:`validate_and_filter_input`
        starting_balance: Balance before the first simulated day (cents)

    Returns:
        Snapshots in day order, ``day_offset`` 0..N-1
    """
    options = validated.options
    days = day_range(options.start_date, options.projection_days).tolist()

    # Anchored-frequency state, owned by this call only.
    optimistic_first: dict[str, int] = {}
    pessimistic_first: dict[str, int] = {}

    income_per_day: list[list[IncomeEvent]] = []
    expenses_per_day: list[list[ExpenseEvent]] = []

    for day_offset, day in enumerate(days):
        recurring = create_income_events(
            day, day_offset, validated.active_projects, optimistic_first
        )
        guaranteed = create_income_events(
            day, day_offset, validated.guaranteed_projects, pessimistic_first
        )
        if optimistic_income(guaranteed) != pessimistic_income(recurring):
            logger.warning(
                "Guaranteed income mismatch on %s: %d from guaranteed subset, %d filtered",
                day,
                optimistic_income(guaranteed),
                pessimistic_income(recurring),
            )

        income_per_day.append(
            recurring + create_single_shot_income_events(day, validated.single_shot_income)
        )
        expenses_per_day.append(
            create_fixed_expense_events(day, validated.active_expenses)
            + create_single_shot_expense_events(day, validated.single_shot_expenses)
            + create_credit_card_events(
                day, validated.credit_cards, validated.future_statements, options.today
            )
        )

    out = [total_expenses(e) for e in expenses_per_day]
    # Python ints: balances are exact cents with no overflow.
    optimistic_balances = list(
        accumulate(
            (optimistic_income(e) - o for e, o in zip(income_per_day, out)),
            initial=starting_balance,
        )
    )[1:]
    pessimistic_balances = list(
        accumulate(
            (pessimistic_income(e) - o for e, o in zip(income_per_day, out)),
            initial=starting_balance,
        )
    )[1:]

    snapshots = []
    for day_offset, day in enumerate(days):
        optimistic_balance = optimistic_balances[day_offset]
        pessimistic_balance = pessimistic_balances[day_offset]
        snapshots.append(
            DailySnapshot(
                date=day,
                day_offset=day_offset,
                optimistic_balance=optimistic_balance,
                pessimistic_balance=pessimistic_balance,
                income_events=tuple(income_per_day[day_offset]),
                expense_events=tuple(expenses_per_day[day_offset]),
                is_optimistic_danger=optimistic_balance < 0,
                is_pessimistic_danger=pessimistic_balance < 0,
            )
        )
    return snapshots


def calculate_cashflow(engine_input: EngineInput) -> Projection:
    """
    Calculate a cashflow projection over the configured horizon.

    Args:
        engine_input: Entities and options

    Returns:
        Projection with daily snapshots and both scenario summaries

    Raises:
        ValidationError: If any entity or option is invalid

    Example:
        ```python
        from datetime import date
        from cashflowlab import (
            Account, DayOfMonthSchedule, EngineInput, EngineOptions, FixedExpense,
            RecurringIncome, calculate_cashflow,
        )

        projection = calculate_cashflow(
            EngineInput(
                accounts=[Account("a1", "Checking", "checking", 500_000)],
                projects=[
                    RecurringIncome("p1", "Salary", 200_000, "monthly", "guaranteed",
                                    schedule=DayOfMonthSchedule(15)),
                ],
                expenses=[FixedExpense("e1", "Rent", 100_000, due_day=10)],
                options=EngineOptions(start_date=date(2025, 1, 1), projection_days=30),
            )
        )
        projection.optimistic.end_balance  # 600_000
        ```
    """
    validated = validate_and_filter_input(engine_input)
    starting_balance = calculate_starting_balance(validated.accounts)
    options = validated.options

    logger.debug(
        "Simulating %d days from %s (%d active projects, %d expenses, %d cards)",
        options.projection_days,
        options.start_date,
        len(validated.active_projects),
        len(validated.active_expenses) + len(validated.single_shot_expenses),
        len(validated.credit_cards),
    )

    days = simulate_days(validated, starting_balance)
    return build_projection(starting_balance, days, options.start_date)
