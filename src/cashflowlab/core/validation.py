"""
Input validation and filtering for the cashflow engine.

Validates raw entity collections against their structural invariants and
partitions them into the subsets the simulator needs. The call is atomic: the
first violation raises :class:`ValidationError` and nothing is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, NoReturn

from .dates import (
    DEFAULT_TIME_ZONE,
    resolve_zone,
    to_date_only,
    today_in_time_zone,
    utc_now,
)
from .entities import (
    Account,
    CreditCard,
    DayOfMonthSchedule,
    DayOfWeekSchedule,
    FixedExpense,
    FutureStatement,
    RecurringIncome,
    SingleShotExpense,
    SingleShotIncome,
    TwiceMonthlySchedule,
)
from .errors import ErrorKind, FormatError, ValidationError
from .kinds import AccountType, Certainty, Frequency, all_values

DEFAULT_PROJECTION_DAYS = 30

# Schedule variant each frequency must be paired with.
_SCHEDULE_FOR_FREQUENCY = {
    Frequency.WEEKLY: DayOfWeekSchedule,
    Frequency.BIWEEKLY: DayOfWeekSchedule,
    Frequency.MONTHLY: DayOfMonthSchedule,
    Frequency.TWICE_MONTHLY: TwiceMonthlySchedule,
}


@dataclass
class EngineOptions:
    """
    Per-call engine options.

    Attributes:
        start_date: First projected day (default: today in ``time_zone``)
        projection_days: Horizon length in days, a positive integer
        time_zone: IANA zone used to resolve "today" and timestamps
        now: Current instant; read from the wall clock once when omitted
    """

    start_date: date | datetime | str | None = None
    projection_days: int = DEFAULT_PROJECTION_DAYS
    time_zone: str = DEFAULT_TIME_ZONE
    now: datetime | None = None


@dataclass
class EngineInput:
    """
    Everything one engine call reads.

    ``projection_days`` is a shorthand that takes precedence over
    ``options.projection_days`` when set.
    """

    accounts: list[Account] = field(default_factory=list)
    projects: list[RecurringIncome] = field(default_factory=list)
    expenses: list[FixedExpense] = field(default_factory=list)
    credit_cards: list[CreditCard] = field(default_factory=list)
    single_shot_expenses: list[SingleShotExpense] = field(default_factory=list)
    single_shot_income: list[SingleShotIncome] = field(default_factory=list)
    future_statements: list[FutureStatement] = field(default_factory=list)
    projection_days: int | None = None
    options: EngineOptions | None = None


@dataclass(frozen=True)
class ResolvedOptions:
    """Options after defaults are applied; ``today`` is "now" seen in ``time_zone``."""

    start_date: date
    projection_days: int
    time_zone: str
    now: datetime
    today: date


@dataclass(frozen=True)
class ValidatedInput:
    """Validated and partitioned engine input."""

    accounts: list[Account]
    active_projects: list[RecurringIncome]
    guaranteed_projects: list[RecurringIncome]
    active_expenses: list[FixedExpense]
    single_shot_expenses: list[SingleShotExpense]
    single_shot_income: list[SingleShotIncome]
    credit_cards: list[CreditCard]
    future_statements: list[FutureStatement]
    options: ResolvedOptions


def validate_and_filter_input(engine_input: EngineInput) -> ValidatedInput:
    """
    Validate every entity and split them into the subsets the simulator uses.

    Args:
        engine_input: Raw entity collections and options

    Returns:
        ValidatedInput with active-only projects/expenses, the guaranteed
        subset of active projects, all credit cards, normalized single-shot
        collections, future statements and resolved options

    Raises:
        ValidationError: On the first structural violation
    """
    options = resolve_options(engine_input)

    for account in engine_input.accounts:
        _validate_account(account, options.time_zone)

    active_projects: list[RecurringIncome] = []
    guaranteed_projects: list[RecurringIncome] = []
    for project in engine_input.projects:
        _validate_project(project)
        if project.is_active:
            active_projects.append(project)
            if project.certainty == Certainty.GUARANTEED:
                guaranteed_projects.append(project)

    active_expenses: list[FixedExpense] = []
    for expense in engine_input.expenses:
        _validate_fixed_expense(expense)
        if expense.is_active:
            active_expenses.append(expense)

    # Credit cards have no activity flag: all of them are simulated.
    for card in engine_input.credit_cards:
        _validate_credit_card(card)

    single_shot_income = [
        _normalize_single_shot_income(item, options.time_zone)
        for item in engine_input.single_shot_income
    ]
    single_shot_expenses = [
        _normalize_single_shot_expense(item, options.time_zone)
        for item in engine_input.single_shot_expenses
    ]

    return ValidatedInput(
        accounts=list(engine_input.accounts),
        active_projects=active_projects,
        guaranteed_projects=guaranteed_projects,
        active_expenses=active_expenses,
        single_shot_expenses=single_shot_expenses,
        single_shot_income=single_shot_income,
        credit_cards=list(engine_input.credit_cards),
        future_statements=list(engine_input.future_statements),
        options=options,
    )


def check_projection_days(projection_days: Any) -> None:
    """
    Reject a horizon that is not a positive integer.

    Raises:
        ValidationError: INVALID_INPUT against the "options" entity
    """
    if not _is_int(projection_days) or projection_days <= 0:
        raise ValidationError(
            f"Invalid options: projection days must be a positive integer, got {projection_days!r}",
            ErrorKind.INVALID_INPUT,
            "options",
            {"projection_days": projection_days},
        )


def resolve_options(engine_input: EngineInput) -> ResolvedOptions:
    """Apply defaults to the engine options and validate them."""
    options = engine_input.options or EngineOptions()
    projection_days = (
        engine_input.projection_days
        if engine_input.projection_days is not None
        else options.projection_days
    )
    check_projection_days(projection_days)

    try:
        resolve_zone(options.time_zone)
        now = options.now if options.now is not None else utc_now()
        today = today_in_time_zone(options.time_zone, now)
        start_date = (
            to_date_only(options.start_date, options.time_zone)
            if options.start_date is not None
            else today
        )
    except FormatError as exc:
        raise ValidationError(
            f"Invalid options: {exc}",
            ErrorKind.INVALID_INPUT,
            "options",
            {"time_zone": options.time_zone, "start_date": options.start_date},
        ) from exc

    return ResolvedOptions(
        start_date=start_date,
        projection_days=projection_days,
        time_zone=options.time_zone,
        now=now,
        today=today,
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _fail(
    entity: str,
    name: str,
    message: str,
    kind: ErrorKind = ErrorKind.INVALID_INPUT,
    **details,
) -> NoReturn:
    raise ValidationError(f"Invalid {entity} {name!r}: {message}", kind, name, details)


def _check_enum(
    entity: str,
    name: str,
    field_name: str,
    value: Any,
    enum_cls,
    kind: ErrorKind = ErrorKind.INVALID_INPUT,
) -> None:
    try:
        enum_cls(value)
    except ValueError:
        _fail(
            entity,
            name,
            f"{field_name} must be one of {all_values(enum_cls)}, got {value!r}",
            kind,
            **{field_name: value},
        )


def _check_positive_amount(entity: str, name: str, field_name: str, value: Any) -> None:
    if not _is_int(value) or value <= 0:
        _fail(
            entity,
            name,
            f"{field_name} must be a positive integer amount in cents, got {value!r}",
            **{field_name: value},
        )


def _check_day_range(
    entity: str, name: str, field_name: str, value: Any, low: int, high: int
) -> None:
    if not _is_int(value) or not low <= value <= high:
        _fail(
            entity,
            name,
            f"{field_name} must be {low}-{high}, got {value!r}",
            **{field_name: value},
        )


def _validate_account(account: Account, time_zone: str) -> None:
    _check_enum(
        "bank account",
        account.name,
        "type",
        account.type,
        AccountType,
        ErrorKind.INVALID_AMOUNT,
    )
    if not _is_int(account.balance) or account.balance < 0:
        _fail(
            "bank account",
            account.name,
            f"balance cannot be negative or fractional, got {account.balance!r}",
            ErrorKind.INVALID_AMOUNT,
            balance=account.balance,
        )
    if account.balance_updated_at is not None:
        try:
            to_date_only(account.balance_updated_at, time_zone)
        except FormatError as exc:
            raise ValidationError(
                f"Invalid bank account {account.name!r}: invalid update timestamp "
                f"{account.balance_updated_at!r}",
                ErrorKind.INVALID_AMOUNT,
                account.name,
                {"balance_updated_at": str(account.balance_updated_at)},
            ) from exc


def _validate_project(project: RecurringIncome) -> None:
    name = project.name
    _check_positive_amount("project", name, "amount", project.amount)
    _check_enum("project", name, "frequency", project.frequency, Frequency)
    _check_enum("project", name, "certainty", project.certainty, Certainty)
    frequency = Frequency(project.frequency)
    schedule = project.schedule

    if schedule is None:
        if project.payment_day is None:
            _fail("project", name, "a payment schedule or legacy payment day is required")
        _check_day_range("project", name, "payment_day", project.payment_day, 1, 31)
        if frequency is Frequency.TWICE_MONTHLY:
            _fail(
                "project",
                name,
                "twice-monthly income requires a twice-monthly schedule",
                frequency=frequency.value,
            )
        return

    expected = _SCHEDULE_FOR_FREQUENCY[frequency]
    if not isinstance(schedule, expected):
        _fail(
            "project",
            name,
            f"{frequency.value} income requires a {expected.__name__}, got {type(schedule).__name__}",
            frequency=frequency.value,
            schedule=type(schedule).__name__,
        )

    if isinstance(schedule, DayOfWeekSchedule):
        _check_day_range("project", name, "day_of_week", schedule.day_of_week, 1, 7)
    elif isinstance(schedule, DayOfMonthSchedule):
        _check_day_range("project", name, "day_of_month", schedule.day_of_month, 1, 31)
    else:
        _check_day_range("project", name, "first_day", schedule.first_day, 1, 31)
        _check_day_range("project", name, "second_day", schedule.second_day, 1, 31)
        has_first = schedule.first_amount is not None
        has_second = schedule.second_amount is not None
        if has_first != has_second:
            _fail(
                "project",
                name,
                "first_amount and second_amount must be set together",
                first_amount=schedule.first_amount,
                second_amount=schedule.second_amount,
            )
        if has_first:
            _check_positive_amount("project", name, "first_amount", schedule.first_amount)
            _check_positive_amount("project", name, "second_amount", schedule.second_amount)


def _validate_fixed_expense(expense: FixedExpense) -> None:
    _check_positive_amount("expense", expense.name, "amount", expense.amount)
    _check_day_range("expense", expense.name, "due_day", expense.due_day, 1, 31)


def _validate_credit_card(card: CreditCard) -> None:
    if not _is_int(card.statement_balance) or card.statement_balance < 0:
        _fail(
            "credit card",
            card.name,
            f"statement balance cannot be negative or fractional, got {card.statement_balance!r}",
            statement_balance=card.statement_balance,
        )
    _check_day_range("credit card", card.name, "due_day", card.due_day, 1, 31)


def _coerce_event_date(entity: str, name: str, value: Any, time_zone: str) -> date:
    try:
        return to_date_only(value, time_zone)
    except FormatError as exc:
        raise ValidationError(
            f"Invalid {entity} {name!r}: invalid date {value!r}",
            ErrorKind.INVALID_INPUT,
            name,
            {"date": str(value)},
        ) from exc


def _normalize_single_shot_income(item: SingleShotIncome, time_zone: str) -> SingleShotIncome:
    _check_positive_amount("single-shot income", item.name, "amount", item.amount)
    _check_enum("single-shot income", item.name, "certainty", item.certainty, Certainty)
    day = _coerce_event_date("single-shot income", item.name, item.date, time_zone)
    return item if day == item.date else replace(item, date=day)


def _normalize_single_shot_expense(item: SingleShotExpense, time_zone: str) -> SingleShotExpense:
    _check_positive_amount("single-shot expense", item.name, "amount", item.amount)
    day = _coerce_event_date("single-shot expense", item.name, item.date, time_zone)
    return item if day == item.date else replace(item, date=day)
