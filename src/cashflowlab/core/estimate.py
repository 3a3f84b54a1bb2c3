"""
Today's estimated balance and projection rebasing.

Stored balances are whatever the user last typed in, on whatever day they last
updated them. This module estimates both scenario balances as of today by
simulating the events since that update, then rebases the forward projection
so that day 0 sits on the estimate and no event is counted twice.

Base determination does not raise: it returns a :class:`BaseResult` so callers
can show a "never updated" state instead of failing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any

from .dates import add_days, days_between, to_date_only
from .entities import Account
from .kinds import AccountType, Certainty
from .results import DailySnapshot, Projection, build_projection
from .simulator import calculate_cashflow, calculate_starting_balance
from .validation import (
    EngineInput,
    EngineOptions,
    ResolvedOptions,
    check_projection_days,
    resolve_options,
    validate_and_filter_input,
)

logger = logging.getLogger(__name__)


class BaseKind(str, Enum):
    SINGLE = "single"
    RANGE = "range"


class BaseFailureReason(str, Enum):
    NO_CHECKING_ACCOUNTS = "no_checking_accounts"
    MISSING_TIMESTAMPS = "missing_timestamps"


@dataclass(frozen=True, slots=True)
class BalanceUpdateBase:
    """
    Calendar days on which the checking balances were last updated.

    For a ``single`` base ``start == end``; a ``range`` base spans the
    earliest to the latest update day.
    """

    kind: BaseKind
    start: date
    end: date


@dataclass(frozen=True, slots=True)
class BaseResult:
    """Outcome of base determination: either a base or a failure reason."""

    success: bool
    base: BalanceUpdateBase | None = None
    base_for_computation: date | None = None
    failure_reason: BaseFailureReason | None = None

    @classmethod
    def ok(cls, base: BalanceUpdateBase) -> BaseResult:
        # The earliest day includes strictly more history.
        return cls(success=True, base=base, base_for_computation=base.start)

    @classmethod
    def failed(cls, reason: BaseFailureReason) -> BaseResult:
        return cls(success=False, failure_reason=reason)


@dataclass(frozen=True, slots=True)
class EstimatedFlags:
    optimistic: bool = False
    pessimistic: bool = False

    @property
    def any(self) -> bool:
        return self.optimistic or self.pessimistic


@dataclass(frozen=True)
class EstimatedTodayBalance:
    """
    Best estimate of today's balances.

    Attributes:
        today: Today in the configured zone
        has_base: Whether a reliable update base was found
        base: The base reported to callers (None without one)
        base_failure_reason: Why there is no base, when ``has_base`` is False
        optimistic: Estimated optimistic balance (cents)
        pessimistic: Estimated pessimistic balance (cents)
        is_estimated: Per-scenario flags, True when events moved the balance
    """

    today: date
    has_base: bool
    optimistic: int
    pessimistic: int
    is_estimated: EstimatedFlags = EstimatedFlags()
    base: BalanceUpdateBase | None = None
    base_failure_reason: BaseFailureReason | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (dates as ISO strings)."""
        base = None
        if self.base is not None:
            base = {
                "kind": self.base.kind.value,
                "start": self.base.start.isoformat(),
                "end": self.base.end.isoformat(),
            }
        return {
            "today": self.today.isoformat(),
            "has_base": self.has_base,
            "base": base,
            "base_failure_reason": (
                self.base_failure_reason.value if self.base_failure_reason else None
            ),
            "optimistic": self.optimistic,
            "pessimistic": self.pessimistic,
            "is_estimated": {
                "optimistic": self.is_estimated.optimistic,
                "pessimistic": self.is_estimated.pessimistic,
                "any": self.is_estimated.any,
            },
        }


def get_checking_balance_update_base(
    accounts: list[Account], time_zone: str
) -> BaseResult:
    """
    Determine the update base from the checking accounts.

    Args:
        accounts: All accounts; only checking accounts are considered
        time_zone: Zone in which update timestamps are read as calendar days

    Returns:
        BaseResult; failure when there are no checking accounts or any of
        them has never been updated
    """
    checking = [account for account in accounts if account.type == AccountType.CHECKING]
    if not checking:
        return BaseResult.failed(BaseFailureReason.NO_CHECKING_ACCOUNTS)

    if any(account.balance_updated_at is None for account in checking):
        return BaseResult.failed(BaseFailureReason.MISSING_TIMESTAMPS)

    days = sorted(to_date_only(account.balance_updated_at, time_zone) for account in checking)
    earliest, latest = days[0], days[-1]
    kind = BaseKind.SINGLE if earliest == latest else BaseKind.RANGE
    return BaseResult.ok(BalanceUpdateBase(kind, earliest, latest))


def calculate_estimated_today_balance(engine_input: EngineInput) -> EstimatedTodayBalance:
    """
    Estimate today's balances from the last balance update.

    Events in ``(base, today]`` are simulated from the stored starting
    balance; the last simulated day gives the estimates. Without a base, or
    when the base is today or later, the stored balance is returned as-is
    for both scenarios with both flags False.

    Args:
        engine_input: Entities and options; ``options.now`` and
            ``options.time_zone`` define today

    Returns:
        EstimatedTodayBalance

    Raises:
        ValidationError: If the entities or options are invalid
    """
    validated = validate_and_filter_input(engine_input)
    options = validated.options
    today = options.today
    starting_balance = calculate_starting_balance(validated.accounts)

    base_result = get_checking_balance_update_base(validated.accounts, options.time_zone)
    if not base_result.success:
        logger.debug("No balance update base: %s", base_result.failure_reason.value)
        return EstimatedTodayBalance(
            today=today,
            has_base=False,
            optimistic=starting_balance,
            pessimistic=starting_balance,
            base_failure_reason=base_result.failure_reason,
        )

    interval_start = add_days(base_result.base_for_computation, 1)
    if interval_start > today:
        return EstimatedTodayBalance(
            today=today,
            has_base=True,
            optimistic=starting_balance,
            pessimistic=starting_balance,
            base=base_result.base,
        )

    interval_days = days_between(interval_start, today) + 1
    logger.debug("Estimating over %s..%s (%d days)", interval_start, today, interval_days)

    interval = calculate_cashflow(
        _with_horizon(engine_input, options, interval_start, interval_days)
    )
    last_day = interval.days[-1]

    has_expense = any(day.expense_events for day in interval.days)
    has_income = any(day.income_events for day in interval.days)
    has_guaranteed_income = any(
        event.certainty == Certainty.GUARANTEED
        for day in interval.days
        for event in day.income_events
    )

    return EstimatedTodayBalance(
        today=today,
        has_base=True,
        optimistic=last_day.optimistic_balance,
        pessimistic=last_day.pessimistic_balance,
        is_estimated=EstimatedFlags(
            optimistic=has_expense or has_income,
            pessimistic=has_expense or has_guaranteed_income,
        ),
        base=base_result.base,
    )


def rebase_projection_from_estimated_today(
    engine_input: EngineInput,
    estimated_today: EstimatedTodayBalance,
    projection_days: int | None = None,
) -> Projection:
    """
    Build a projection whose day 0 is today at the estimated balances.

    Day 0 is synthetic and carries no events; they are already part of the
    estimate. The remaining ``projection_days - 1`` days are simulated from
    tomorrow and shifted so they continue from the estimates.

    Args:
        engine_input: Entities and options
        estimated_today: Result of :func:`calculate_estimated_today_balance`
        projection_days: Horizon including today (defaults to the options)

    Returns:
        Projection starting today with ``starting_balance`` equal to the
        pessimistic estimate

    Raises:
        ValidationError: If the options or ``projection_days`` are invalid

    Example:
        ```python
        estimate = calculate_estimated_today_balance(engine_input)
        projection = rebase_projection_from_estimated_today(engine_input, estimate, 30)
        projection.days[0].pessimistic_balance == estimate.pessimistic  # True
        ```
    """
    options = resolve_options(engine_input)
    if projection_days is None:
        projection_days = options.projection_days
    check_projection_days(projection_days)
    today = estimated_today.today

    raw_starting_balance = calculate_starting_balance(engine_input.accounts)
    base_offset = estimated_today.pessimistic - raw_starting_balance
    optimistic_offset = estimated_today.optimistic - estimated_today.pessimistic
    logger.debug(
        "Rebasing from %s: base offset %d, optimistic offset %d",
        today,
        base_offset,
        optimistic_offset,
    )

    days = [
        DailySnapshot(
            date=today,
            day_offset=0,
            optimistic_balance=estimated_today.optimistic,
            pessimistic_balance=estimated_today.pessimistic,
            is_optimistic_danger=estimated_today.optimistic < 0,
            is_pessimistic_danger=estimated_today.pessimistic < 0,
        )
    ]

    forward_days = projection_days - 1
    if forward_days > 0:
        forward = calculate_cashflow(
            _with_horizon(engine_input, options, add_days(today, 1), forward_days)
        )
        for forward_day in forward.days:
            pessimistic = forward_day.pessimistic_balance + base_offset
            optimistic = forward_day.optimistic_balance + base_offset + optimistic_offset
            days.append(
                replace(
                    forward_day,
                    day_offset=len(days),
                    optimistic_balance=optimistic,
                    pessimistic_balance=pessimistic,
                    is_optimistic_danger=optimistic < 0,
                    is_pessimistic_danger=pessimistic < 0,
                )
            )

    return build_projection(estimated_today.pessimistic, days, today)


def project_from_today(
    engine_input: EngineInput,
) -> tuple[EstimatedTodayBalance, Projection]:
    """
    Estimate today's balance and project forward from it.

    Without a reliable base the projection is a plain one starting today from
    the stored balances.

    Returns:
        Tuple of (estimate, projection)
    """
    options = resolve_options(engine_input)
    # Pin the clock so both steps agree on today.
    pinned = _with_horizon(
        engine_input, options, options.start_date, options.projection_days
    )
    estimate = calculate_estimated_today_balance(pinned)

    if not estimate.has_base:
        projection = calculate_cashflow(
            _with_horizon(engine_input, options, estimate.today, options.projection_days)
        )
        return estimate, projection

    return estimate, rebase_projection_from_estimated_today(
        pinned, estimate, options.projection_days
    )


def _with_horizon(
    engine_input: EngineInput, options: ResolvedOptions, start: date, days: int
) -> EngineInput:
    # Same clock and zone, new horizon.
    return replace(
        engine_input,
        projection_days=None,
        options=EngineOptions(
            start_date=start,
            projection_days=days,
            time_zone=options.time_zone,
            now=options.now,
        ),
    )
