"""
KPI and health utilities for cashflow projections.

Standalone functions deriving indicators from a :class:`Projection` (or its
tabular view from :meth:`Projection.to_frame`) and from entity update
timestamps. None of them mutate their inputs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import NamedTuple

import numpy as np
import pandas as pd

from .core.dates import utc_now
from .core.entities import Account, CreditCard
from .core.kinds import HealthStatus, Scenario
from .core.results import Projection

STALE_THRESHOLD_DAYS = 30


class DangerRange(NamedTuple):
    """Consecutive danger days sharing the same scenario tag."""

    start: date
    end: date
    scenario: str  # "optimistic", "pessimistic" or "both"


@dataclass(frozen=True, slots=True)
class StaleEntity:
    id: str
    name: str
    type: str  # "account" or "card"


def health_status(projection: Projection) -> HealthStatus:
    """
    Overall health of a projection.

    ``danger`` when even the optimistic scenario goes negative, ``warning``
    when only the pessimistic one does, ``good`` otherwise.
    """
    if projection.optimistic.danger_day_count > 0:
        return HealthStatus.DANGER
    if projection.pessimistic.danger_day_count > 0:
        return HealthStatus.WARNING
    return HealthStatus.GOOD


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def health_message(projection: Projection | None) -> str:
    """Human-readable text for :func:`health_status`."""
    if projection is None:
        return "No data available"
    status = health_status(projection)
    if status is HealthStatus.DANGER:
        count = projection.optimistic.danger_day_count
        return f"{_plural(count, 'danger day')} even in best-case scenario"
    if status is HealthStatus.WARNING:
        count = projection.pessimistic.danger_day_count
        return f"{_plural(count, 'danger day')} in worst-case scenario"
    return "No issues detected"


def danger_ranges(projection: Projection) -> list[DangerRange]:
    """
    Group consecutive danger days into ranges.

    Each day is tagged ``both``, ``optimistic`` or ``pessimistic`` from its
    danger flags. A safe day closes the open range and a tag change starts a
    new one.

    Args:
        projection: Projection to scan

    Returns:
        Ranges in day order
    """
    ranges: list[DangerRange] = []
    current: DangerRange | None = None

    for day in projection.days:
        if not (day.is_optimistic_danger or day.is_pessimistic_danger):
            if current is not None:
                ranges.append(current)
                current = None
            continue

        if day.is_optimistic_danger and day.is_pessimistic_danger:
            tag = "both"
        elif day.is_optimistic_danger:
            tag = Scenario.OPTIMISTIC.value
        else:
            tag = Scenario.PESSIMISTIC.value

        if current is None:
            current = DangerRange(day.date, day.date, tag)
        elif current.scenario == tag:
            current = current._replace(end=day.date)
        else:
            ranges.append(current)
            current = DangerRange(day.date, day.date, tag)

    if current is not None:
        ranges.append(current)
    return ranges


def _as_utc(value: datetime | date | str) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def is_stale(
    updated_at: datetime | date | str | None,
    now: datetime | None = None,
    threshold_days: int = STALE_THRESHOLD_DAYS,
) -> bool:
    """True when ``updated_at`` is missing or older than ``threshold_days``."""
    if updated_at is None:
        return True
    now_ts = _as_utc(now if now is not None else utc_now())
    return _as_utc(updated_at) < now_ts - pd.Timedelta(days=threshold_days)


def days_since_update(
    updated_at: datetime | date | str | None, now: datetime | None = None
) -> int | None:
    """Whole days elapsed since ``updated_at``, or None without a timestamp."""
    if updated_at is None:
        return None
    now_ts = _as_utc(now if now is not None else utc_now())
    return int(np.floor((now_ts - _as_utc(updated_at)) / pd.Timedelta(days=1)))


def stale_entities(
    accounts: Sequence[Account],
    credit_cards: Sequence[CreditCard] = (),
    now: datetime | None = None,
) -> list[StaleEntity]:
    """List accounts and cards whose balances need updating."""
    now = now if now is not None else utc_now()
    stale = [
        StaleEntity(account.id, account.name, "account")
        for account in accounts
        if is_stale(account.balance_updated_at, now)
    ]
    stale.extend(
        StaleEntity(card.id, card.name, "card")
        for card in credit_cards
        if is_stale(card.balance_updated_at, now)
    )
    return stale


def surplus_deficit(projection: Projection) -> pd.DataFrame:
    """
    Net change over the horizon per scenario.

    Returns:
        DataFrame indexed by scenario with ``amount`` (end balance minus
        starting balance, cents) and ``label`` (``Surplus`` or ``Deficit``)
    """
    rows = {}
    for scenario in Scenario:
        amount = projection.summary(scenario).end_balance - projection.starting_balance
        rows[scenario.value] = {
            "amount": amount,
            "label": "Surplus" if amount >= 0 else "Deficit",
        }
    return pd.DataFrame.from_dict(rows, orient="index")


def lowest_balance(projection: Projection) -> pd.DataFrame:
    """
    Minimum running balance and the first day it is reached, per scenario.

    Returns:
        DataFrame indexed by scenario with ``balance`` and ``date`` columns;
        empty when the projection has no days
    """
    df = projection.to_frame()
    if df.empty:
        return pd.DataFrame(columns=["balance", "date"])

    rows = {}
    for scenario in Scenario:
        column = df[f"{scenario.value}_balance"]
        rows[scenario.value] = {
            "balance": int(column.min()),
            "date": column.idxmin().date(),
        }
    return pd.DataFrame.from_dict(rows, orient="index")
