"""Utilities for loading household catalogs from YAML/JSON sources."""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

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
from .validation import DEFAULT_PROJECTION_DAYS, EngineInput, EngineOptions

__all__ = [
    "CatalogError",
    "CatalogDefinition",
    "load_catalog",
]

# Sections whose entries receive a ``defaults:`` mapping of the same name.
_SECTIONS = (
    "accounts",
    "projects",
    "expenses",
    "credit_cards",
    "single_shot_expenses",
    "single_shot_income",
    "future_statements",
)


class CatalogError(ValueError):
    """Raised when a catalog file cannot be parsed or has the wrong shape."""


@dataclass(slots=True)
class CatalogDefinition:
    """Structured representation of a household catalog."""

    engine_input: EngineInput
    metadata: dict[str, Any] = field(default_factory=dict)
    source: str = "<memory>"


def load_catalog(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> CatalogDefinition:
    """
    Parse a household catalog from YAML/JSON/dict into engine input.

    Only the shape is checked here (mappings, lists, required keys, date and
    timestamp syntax); value ranges are left to the engine's validator.

    Args:
        source: Path to a ``.yaml``/``.yml``/``.json`` file, or a mapping
        format: Override the format inferred from the file suffix

    Returns:
        CatalogDefinition wrapping an EngineInput

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
        CatalogError: If the catalog is malformed

    Example:
        ```yaml
        options:
          start_date: 2025-01-01
          projection_days: 30
          time_zone: America/Sao_Paulo
        defaults:
          projects: {certainty: guaranteed}
        accounts:
          - {name: Main, type: checking, balance: 500000}
        projects:
          - {name: Salary, amount: 200000, frequency: monthly,
             schedule: {day_of_month: 15}}
        ```
    """
    mapping, label = _read_source(source, format=format)
    defaults = _ensure_dict(mapping.get("defaults"), f"{label}::defaults")
    sections = {
        name: _section_entries(mapping.get(name), defaults.get(name), name, label)
        for name in _SECTIONS
    }

    engine_input = EngineInput(
        accounts=[_account(e, ctx) for ctx, e in sections["accounts"]],
        projects=[_project(e, ctx) for ctx, e in sections["projects"]],
        expenses=[_fixed_expense(e, ctx) for ctx, e in sections["expenses"]],
        credit_cards=[_credit_card(e, ctx) for ctx, e in sections["credit_cards"]],
        single_shot_expenses=[
            _single_shot_expense(e, ctx) for ctx, e in sections["single_shot_expenses"]
        ],
        single_shot_income=[
            _single_shot_income(e, ctx) for ctx, e in sections["single_shot_income"]
        ],
        future_statements=[
            _future_statement(e, ctx) for ctx, e in sections["future_statements"]
        ],
        options=_options(mapping.get("options"), f"{label}::options"),
    )
    metadata = {
        "version": mapping.get("version", 1),
        "household": _ensure_dict(mapping.get("household"), f"{label}::household"),
    }
    return CatalogDefinition(engine_input=engine_input, metadata=metadata, source=label)


def _read_source(
    source: str | Path | dict[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, dict):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise CatalogError(f"Unsupported catalog format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Could not parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise CatalogError(f"Catalog root must be a mapping (source={path})")
    return data, str(path)


def _section_entries(
    raw: Any, section_defaults: Any, name: str, label: str
) -> list[tuple[str, dict[str, Any]]]:
    entries = _ensure_list(raw, f"{label}::{name}", allow_none=True) or []
    base = _ensure_dict(section_defaults, f"{label}::defaults.{name}")
    out = []
    for idx, entry in enumerate(entries):
        ctx = f"{label}::{name}[{idx}]"
        data = _deep_merge(base, _ensure_dict(entry, ctx)) or {}
        data.setdefault("id", f"{name}-{idx + 1}")
        out.append((ctx, data))
    return out


def _options(raw: Any, ctx: str) -> EngineOptions:
    data = _ensure_dict(raw, ctx)
    days = data.get("projection_days", DEFAULT_PROJECTION_DAYS)
    if isinstance(days, bool) or not isinstance(days, int):
        raise CatalogError(f"{ctx}.projection_days: expected an integer")
    options = EngineOptions(
        start_date=_coerce_date(data.get("start_date"), f"{ctx}.start_date"),
        projection_days=days,
        now=_coerce_timestamp(data.get("now"), f"{ctx}.now"),
    )
    if data.get("time_zone") is not None:
        options.time_zone = _coerce_str(data["time_zone"], f"{ctx}.time_zone")
    return options


def _account(data: dict[str, Any], ctx: str) -> Account:
    return Account(
        id=_coerce_str(data["id"], f"{ctx}.id"),
        name=_require_str(data, "name", ctx),
        type=_require_str(data, "type", ctx),
        balance=_require(data, "balance", ctx),
        balance_updated_at=data.get("balance_updated_at"),
    )


def _project(data: dict[str, Any], ctx: str) -> RecurringIncome:
    return RecurringIncome(
        id=_coerce_str(data["id"], f"{ctx}.id"),
        name=_require_str(data, "name", ctx),
        amount=_require(data, "amount", ctx),
        frequency=_require_str(data, "frequency", ctx),
        certainty=_require_str(data, "certainty", ctx),
        schedule=_schedule(data.get("schedule"), f"{ctx}.schedule"),
        payment_day=data.get("payment_day"),
        is_active=_coerce_bool(data.get("is_active", True), f"{ctx}.is_active"),
    )


def _schedule(raw: Any, ctx: str) -> PaymentSchedule | None:
    if raw is None:
        return None
    data = _ensure_dict(raw, ctx)
    if "day_of_week" in data:
        return DayOfWeekSchedule(day_of_week=data["day_of_week"])
    if "day_of_month" in data:
        return DayOfMonthSchedule(day_of_month=data["day_of_month"])
    if "first_day" in data or "second_day" in data:
        return TwiceMonthlySchedule(
            first_day=_require(data, "first_day", ctx),
            second_day=_require(data, "second_day", ctx),
            first_amount=data.get("first_amount"),
            second_amount=data.get("second_amount"),
        )
    raise CatalogError(
        f"{ctx}: expected 'day_of_week', 'day_of_month' or 'first_day'/'second_day'"
    )


def _fixed_expense(data: dict[str, Any], ctx: str) -> FixedExpense:
    return FixedExpense(
        id=_coerce_str(data["id"], f"{ctx}.id"),
        name=_require_str(data, "name", ctx),
        amount=_require(data, "amount", ctx),
        due_day=_require(data, "due_day", ctx),
        is_active=_coerce_bool(data.get("is_active", True), f"{ctx}.is_active"),
    )


def _credit_card(data: dict[str, Any], ctx: str) -> CreditCard:
    return CreditCard(
        id=_coerce_str(data["id"], f"{ctx}.id"),
        name=_require_str(data, "name", ctx),
        statement_balance=_require(data, "statement_balance", ctx),
        due_day=_require(data, "due_day", ctx),
        balance_updated_at=data.get("balance_updated_at"),
    )


def _single_shot_expense(data: dict[str, Any], ctx: str) -> SingleShotExpense:
    return SingleShotExpense(
        id=_coerce_str(data["id"], f"{ctx}.id"),
        name=_require_str(data, "name", ctx),
        amount=_require(data, "amount", ctx),
        date=_coerce_date(_require(data, "date", ctx), f"{ctx}.date"),
    )


def _single_shot_income(data: dict[str, Any], ctx: str) -> SingleShotIncome:
    return SingleShotIncome(
        id=_coerce_str(data["id"], f"{ctx}.id"),
        name=_require_str(data, "name", ctx),
        amount=_require(data, "amount", ctx),
        date=_coerce_date(_require(data, "date", ctx), f"{ctx}.date"),
        certainty=_require_str(data, "certainty", ctx),
    )


def _future_statement(data: dict[str, Any], ctx: str) -> FutureStatement:
    return FutureStatement(
        credit_card_id=_require_str(data, "credit_card_id", ctx),
        target_month=_require(data, "target_month", ctx),
        target_year=_require(data, "target_year", ctx),
        amount=_require(data, "amount", ctx),
        id=data.get("id"),
    )


def _require(data: dict[str, Any], key: str, ctx: str) -> Any:
    if data.get(key) is None:
        raise CatalogError(f"{ctx}: '{key}' is required")
    return data[key]


def _require_str(data: dict[str, Any], key: str, ctx: str) -> str:
    return _coerce_str(_require(data, key, ctx), f"{ctx}.{key}")


def _coerce_date(value: Any, ctx: str) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        raise CatalogError(f"{ctx}: expected a calendar date, not a timestamp")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise CatalogError(f"{ctx}: invalid ISO date '{value}'") from exc
    raise CatalogError(f"{ctx}: expected ISO date string")


def _coerce_timestamp(value: Any, ctx: str) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as exc:
            raise CatalogError(f"{ctx}: invalid ISO timestamp '{value}'") from exc
    raise CatalogError(f"{ctx}: expected ISO timestamp string")


def _coerce_bool(value: Any, ctx: str) -> bool:
    if not isinstance(value, bool):
        raise CatalogError(f"{ctx}: expected a boolean")
    return value


def _coerce_str(value: Any, ctx: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CatalogError(f"{ctx}: expected non-empty string")
    return value


def _ensure_dict(value: Any, ctx: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CatalogError(f"{ctx}: expected a mapping")
    return deepcopy(value)


def _ensure_list(value: Any, ctx: str, *, allow_none: bool = False) -> list[Any] | None:
    if value is None:
        if allow_none:
            return None
        raise CatalogError(f"{ctx}: expected a list")
    if not isinstance(value, list):
        raise CatalogError(f"{ctx}: expected a list")
    return list(value)


def _deep_merge(
    base: dict[str, Any] | None, override: dict[str, Any] | None
) -> dict[str, Any] | None:
    if base is None and override is None:
        return None
    result: dict[str, Any] = deepcopy(base) if base else {}
    if override:
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = _deep_merge(result[key], value) or {}
            else:
                result[key] = deepcopy(value)
    return result
