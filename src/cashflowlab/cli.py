"""
Command-line interface for CashflowLab.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from datetime import date, datetime

import yaml

from cashflowlab import __version__
from cashflowlab.charts import balance_vs_time, save_chart
from cashflowlab.core import (
    CatalogError,
    EngineInput,
    EngineOptions,
    Projection,
    ValidationError,
    calculate_cashflow,
    load_catalog,
    project_from_today,
    validate_and_filter_input,
)
from cashflowlab.kpi import danger_ranges, health_message, health_status, stale_entities

EXAMPLE_CATALOG = {
    "version": 1,
    "household": {"name": "Demo household"},
    "options": {
        "start_date": "2025-01-01",
        "projection_days": 30,
        "time_zone": "America/Sao_Paulo",
    },
    "defaults": {"projects": {"certainty": "guaranteed", "is_active": True}},
    "accounts": [
        {
            "id": "main",
            "name": "Main Checking",
            "type": "checking",
            "balance": 500000,
            "balance_updated_at": "2024-12-28T14:30:00-03:00",
        },
        {"id": "reserve", "name": "Reserve", "type": "savings", "balance": 1200000},
    ],
    "projects": [
        {
            "id": "salary",
            "name": "Salary",
            "amount": 200000,
            "frequency": "monthly",
            "schedule": {"day_of_month": 15},
        },
        {
            "id": "freelance",
            "name": "Freelance",
            "amount": 40000,
            "frequency": "biweekly",
            "certainty": "probable",
            "schedule": {"day_of_week": 5},
        },
    ],
    "expenses": [{"id": "rent", "name": "Rent", "amount": 100000, "due_day": 10}],
    "credit_cards": [
        {
            "id": "visa",
            "name": "Visa",
            "statement_balance": 80000,
            "due_day": 20,
            "balance_updated_at": "2024-12-28T14:30:00-03:00",
        }
    ],
    "single_shot_expenses": [
        {"id": "ipva", "name": "Car tax", "amount": 150000, "date": "2025-01-25"}
    ],
    "single_shot_income": [],
    "future_statements": [
        {"credit_card_id": "visa", "target_month": 3, "target_year": 2025, "amount": 60000}
    ],
}


class CashflowEncoder(json.JSONEncoder):
    """JSON encoder that handles dates, enums and engine dataclasses."""

    def default(self, obj):
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        return super().default(obj)


def _dump_json(data) -> None:
    json.dump(data, sys.stdout, indent=2, cls=CashflowEncoder)
    sys.stdout.write("\n")


def _money(cents: int) -> str:
    return f"{cents / 100:,.2f}"


def _load_input(args) -> EngineInput:
    """Load the catalog and apply command-line overrides."""
    engine_input = load_catalog(args.input).engine_input
    options = engine_input.options or EngineOptions()
    overrides = {}
    if getattr(args, "days", None) is not None:
        overrides["projection_days"] = args.days
    if getattr(args, "start", None) is not None:
        overrides["start_date"] = args.start
    if getattr(args, "tz", None) is not None:
        overrides["time_zone"] = args.tz
    if getattr(args, "now", None) is not None:
        overrides["now"] = datetime.fromisoformat(args.now)
    engine_input.options = dataclasses.replace(options, **overrides)
    return engine_input


def _print_projection(projection: Projection, engine_input: EngineInput) -> None:
    """Print projection summary to stdout."""
    print(
        f"Projection {projection.start_date} .. {projection.end_date} "
        f"({len(projection.days)} days), starting balance {_money(projection.starting_balance)}"
    )
    for label, summary in (
        ("Optimistic", projection.optimistic),
        ("Pessimistic", projection.pessimistic),
    ):
        print(
            f"  {label:<12} income {_money(summary.total_income):>14}  "
            f"expenses {_money(summary.total_expenses):>14}  "
            f"end {_money(summary.end_balance):>14}  "
            f"danger days {summary.danger_day_count}"
        )
    print(f"Health: {health_status(projection).value} - {health_message(projection)}")
    for danger in danger_ranges(projection):
        print(f"  ⚠ {danger.start} .. {danger.end} ({danger.scenario})")

    now = engine_input.options.now if engine_input.options else None
    stale = stale_entities(engine_input.accounts, engine_input.credit_cards, now)
    if stale:
        print("Stale balances (older than 30 days or never updated):")
        for entity in stale:
            print(f"  {entity.type}: {entity.name}")


def cmd_example(args) -> int:
    """Print a sample household catalog."""
    if args.json:
        _dump_json(EXAMPLE_CATALOG)
    else:
        sys.stdout.write(yaml.safe_dump(EXAMPLE_CATALOG, sort_keys=False))
    return 0


def cmd_project(args) -> int:
    """Project balances forward from the stored starting balance."""
    try:
        engine_input = _load_input(args)
        projection = calculate_cashflow(engine_input)

        if args.chart:
            fig, _ = balance_vs_time(projection)
            save_chart(fig, args.chart)

        if args.json:
            _dump_json(projection.to_dict())
        else:
            _print_projection(projection, engine_input)
            if args.chart:
                print(f"Chart saved to {args.chart}")
        return 0

    except (CatalogError, ValidationError, OSError, ValueError) as e:
        print(f"Error running projection: {e}", file=sys.stderr)
        return 1


def cmd_estimate(args) -> int:
    """Estimate today's balance and project forward from it."""
    try:
        engine_input = _load_input(args)
        estimate, projection = project_from_today(engine_input)

        if args.json:
            _dump_json({"estimate": estimate.to_dict(), "projection": projection.to_dict()})
            return 0

        if estimate.has_base:
            base = estimate.base
            since = base.start if base.start == base.end else f"{base.start} .. {base.end}"
            print(f"Balances last updated: {since}")
        else:
            print(f"No reliable base ({estimate.base_failure_reason.value}); using stored balances")
        print(f"Today ({estimate.today}):")
        print(
            f"  Optimistic  {_money(estimate.optimistic):>14}"
            f"{'  (estimated)' if estimate.is_estimated.optimistic else ''}"
        )
        print(
            f"  Pessimistic {_money(estimate.pessimistic):>14}"
            f"{'  (estimated)' if estimate.is_estimated.pessimistic else ''}"
        )
        _print_projection(projection, engine_input)
        return 0

    except (CatalogError, ValidationError, OSError, ValueError) as e:
        print(f"Error estimating balance: {e}", file=sys.stderr)
        return 1


def cmd_validate(args) -> int:
    """Validate a household catalog."""
    try:
        engine_input = _load_input(args)
        validated = validate_and_filter_input(engine_input)
    except (CatalogError, ValidationError, OSError, ValueError) as e:
        if args.json:
            report = {"is_valid": False, "exit_code": 1, "error": str(e)}
            if isinstance(e, ValidationError):
                report["kind"] = e.kind.value
                report["entity"] = e.entity_name
            _dump_json(report)
        else:
            print(f"❌ Validation failed: {e}")
        return 1

    counts = {
        "accounts": len(validated.accounts),
        "active_projects": len(validated.active_projects),
        "guaranteed_projects": len(validated.guaranteed_projects),
        "active_expenses": len(validated.active_expenses),
        "credit_cards": len(validated.credit_cards),
        "single_shot_expenses": len(validated.single_shot_expenses),
        "single_shot_income": len(validated.single_shot_income),
        "future_statements": len(validated.future_statements),
    }
    if args.json:
        _dump_json({"is_valid": True, "exit_code": 0, "counts": counts})
    else:
        print("✅ Catalog is valid")
        for name, count in counts.items():
            print(f"  {name}: {count}")
    return 0


def _add_input_arguments(parser: argparse.ArgumentParser, *, start: bool) -> None:
    parser.add_argument(
        "-i", "--input", required=True, help="Input catalog file (YAML or JSON)"
    )
    parser.add_argument("--days", type=int, help="Number of days to project")
    if start:
        parser.add_argument("--start", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--tz", help="IANA time zone, e.g. America/Sao_Paulo")
    parser.add_argument(
        "--now", help="Current instant (ISO-8601); defaults to the system clock"
    )
    parser.add_argument("--json", action="store_true", help="Output in JSON format")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cashflow", description="CashflowLab - Household cashflow projections"
    )

    # Version argument
    parser.add_argument("--version", action="version", version=f"CashflowLab {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example", help="Print a sample household catalog"
    )
    example_parser.add_argument(
        "--json", action="store_true", help="Print JSON instead of YAML"
    )
    example_parser.set_defaults(func=cmd_example)

    # Project command
    project_parser = subparsers.add_parser(
        "project", help="Project balances from the stored starting balance"
    )
    _add_input_arguments(project_parser, start=True)
    project_parser.add_argument(
        "--chart", help="Write the balance chart to this HTML file"
    )
    project_parser.set_defaults(func=cmd_project)

    # Estimate command
    estimate_parser = subparsers.add_parser(
        "estimate", help="Estimate today's balance and project forward from it"
    )
    _add_input_arguments(estimate_parser, start=False)
    estimate_parser.epilog = """
Estimation Semantics:
  • Base: earliest checking-account update day (a range is reported as such)
  • Events in (base, today] are applied to the stored balances
  • Day 0 of the projection is today at the estimated balances
  • Forward days start tomorrow, so today's events are never counted twice
    """
    estimate_parser.set_defaults(func=cmd_estimate)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a household catalog")
    _add_input_arguments(validate_parser, start=True)
    validate_parser.set_defaults(func=cmd_validate)

    # Parse arguments and execute
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
