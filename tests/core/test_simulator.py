"""
Tests for the daily simulator and cashflow projection.
"""

import logging
from datetime import date, datetime, timezone

import pytest
from cashflowlab.core.entities import (
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
from cashflowlab.core.errors import ValidationError
from cashflowlab.core.kinds import ExpenseSourceType
from cashflowlab.core.simulator import (
    calculate_cashflow,
    calculate_starting_balance,
    credit_card_amount_for_date,
)
from cashflowlab.core.validation import EngineInput, EngineOptions

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _options(start=date(2025, 1, 1), days=30, now=NOW, **kwargs) -> EngineOptions:
    return EngineOptions(start_date=start, projection_days=days, now=now, **kwargs)


def _day(projection, day: date):
    return next(d for d in projection.days if d.date == day)


@pytest.fixture
def household() -> EngineInput:
    """One checking account, a monthly salary and rent."""
    return EngineInput(
        accounts=[Account("main", "Main", "checking", 500_000)],
        projects=[
            RecurringIncome(
                "salary",
                "Salary",
                200_000,
                "monthly",
                "guaranteed",
                schedule=DayOfMonthSchedule(15),
            )
        ],
        expenses=[FixedExpense("rent", "Rent", 100_000, due_day=10)],
        options=_options(),
    )


class TestCalculateCashflow:
    def test_end_to_end_example(self, household):
        projection = calculate_cashflow(household)

        assert projection.start_date == date(2025, 1, 1)
        assert projection.end_date == date(2025, 1, 30)
        assert projection.starting_balance == 500_000
        assert len(projection.days) == 30
        assert projection.optimistic.end_balance == 600_000
        assert projection.pessimistic.end_balance == 600_000
        assert projection.optimistic.danger_day_count == 0
        assert projection.pessimistic.danger_day_count == 0
        assert projection.optimistic.total_income == 200_000
        assert projection.optimistic.total_expenses == 100_000

    def test_daily_trajectory(self, household):
        projection = calculate_cashflow(household)

        assert [d.day_offset for d in projection.days] == list(range(30))
        assert _day(projection, date(2025, 1, 9)).optimistic_balance == 500_000
        assert _day(projection, date(2025, 1, 10)).optimistic_balance == 400_000
        assert _day(projection, date(2025, 1, 15)).pessimistic_balance == 600_000

        rent_day = _day(projection, date(2025, 1, 10))
        assert rent_day.expense_events[0].source_id == "rent"
        assert rent_day.expense_events[0].source_type == ExpenseSourceType.EXPENSE

    def test_projection_days_shorthand(self, household):
        household.projection_days = 5
        projection = calculate_cashflow(household)
        assert len(projection.days) == 5
        assert projection.end_date == date(2025, 1, 5)

    def test_invalid_input_raises_before_simulating(self, household):
        household.expenses.append(FixedExpense("bad", "Bad", -1, 10))
        with pytest.raises(ValidationError):
            calculate_cashflow(household)

    def test_empty_input(self):
        projection = calculate_cashflow(EngineInput(options=_options(days=3)))
        assert projection.starting_balance == 0
        assert [d.optimistic_balance for d in projection.days] == [0, 0, 0]
        assert projection.optimistic.danger_day_count == 0

    def test_logs_simulation_run(self, household, caplog):
        with caplog.at_level(logging.DEBUG, logger="cashflowlab.core.simulator"):
            calculate_cashflow(household)
        assert "Simulating 30 days from 2025-01-01" in caplog.text


class TestScenarios:
    def test_pessimistic_counts_guaranteed_income_only(self, household):
        household.projects.append(
            RecurringIncome(
                "freelance",
                "Freelance",
                50_000,
                "monthly",
                "probable",
                schedule=DayOfMonthSchedule(20),
            )
        )
        projection = calculate_cashflow(household)

        assert projection.optimistic.end_balance == 650_000
        assert projection.pessimistic.end_balance == 600_000
        assert projection.optimistic.total_expenses == projection.pessimistic.total_expenses

        day = _day(projection, date(2025, 1, 20))
        assert [e.source_id for e in day.income_events] == ["freelance"]

    def test_inactive_sources_are_ignored(self, household):
        household.projects.append(
            RecurringIncome(
                "old",
                "Old job",
                999_999,
                "monthly",
                "guaranteed",
                schedule=DayOfMonthSchedule(2),
                is_active=False,
            )
        )
        household.expenses.append(FixedExpense("gym", "Gym", 999_999, 3, is_active=False))
        projection = calculate_cashflow(household)
        assert projection.optimistic.end_balance == 600_000

    def test_danger_days(self):
        engine_input = EngineInput(
            accounts=[Account("main", "Main", "checking", 50_000)],
            projects=[
                RecurringIncome(
                    "side",
                    "Side gig",
                    100_000,
                    "monthly",
                    "uncertain",
                    schedule=DayOfMonthSchedule(3),
                )
            ],
            expenses=[FixedExpense("rent", "Rent", 100_000, due_day=5)],
            options=_options(days=10),
        )
        projection = calculate_cashflow(engine_input)

        # Optimistic: +100k on day 3, -100k on day 5 -> never negative
        assert projection.optimistic.danger_day_count == 0
        # Pessimistic: -50k from day 5 onwards
        assert projection.pessimistic.danger_day_count == 6
        assert projection.pessimistic.danger_days[0].date == date(2025, 1, 5)
        assert projection.pessimistic.danger_days[0].balance == -50_000
        for day in projection.days:
            assert day.is_optimistic_danger == (day.optimistic_balance < 0)
            assert day.is_pessimistic_danger == (day.pessimistic_balance < 0)

    def test_biweekly_guaranteed_income_in_both_scenarios(self):
        engine_input = EngineInput(
            projects=[
                RecurringIncome(
                    "pay",
                    "Paycheck",
                    10_000,
                    "biweekly",
                    "guaranteed",
                    schedule=DayOfWeekSchedule(5),
                )
            ],
            options=_options(days=31),
        )
        projection = calculate_cashflow(engine_input)
        paydays = [d.date for d in projection.days if d.income_events]
        assert paydays == [date(2025, 1, 3), date(2025, 1, 17), date(2025, 1, 31)]
        assert projection.optimistic.end_balance == 30_000
        assert projection.pessimistic.end_balance == 30_000

    def test_twice_monthly_overrides(self):
        engine_input = EngineInput(
            projects=[
                RecurringIncome(
                    "salary",
                    "Salary",
                    100_000,
                    "twice-monthly",
                    "guaranteed",
                    schedule=TwiceMonthlySchedule(
                        5, 20, first_amount=120_000, second_amount=80_000
                    ),
                )
            ],
            options=_options(days=31),
        )
        projection = calculate_cashflow(engine_input)
        assert _day(projection, date(2025, 1, 5)).income_events[0].amount == 120_000
        assert _day(projection, date(2025, 1, 20)).income_events[0].amount == 80_000
        assert projection.optimistic.total_income == 200_000

    def test_anchor_state_does_not_leak_between_calls(self):
        engine_input = EngineInput(
            projects=[
                RecurringIncome(
                    "pay", "Paycheck", 10_000, "weekly", "guaranteed", payment_day=3
                )
            ],
            options=_options(days=14),
        )
        first = calculate_cashflow(engine_input)
        second = calculate_cashflow(engine_input)
        assert first.to_dict() == second.to_dict()
        assert [d.date for d in first.days if d.income_events] == [
            date(2025, 1, 3),
            date(2025, 1, 10),
        ]


class TestSingleShots:
    def test_exact_date_match(self):
        engine_input = EngineInput(
            single_shot_expenses=[SingleShotExpense("tax", "Car tax", 30_000, date(2025, 1, 4))],
            single_shot_income=[
                SingleShotIncome("gift", "Gift", 10_000, date(2025, 1, 2), "uncertain"),
                SingleShotIncome("late", "Too late", 10_000, date(2025, 2, 2), "guaranteed"),
            ],
            options=_options(days=5),
        )
        projection = calculate_cashflow(engine_input)

        assert [d.optimistic_balance for d in projection.days] == [
            0,
            10_000,
            10_000,
            -20_000,
            -20_000,
        ]
        assert [d.pessimistic_balance for d in projection.days] == [
            0,
            0,
            0,
            -30_000,
            -30_000,
        ]

    def test_timestamp_dates_use_time_zone(self):
        engine_input = EngineInput(
            single_shot_expenses=[
                SingleShotExpense("tax", "Tax", 1_000, "2025-01-03T02:00:00Z")
            ],
            options=_options(days=5, time_zone="America/Sao_Paulo"),
        )
        projection = calculate_cashflow(engine_input)
        assert _day(projection, date(2025, 1, 2)).expense_events[0].source_id == "tax"


class TestStartingBalance:
    def test_checking_accounts_only(self):
        accounts = [
            Account("a", "Checking A", "checking", 100),
            Account("b", "Checking B", "checking", 250),
            Account("s", "Savings", "savings", 10_000),
            Account("i", "Broker", "investment", 50_000),
        ]
        assert calculate_starting_balance(accounts) == 350

    def test_no_checking_accounts(self):
        assert calculate_starting_balance([Account("s", "Savings", "savings", 10)]) == 0
        assert calculate_starting_balance([]) == 0


class TestCreditCards:
    @pytest.fixture
    def card(self) -> CreditCard:
        return CreditCard("visa", "Visa", statement_balance=50_000, due_day=5)

    def test_current_and_next_month_use_statement_balance(self, card):
        today = date(2025, 1, 1)
        declared = [FutureStatement("visa", 2, 2025, 99_999)]
        assert credit_card_amount_for_date(card, declared, date(2025, 1, 5), today) == 50_000
        assert credit_card_amount_for_date(card, declared, date(2025, 2, 5), today) == 50_000

    def test_past_months_use_statement_balance(self, card):
        assert (
            credit_card_amount_for_date(card, [], date(2024, 10, 5), date(2025, 1, 1))
            == 50_000
        )

    def test_distant_month_uses_declared_statement(self, card):
        declared = [
            FutureStatement("other", 3, 2025, 1),
            FutureStatement("visa", 3, 2025, 30_000),
        ]
        assert (
            credit_card_amount_for_date(card, declared, date(2025, 3, 5), date(2025, 1, 1))
            == 30_000
        )

    def test_distant_month_without_statement_is_zero(self, card):
        assert (
            credit_card_amount_for_date(card, [], date(2025, 3, 5), date(2025, 1, 1)) == 0
        )

    def test_next_month_across_year_end(self, card):
        today = date(2024, 12, 15)
        assert credit_card_amount_for_date(card, [], date(2025, 1, 5), today) == 50_000
        assert credit_card_amount_for_date(card, [], date(2025, 2, 5), today) == 0

    def test_duplicate_statements_warn_and_use_first(self, card):
        declared = [
            FutureStatement("visa", 3, 2025, 10_000, id="first"),
            FutureStatement("visa", 3, 2025, 20_000, id="second"),
        ]
        with pytest.warns(UserWarning, match="2 future statements"):
            amount = credit_card_amount_for_date(
                card, declared, date(2025, 3, 5), date(2025, 1, 1)
            )
        assert amount == 10_000

    def test_projection_resolves_amounts_per_month(self, card):
        engine_input = EngineInput(
            credit_cards=[card],
            future_statements=[FutureStatement("visa", 3, 2025, 30_000)],
            options=_options(days=120),
        )
        projection = calculate_cashflow(engine_input)
        charges = {
            d.date: d.expense_events[0].amount
            for d in projection.days
            if d.expense_events
        }
        assert charges == {
            date(2025, 1, 5): 50_000,
            date(2025, 2, 5): 50_000,
            date(2025, 3, 5): 30_000,
            date(2025, 4, 5): 0,
        }
        event = _day(projection, date(2025, 4, 5)).expense_events[0]
        assert event.source_type == ExpenseSourceType.CREDIT_CARD

    def test_current_month_follows_injected_now(self, card):
        """Moving "now" forward turns a declared month into the live statement month."""
        engine_input = EngineInput(
            credit_cards=[card],
            future_statements=[FutureStatement("visa", 3, 2025, 30_000)],
            options=_options(days=120, now=datetime(2025, 2, 10, tzinfo=timezone.utc)),
        )
        projection = calculate_cashflow(engine_input)
        assert _day(projection, date(2025, 3, 5)).expense_events[0].amount == 50_000
        assert _day(projection, date(2025, 4, 5)).expense_events[0].amount == 0

    def test_duplicate_statement_warning_points_at_caller(self, card):
        engine_input = EngineInput(
            credit_cards=[card],
            future_statements=[
                FutureStatement("visa", 3, 2025, 10_000),
                FutureStatement("visa", 3, 2025, 20_000),
            ],
            options=_options(start=date(2025, 3, 1), days=10),
        )
        with pytest.warns(UserWarning, match="2 future statements") as record:
            projection = calculate_cashflow(engine_input)
        assert record[0].filename == __file__
        assert _day(projection, date(2025, 3, 5)).expense_events[0].amount == 10_000


class TestLargeAmounts:
    """Balances are exact integer cents at any magnitude."""

    def test_balances_beyond_64_bits(self):
        engine_input = EngineInput(
            accounts=[Account("main", "Main", "checking", 2**62)],
            projects=[
                RecurringIncome(
                    "salary",
                    "Salary",
                    2**62,
                    "monthly",
                    "guaranteed",
                    schedule=DayOfMonthSchedule(1),
                )
            ],
            expenses=[FixedExpense("rent", "Rent", 1, due_day=2)],
            options=_options(days=3),
        )
        projection = calculate_cashflow(engine_input)

        first, second, _ = projection.days
        assert first.optimistic_balance == 2**63
        assert first.pessimistic_balance == 2**63
        assert not first.is_optimistic_danger
        assert not first.is_pessimistic_danger
        assert second.pessimistic_balance == 2**63 - 1
        assert type(second.pessimistic_balance) is int
        assert projection.pessimistic.danger_day_count == 0
        assert projection.optimistic.end_balance == 2**63 - 1
