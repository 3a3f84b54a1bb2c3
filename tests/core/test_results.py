"""
Tests for scenario summaries and projection views.
"""

from datetime import date, datetime, timezone

import pandas as pd
import pytest
from cashflowlab.core.entities import Account, DayOfMonthSchedule, FixedExpense, RecurringIncome
from cashflowlab.core.events import ExpenseEvent, IncomeEvent
from cashflowlab.core.kinds import Certainty, ExpenseSourceType, Scenario
from cashflowlab.core.results import (
    DailySnapshot,
    build_projection,
    generate_scenario_summary,
)
from cashflowlab.core.simulator import calculate_cashflow
from cashflowlab.core.validation import EngineInput, EngineOptions


@pytest.fixture
def days() -> list[DailySnapshot]:
    return [
        DailySnapshot(
            date=date(2025, 1, 1),
            day_offset=0,
            optimistic_balance=1_500,
            pessimistic_balance=1_000,
            income_events=(
                IncomeEvent("a", "A", 1_000, Certainty.GUARANTEED),
                IncomeEvent("b", "B", 500, Certainty.PROBABLE),
            ),
        ),
        DailySnapshot(
            date=date(2025, 1, 2),
            day_offset=1,
            optimistic_balance=-500,
            pessimistic_balance=-1_000,
            expense_events=(ExpenseEvent("r", "Rent", ExpenseSourceType.EXPENSE, 2_000),),
            is_optimistic_danger=True,
            is_pessimistic_danger=True,
        ),
        DailySnapshot(
            date=date(2025, 1, 3),
            day_offset=2,
            optimistic_balance=200,
            pessimistic_balance=-300,
            income_events=(IncomeEvent("c", "C", 700, Certainty.GUARANTEED),),
            is_pessimistic_danger=True,
        ),
    ]


class TestScenarioSummary:
    def test_optimistic(self, days):
        summary = generate_scenario_summary(days, Scenario.OPTIMISTIC)
        assert summary.total_income == 2_200
        assert summary.total_expenses == 2_000
        assert summary.end_balance == 200
        assert [d.date for d in summary.danger_days] == [date(2025, 1, 2)]
        assert summary.danger_day_count == 1

    def test_pessimistic(self, days):
        summary = generate_scenario_summary(days, Scenario.PESSIMISTIC)
        assert summary.total_income == 1_700
        assert summary.total_expenses == 2_000
        assert summary.end_balance == -300
        assert [d.day_offset for d in summary.danger_days] == [1, 2]
        assert summary.danger_days[1].balance == -300

    def test_accepts_scenario_strings(self, days):
        assert generate_scenario_summary(days, "pessimistic").end_balance == -300

    def test_empty_sequence(self):
        summary = generate_scenario_summary([], Scenario.OPTIMISTIC)
        assert summary.total_income == 0
        assert summary.total_expenses == 0
        assert summary.end_balance == 0
        assert summary.danger_days == ()

    def test_reduction_is_idempotent(self, days):
        first = generate_scenario_summary(days, Scenario.PESSIMISTIC)
        second = generate_scenario_summary(days, Scenario.PESSIMISTIC)
        assert first == second


class TestProjectionViews:
    @pytest.fixture
    def projection(self):
        return calculate_cashflow(
            EngineInput(
                accounts=[Account("main", "Main", "checking", 50_000)],
                projects=[
                    RecurringIncome(
                        "salary",
                        "Salary",
                        200_000,
                        "monthly",
                        "probable",
                        schedule=DayOfMonthSchedule(4),
                    )
                ],
                expenses=[FixedExpense("rent", "Rent", 100_000, due_day=2)],
                options=EngineOptions(
                    start_date=date(2025, 1, 1),
                    projection_days=5,
                    now=datetime(2025, 1, 1, tzinfo=timezone.utc),
                ),
            )
        )

    def test_build_projection_of_no_days(self):
        projection = build_projection(100, [], date(2025, 1, 1))
        assert projection.start_date == projection.end_date == date(2025, 1, 1)
        assert projection.optimistic.end_balance == 0

    def test_summary_by_scenario(self, projection):
        assert projection.summary(Scenario.OPTIMISTIC) is projection.optimistic
        assert projection.summary(Scenario.PESSIMISTIC) is projection.pessimistic

    def test_to_frame(self, projection):
        df = projection.to_frame()

        assert isinstance(df.index, pd.DatetimeIndex)
        assert df.index.name == "date"
        assert len(df) == 5
        assert df.loc[pd.Timestamp("2025-01-02"), "expenses"] == 100_000
        assert df.loc[pd.Timestamp("2025-01-04"), "optimistic_income"] == 200_000
        assert df.loc[pd.Timestamp("2025-01-04"), "pessimistic_income"] == 0
        assert df["pessimistic_balance"].tolist() == [
            50_000,
            -50_000,
            -50_000,
            -50_000,
            -50_000,
        ]
        assert df["is_pessimistic_danger"].sum() == 4
        assert not df["is_optimistic_danger"].iloc[-1]

    def test_to_dict(self, projection):
        data = projection.to_dict()
        assert data["start_date"] == "2025-01-01"
        assert data["end_date"] == "2025-01-05"
        assert data["days"][1]["expense_events"][0] == {
            "source_id": "rent",
            "source_name": "Rent",
            "source_type": "expense",
            "amount": 100_000,
        }
        assert data["days"][3]["income_events"][0]["certainty"] == "probable"
        assert data["pessimistic"]["danger_day_count"] == 4
        assert data["pessimistic"]["danger_days"][0]["date"] == "2025-01-02"
