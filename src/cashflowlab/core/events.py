"""
Event records materialized by the daily simulator.
"""

from __future__ import annotations

from typing import NamedTuple

from .kinds import Certainty, ExpenseSourceType


class IncomeEvent(NamedTuple):
    """
    One income occurrence on one calendar day.

    Attributes:
        source_id: Id of the recurring or single-shot income
        source_name: Display name of the source
        amount: Amount in cents
        certainty: Certainty copied from the source
    """

    source_id: str
    source_name: str
    amount: int
    certainty: Certainty


class ExpenseEvent(NamedTuple):
    """
    One expense occurrence on one calendar day.

    Attributes:
        source_id: Id of the fixed/single-shot expense or credit card
        source_name: Display name of the source
        source_type: Whether the event comes from an expense or a credit card
        amount: Amount in cents (0 for undeclared far-future card statements)
    """

    source_id: str
    source_name: str
    source_type: ExpenseSourceType
    amount: int
