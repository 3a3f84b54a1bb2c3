"""
Error classes for CashflowLab.

Validation failures are raised as exceptions and surface immediately to the
caller: the simulator never runs on invalid input. Base determination for the
today-estimate is not an error and is reported as a tagged result instead
(see :mod:`cashflowlab.core.estimate`).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Coarse classification of a validation failure."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"


class ValidationError(Exception):
    """
    Raised when an entity or option violates a structural constraint.

    Attributes:
        kind: Coarse error kind (``INVALID_INPUT`` or ``INVALID_AMOUNT``)
        entity_name: Name of the offending entity ("options" for option errors)
        details: Field-level payload describing what failed

    **Example Usage:**
        ```python
        from cashflowlab.core.errors import ErrorKind, ValidationError

        try:
            calculate_cashflow(engine_input)
        except ValidationError as e:
            if e.kind is ErrorKind.INVALID_AMOUNT:
                print(f"Fix the balance of {e.entity_name}")
        ```
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.INVALID_INPUT,
        entity_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.kind = kind
        self.entity_name = entity_name
        self.details = details or {}
        self.raw_message = message
        super().__init__(self._fmt(message))

    def _fmt(self, msg: str) -> str:
        """Format the error message with the kind and entity context."""
        suffix = f" | entity: {self.entity_name}" if self.entity_name else ""
        return f"[{self.kind.value}] {msg}{suffix}"


class FormatError(ValueError):
    """Raised for malformed timestamps, date-only strings or time zone ids."""

    pass
