"""Exceptions raised at the edges of the payments engine.

Business-rule violations (insufficient funds, foreign disputes, locked
accounts) are never raised; the processor reports them as ignored records.
"""
from typing import Optional


class PaymentsEngineError(Exception):
    """Base error for the payments engine."""


class MalformedRecordError(PaymentsEngineError):
    """An input row could not be turned into a Transaction."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class AmountOverflowError(PaymentsEngineError):
    """A balance left the representable range under the checked overflow policy."""

    def __init__(self, value) -> None:
        self.value = value
        super().__init__(f"Amount {value} is outside the representable range")
