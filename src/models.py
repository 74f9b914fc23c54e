from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from amount import ZERO, saturating_add

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, value: str) -> "TransactionType":
        """Case-insensitive lookup by name, e.g. "Deposit" -> DEPOSIT."""
        return cls(value.strip().lower())

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


class IgnoreReason(Enum):
    ACCOUNT_LOCKED = "account locked"
    INVALID_AMOUNT = "missing or negative amount"
    INSUFFICIENT_FUNDS = "insufficient funds"
    UNKNOWN_ACCOUNT = "unknown account"
    UNKNOWN_TRANSACTION = "unknown transaction"
    CLIENT_MISMATCH = "client mismatch"
    NOT_DISPUTABLE = "transaction not disputable"
    NOT_DISPUTED = "transaction not disputed"
    HOLD_LIMIT = "held balance would exceed the maximum"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class HistoryEntry:
    """A posted deposit as remembered for later dispute-family records."""

    client_id: int
    amount: Decimal
    dispute_state: DisputeState = DisputeState.NORMAL


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = field(default=ZERO)
    held: Decimal = field(default=ZERO)
    locked: bool = False

    @property
    def total(self) -> Decimal:
        """
        available + held. Always saturating, whatever overflow policy the
        engine runs with; the processor keeps the sum within MAX_AMOUNT, so
        for ledger accounts the clamp never applies.
        """
        return saturating_add(self.available, self.held)


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0
        self.malformed = 0

    def record(self, result: ProcessingResult):
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.ignored += 1

    def record_malformed(self):
        self.malformed += 1

    @property
    def total(self) -> int:
        return self.applied + self.ignored + self.malformed

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, ignored={self.ignored}, malformed={self.malformed})"
