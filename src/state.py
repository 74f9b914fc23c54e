from dataclasses import dataclass, field

from history import TransactionHistory
from ledger import AccountLedger


@dataclass
class LedgerState:
    """
    Everything one run accumulates: client accounts plus the deposit history.
    Owned by whoever drives the processor; a fresh instance means a fresh run.
    """

    ledger: AccountLedger = field(default_factory=AccountLedger)
    history: TransactionHistory = field(default_factory=TransactionHistory)
