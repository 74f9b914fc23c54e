from dataclasses import replace
from decimal import Decimal
from typing import Dict, Optional

from models import DisputeState, HistoryEntry


class TransactionHistory:
    """
    Deposits by transaction id, kept for dispute lookups.
    Only deposits are recorded; withdrawals cannot be disputed.
    State transitions are unconditional; the processor checks them first.
    """

    def __init__(self):
        self._entries: Dict[int, HistoryEntry] = {}

    def record_deposit(self, transaction_id: int, client_id: int, amount: Decimal) -> None:
        """Store a deposit. A repeated transaction id overwrites the earlier entry."""
        self._entries[transaction_id] = HistoryEntry(client_id=client_id, amount=amount)

    def lookup(self, transaction_id: int) -> Optional[HistoryEntry]:
        return self._entries.get(transaction_id)

    def mark_disputed(self, transaction_id: int) -> None:
        self._set_state(transaction_id, DisputeState.DISPUTED)

    def mark_resolved(self, transaction_id: int) -> None:
        # A resolved deposit can be disputed again.
        self._set_state(transaction_id, DisputeState.NORMAL)

    def mark_charged_back(self, transaction_id: int) -> None:
        self._set_state(transaction_id, DisputeState.CHARGED_BACK)

    def _set_state(self, transaction_id: int, state: DisputeState) -> None:
        self._entries[transaction_id] = replace(self._entries[transaction_id], dispute_state=state)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
