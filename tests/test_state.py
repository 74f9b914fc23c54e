import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from history import TransactionHistory
from ledger import AccountLedger
from models import DisputeState
from state import LedgerState


class TestTransactionHistory:
    def setup_method(self):
        self.history = TransactionHistory()

    def test_record_and_lookup(self):
        self.history.record_deposit(7, client_id=3, amount=Decimal("12.5"))

        entry = self.history.lookup(7)
        assert entry.client_id == 3
        assert entry.amount == Decimal("12.5")
        assert entry.dispute_state == DisputeState.NORMAL
        assert 7 in self.history
        assert len(self.history) == 1

    def test_lookup_unknown(self):
        assert self.history.lookup(99) is None

    def test_last_write_wins(self):
        self.history.record_deposit(1, client_id=1, amount=Decimal("10"))
        self.history.mark_disputed(1)
        self.history.record_deposit(1, client_id=2, amount=Decimal("20"))

        entry = self.history.lookup(1)
        assert entry.client_id == 2
        assert entry.amount == Decimal("20")
        assert entry.dispute_state == DisputeState.NORMAL

    def test_state_transitions(self):
        self.history.record_deposit(1, client_id=1, amount=Decimal("10"))

        self.history.mark_disputed(1)
        assert self.history.lookup(1).dispute_state == DisputeState.DISPUTED

        self.history.mark_resolved(1)
        assert self.history.lookup(1).dispute_state == DisputeState.NORMAL

        self.history.mark_disputed(1)
        self.history.mark_charged_back(1)
        assert self.history.lookup(1).dispute_state == DisputeState.CHARGED_BACK
        assert self.history.lookup(1).amount == Decimal("10")


class TestAccountLedger:
    def setup_method(self):
        self.ledger = AccountLedger()

    def test_get_or_create(self):
        account = self.ledger.get_or_create(5)
        assert account.client_id == 5
        assert account.available == Decimal("0")
        assert self.ledger.get_or_create(5) is account
        assert len(self.ledger) == 1

    def test_get_does_not_create(self):
        assert self.ledger.get(5) is None
        assert len(self.ledger) == 0

    def test_accounts_snapshot(self):
        self.ledger.get_or_create(2)
        self.ledger.get_or_create(1)

        accounts = self.ledger.accounts()
        assert set(accounts) == {1, 2}
        assert list(self.ledger) == [2, 1]

        accounts.clear()
        assert len(self.ledger) == 2


class TestLedgerState:
    def test_fresh_instances_are_independent(self):
        first = LedgerState()
        second = LedgerState()
        first.ledger.get_or_create(1)
        first.history.record_deposit(1, 1, Decimal("1"))

        assert second.ledger.get(1) is None
        assert second.history.lookup(1) is None
