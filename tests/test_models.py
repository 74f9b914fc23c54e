import sys
import os
from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import MAX_AMOUNT
from models import ClientAccount, ProcessingResult, ProcessingStats, Transaction, TransactionType


class TestTransactionType:
    def test_parse_case_insensitive(self):
        assert TransactionType.parse("Deposit") == TransactionType.DEPOSIT
        assert TransactionType.parse(" CHARGEBACK ") == TransactionType.CHARGEBACK

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            TransactionType.parse("refund")

    def test_carries_amount(self):
        assert TransactionType.DEPOSIT.carries_amount
        assert TransactionType.WITHDRAWAL.carries_amount
        assert not TransactionType.DISPUTE.carries_amount
        assert not TransactionType.RESOLVE.carries_amount
        assert not TransactionType.CHARGEBACK.carries_amount


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_immutable(self):
        transaction = Transaction(TransactionType.DISPUTE, client_id=1, transaction_id=1)
        with pytest.raises(FrozenInstanceError):
            transaction.client_id = 2


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_total_saturates(self):
        account = ClientAccount(client_id=1, available=MAX_AMOUNT, held=Decimal("1"))
        assert account.total == MAX_AMOUNT


class TestProcessingStats:
    def test_counts(self):
        stats = ProcessingStats()
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.IGNORED)
        stats.record_malformed()

        assert stats.applied == 2
        assert stats.ignored == 1
        assert stats.malformed == 1
        assert stats.total == 4
