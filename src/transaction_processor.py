import logging
from dataclasses import replace
from typing import NamedTuple, Optional, Union

from amount import MAX_AMOUNT, AmountPolicy, SaturatingPolicy, to_amount
from models import (
    ClientAccount,
    DisputeState,
    HistoryEntry,
    IgnoreReason,
    ProcessingResult,
    Transaction,
    TransactionType,
)
from state import LedgerState

logger = logging.getLogger(__name__)


class RuleOutcome(NamedTuple):
    account: ClientAccount
    entry: Optional[HistoryEntry]


RuleResult = Union[RuleOutcome, IgnoreReason]


def apply_deposit(account: ClientAccount, entry: Optional[HistoryEntry], transaction: Transaction,
                  policy: AmountPolicy) -> RuleResult:
    if transaction.amount is None or transaction.amount < 0:
        return IgnoreReason.INVALID_AMOUNT
    amount = to_amount(transaction.amount)
    # Clamp the account total, not just available, so available + held stays in range.
    total = policy.add(policy.add(account.available, account.held), amount)
    return RuleOutcome(
        replace(account, available=policy.sub(total, account.held)),
        HistoryEntry(client_id=transaction.client_id, amount=amount),
    )


def apply_withdrawal(account: ClientAccount, entry: Optional[HistoryEntry], transaction: Transaction,
                     policy: AmountPolicy) -> RuleResult:
    if transaction.amount is None or transaction.amount < 0:
        return IgnoreReason.INVALID_AMOUNT
    amount = to_amount(transaction.amount)
    if account.available < amount:
        return IgnoreReason.INSUFFICIENT_FUNDS
    return RuleOutcome(replace(account, available=policy.sub(account.available, amount)), None)


def _check_reference(entry: Optional[HistoryEntry], transaction: Transaction,
                     required_state: DisputeState) -> Optional[IgnoreReason]:
    if entry is None:
        return IgnoreReason.UNKNOWN_TRANSACTION
    if entry.client_id != transaction.client_id:
        return IgnoreReason.CLIENT_MISMATCH
    if entry.dispute_state != required_state:
        if required_state == DisputeState.NORMAL:
            return IgnoreReason.NOT_DISPUTABLE
        return IgnoreReason.NOT_DISPUTED
    return None


def apply_dispute(account: ClientAccount, entry: Optional[HistoryEntry], transaction: Transaction,
                  policy: AmountPolicy) -> RuleResult:
    reason = _check_reference(entry, transaction, DisputeState.NORMAL)
    if reason is not None:
        return reason
    # Funds already withdrawn cannot be held again.
    if account.available < entry.amount:
        return IgnoreReason.INSUFFICIENT_FUNDS
    if account.held > policy.sub(MAX_AMOUNT, entry.amount):
        return IgnoreReason.HOLD_LIMIT
    updated = replace(
        account,
        available=policy.sub(account.available, entry.amount),
        held=policy.add(account.held, entry.amount),
    )
    return RuleOutcome(updated, replace(entry, dispute_state=DisputeState.DISPUTED))


def apply_resolve(account: ClientAccount, entry: Optional[HistoryEntry], transaction: Transaction,
                  policy: AmountPolicy) -> RuleResult:
    reason = _check_reference(entry, transaction, DisputeState.DISPUTED)
    if reason is not None:
        return reason
    updated = replace(
        account,
        held=policy.sub(account.held, entry.amount),
        available=policy.add(account.available, entry.amount),
    )
    return RuleOutcome(updated, replace(entry, dispute_state=DisputeState.NORMAL))


def apply_chargeback(account: ClientAccount, entry: Optional[HistoryEntry], transaction: Transaction,
                     policy: AmountPolicy) -> RuleResult:
    reason = _check_reference(entry, transaction, DisputeState.DISPUTED)
    if reason is not None:
        return reason
    updated = replace(account, held=policy.sub(account.held, entry.amount), locked=True)
    return RuleOutcome(updated, replace(entry, dispute_state=DisputeState.CHARGED_BACK))


class TransactionProcessor:
    """
    Applies transactions to a LedgerState, one at a time, in arrival order.

    Business-rule violations never raise: the record is dropped and
    ProcessingResult.IGNORED is returned. The rule functions above are pure;
    this class looks up their inputs and writes their outcome back.
    """

    def __init__(self, state: LedgerState, policy: Optional[AmountPolicy] = None):
        self._state = state
        self._policy = policy or SaturatingPolicy()

    @property
    def state(self) -> LedgerState:
        return self._state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: The ledger and history were updated
            IGNORED: A precondition failed; nothing changed
        """
        ledger = self._state.ledger
        entry = None

        if transaction.transaction_type.carries_amount:
            account = ledger.get_or_create(transaction.client_id)
        else:
            # Dispute-family records never open an account.
            account = ledger.get(transaction.client_id)
            if account is None:
                return self._ignore(transaction, IgnoreReason.UNKNOWN_ACCOUNT)
            entry = self._state.history.lookup(transaction.transaction_id)

        if account.locked:
            return self._ignore(transaction, IgnoreReason.ACCOUNT_LOCKED)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                result = apply_deposit(account, entry, transaction, self._policy)
            case TransactionType.WITHDRAWAL:
                result = apply_withdrawal(account, entry, transaction, self._policy)
            case TransactionType.DISPUTE:
                result = apply_dispute(account, entry, transaction, self._policy)
            case TransactionType.RESOLVE:
                result = apply_resolve(account, entry, transaction, self._policy)
            case TransactionType.CHARGEBACK:
                result = apply_chargeback(account, entry, transaction, self._policy)
            case _:
                raise ValueError(f"Unhandled transaction type: {transaction.transaction_type}")

        if isinstance(result, IgnoreReason):
            return self._ignore(transaction, result)

        self._commit(account, result, transaction)
        return ProcessingResult.APPLIED

    def _commit(self, account: ClientAccount, outcome: RuleOutcome, transaction: Transaction) -> None:
        account.available = outcome.account.available
        account.held = outcome.account.held
        account.locked = outcome.account.locked

        history = self._state.history
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                history.record_deposit(transaction.transaction_id, transaction.client_id, outcome.entry.amount)
            case TransactionType.DISPUTE:
                history.mark_disputed(transaction.transaction_id)
            case TransactionType.RESOLVE:
                history.mark_resolved(transaction.transaction_id)
            case TransactionType.CHARGEBACK:
                history.mark_charged_back(transaction.transaction_id)
                logger.info(f"Chargeback tx {transaction.transaction_id}: client {transaction.client_id} locked")

    @staticmethod
    def _ignore(transaction: Transaction, reason: IgnoreReason) -> ProcessingResult:
        logger.debug(f"Ignoring {transaction}: {reason.value}")
        return ProcessingResult.IGNORED
