"""
CSV boundaries of the engine.

Input rows look like ``type, client, tx, amount``; whitespace around fields
is ignored and the amount column is empty for dispute, resolve and
chargeback. Output is one ``client,available,held,total,locked`` row per
client with amounts printed to 4 decimal places.
"""
import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Mapping, Optional, TextIO

from amount import MAX_AMOUNT, format_amount, to_amount
from errors import MalformedRecordError
from models import MAX_CLIENT_ID, MAX_TRANSACTION_ID, ClientAccount, ProcessingStats, Transaction, TransactionType

logger = logging.getLogger(__name__)

INPUT_COLUMNS = ("type", "client", "tx", "amount")
OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")


def _parse_id(value: str, name: str, upper: int, line_number: Optional[int]) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise MalformedRecordError(f"{name} {value!r} is not an integer", line_number) from None
    if not 0 <= parsed <= upper:
        raise MalformedRecordError(f"{name} {parsed} out of range 0..{upper}", line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise MalformedRecordError(f"amount {value!r} is not a decimal", line_number) from None
    if not amount.is_finite():
        raise MalformedRecordError(f"amount {value!r} is not a finite decimal", line_number)
    if amount < 0:
        raise MalformedRecordError(f"amount {value!r} is negative", line_number)
    if amount > MAX_AMOUNT:
        raise MalformedRecordError(f"amount {value!r} exceeds the maximum {MAX_AMOUNT}", line_number)
    return to_amount(amount)


def parse_row(row: Mapping[Optional[str], Optional[str]], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction, raising MalformedRecordError on bad input."""
    # DictReader puts surplus fields under None and fills short rows with None.
    normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

    try:
        transaction_type = TransactionType.parse(normalized["type"])
    except KeyError:
        raise MalformedRecordError("missing type column", line_number) from None
    except ValueError:
        raise MalformedRecordError(f"unknown transaction type {normalized['type']!r}", line_number) from None

    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    if transaction_type.carries_amount:
        amount_str = normalized.get("amount", "")
        if not amount_str:
            raise MalformedRecordError(f"{transaction_type.value} requires an amount", line_number)
        amount = _parse_amount(amount_str, line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def read_transactions(stream: TextIO, stats: Optional[ProcessingStats] = None) -> Iterator[Transaction]:
    """
    Yield transactions from a CSV stream in file order.

    Malformed rows are logged and skipped. A header without the required
    columns makes the whole input unusable and raises MalformedRecordError.
    """
    reader = csv.DictReader(stream)
    header = [name.strip().lower() for name in reader.fieldnames or []]
    missing = [name for name in INPUT_COLUMNS[:3] if name not in header]
    if missing:
        raise MalformedRecordError(f"header is missing columns: {', '.join(missing)}", 1)

    for row in reader:
        if not any((v or "").strip() for k, v in row.items() if isinstance(k, str)):
            continue
        try:
            yield parse_row(row, reader.line_num)
        except MalformedRecordError as e:
            logger.warning(f"Skipping row: {e}")
            if stats is not None:
                stats.record_malformed()


def account_row(account: ClientAccount) -> Dict[str, str]:
    return {
        "client": str(account.client_id),
        "available": format_amount(account.available),
        "held": format_amount(account.held),
        "total": format_amount(account.total),
        "locked": str(account.locked).lower(),
    }


def write_accounts(accounts: Mapping[int, ClientAccount], stream: TextIO) -> None:
    """Write one row per client, ordered by client id."""
    writer = csv.DictWriter(stream, fieldnames=OUTPUT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for client_id in sorted(accounts):
        writer.writerow(account_row(accounts[client_id]))
