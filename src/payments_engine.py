import logging
from typing import Dict, Iterable, Optional, TextIO

from config import EngineConfig
from csv_io import read_transactions
from models import ClientAccount, ProcessingStats, Transaction
from state import LedgerState
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Drives transactions through the processor in the order they are read.
    Single-threaded: per-client order is the file order.
    """

    def __init__(self, config: Optional[EngineConfig] = None, state: Optional[LedgerState] = None):
        self._config = config or EngineConfig()
        self._state = state or LedgerState()
        self._processor = TransactionProcessor(self._state, self._config.make_policy())
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def state(self) -> LedgerState:
        return self._state

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="", encoding="utf-8-sig") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        """Process an open CSV stream and return final account states."""
        logger.info("Starting processing")
        self.process_transactions(read_transactions(stream, self._stats))
        logger.info(
            f"Processing complete: applied={self._stats.applied}, "
            f"ignored={self._stats.ignored}, malformed={self._stats.malformed}, "
            f"clients={len(self._state.ledger)}"
        )
        return self._state.ledger.accounts()

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply already parsed transactions, in iteration order."""
        for transaction in transactions:
            self._stats.record(self._processor.process_transaction(transaction))
        return self._state.ledger.accounts()
