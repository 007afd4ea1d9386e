import logging
import sys
from typing import Iterable, List, Optional

from csv_io import read_transactions
from models import Transaction, ClientAccount, AccountSnapshot, ProcessingResult, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays an ordered transaction stream against client accounts.
    Rejected transactions are logged and skipped; parse and I/O errors abort the run.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> List[AccountSnapshot]:
        """Process CSV file and return final account snapshots ordered by client id."""
        logger.info(f"Processing transactions from {filepath}")

        with open(filepath, "r", newline="", encoding="utf-8") as f:
            self.process_transactions(read_transactions(f))

        # Print final processing report to stderr
        print(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}",
            file=sys.stderr
        )

        return self.snapshot_accounts()

    def process_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Apply transactions strictly in the order given."""
        for transaction in transactions:
            self.process_transaction(transaction)

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        result = self._processor.process_transaction(transaction)

        if result == ProcessingResult.SUCCESS:
            self._stats.record_success()
        else:
            self._stats.record_failure()
        return result

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._state.get_account(client_id)

    def snapshot_accounts(self) -> List[AccountSnapshot]:
        """Rounded view of every account, ascending by client id. Stored balances are untouched."""
        return [account.snapshot() for account in self._state.get_all_accounts()]
