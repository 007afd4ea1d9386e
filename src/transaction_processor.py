import logging
from decimal import Decimal

from errors import AccountError, InvalidTransactionError
from models import Transaction, TransactionType, ClientAccount, ProcessingResult
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Validates transactions and applies them to state.
    Each transaction is either fully applied or fully rejected.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the client's account
            REJECTED: Failed validation or the account refused it; state is unchanged
        """
        try:
            self.validate_transaction(transaction)
            self._dispatch(transaction)
        except (InvalidTransactionError, AccountError) as e:
            logger.warning(f"Ignoring {transaction!r}: {e}")
            return ProcessingResult.REJECTED
        return ProcessingResult.SUCCESS

    def validate_transaction(self, transaction: Transaction) -> None:
        """Static and history checks, in order. Raises InvalidTransactionError on the first failure."""
        if transaction.requires_amount() and transaction.amount is None:
            raise InvalidTransactionError("deposit and withdrawal transactions must have an amount")

        if transaction.is_dispute_related() and transaction.amount is not None:
            raise InvalidTransactionError("dispute, resolve and chargeback transactions must not have an amount")

        if transaction.amount is not None and transaction.amount <= Decimal("0"):
            raise InvalidTransactionError(f"amount must be positive, got {transaction.amount}")

        if transaction.requires_amount() and self._state.has_transaction(transaction.transaction_id):
            raise InvalidTransactionError(f"duplicate transaction id {transaction.transaction_id}")

    def _dispatch(self, transaction: Transaction) -> None:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(transaction)

    def _handle_deposit(self, transaction: Transaction) -> None:
        account = self._state.get_or_create_account(transaction.client_id)
        account.deposit(transaction.amount)
        self._state.store_transaction(transaction)

    def _handle_withdrawal(self, transaction: Transaction) -> None:
        account = self._state.get_or_create_account(transaction.client_id)
        account.withdraw(transaction.amount)
        self._state.store_transaction(transaction)

    def _handle_dispute(self, transaction: Transaction) -> None:
        original = self._find_original(transaction)

        # TODO: Withdrawal disputes (fraud claims) could be supported by tracking payment state and attempting to recall funds
        if original.transaction_type != TransactionType.DEPOSIT:
            raise InvalidTransactionError(
                f"only deposits can be disputed, tx {original.transaction_id} is a {original.transaction_type.value}"
            )

        account = self._existing_account(transaction)
        account.dispute(original.amount, transaction.transaction_id)

    def _handle_resolve(self, transaction: Transaction) -> None:
        self._find_original(transaction)
        account = self._existing_account(transaction)
        account.resolve(transaction.transaction_id)

    def _handle_chargeback(self, transaction: Transaction) -> None:
        self._find_original(transaction)
        account = self._existing_account(transaction)
        account.chargeback(transaction.transaction_id)

    def _find_original(self, transaction: Transaction) -> Transaction:
        """Look up the deposit/withdrawal a dispute-related record refers to."""
        action = transaction.transaction_type.value
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            raise InvalidTransactionError(f"cannot {action} unknown transaction {transaction.transaction_id}")

        if original.client_id != transaction.client_id:
            raise InvalidTransactionError(
                f"cannot {action} transaction {transaction.transaction_id} of client {original.client_id} from client {transaction.client_id}"
            )

        return original

    def _existing_account(self, transaction: Transaction) -> ClientAccount:
        account = self._state.get_account(transaction.client_id)
        if account is None:
            raise InvalidTransactionError(f"no account for client {transaction.client_id}")
        return account
