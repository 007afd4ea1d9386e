import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from errors import (
    AccountLockedError,
    InsufficientFundsError,
    TransactionAlreadyDisputedError,
    TransactionNotDisputedError,
)

logger = logging.getLogger(__name__)

OUTPUT_PRECISION = 4
_OUTPUT_QUANTUM = Decimal(1).scaleb(-OUTPUT_PRECISION)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def requires_amount(self) -> bool:
        return self.transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)

    def is_dispute_related(self) -> bool:
        return self.transaction_type in (
            TransactionType.DISPUTE,
            TransactionType.RESOLVE,
            TransactionType.CHARGEBACK,
        )

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


def round_for_output(value: Decimal) -> Decimal:
    """Round to OUTPUT_PRECISION places; values already that precise are left as is."""
    if value.as_tuple().exponent >= -OUTPUT_PRECISION:
        return value
    return value.quantize(_OUTPUT_QUANTUM)


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass
class ClientAccount:
    """
    Per-client balance state machine.
    Every operation checks all of its preconditions before touching any field,
    so a refused operation leaves the account exactly as it was.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False
    disputed_transactions: Dict[int, Decimal] = field(default_factory=dict)

    def deposit(self, amount: Decimal) -> None:
        if self.locked:
            raise AccountLockedError()

        self.available += amount
        self.total += amount

    def withdraw(self, amount: Decimal) -> None:
        if self.locked:
            raise AccountLockedError()

        if self.available < amount:
            raise InsufficientFundsError()

        self.available -= amount
        self.total -= amount

    def dispute(self, amount: Decimal, transaction_id: int) -> None:
        """
        Move the disputed amount from available to held.

        If part of the deposit has already been withdrawn, only what is still
        available gets held, and that reduced amount is what resolve/chargeback
        later release or remove.
        """
        if self.locked:
            raise AccountLockedError()

        if transaction_id in self.disputed_transactions:
            raise TransactionAlreadyDisputedError()

        if self.available < amount:
            logger.warning(
                f"Dispute for tx {transaction_id}: only {self.available} available, holding that instead of {amount}"
            )
            amount = self.available

        self.available -= amount
        self.held += amount
        self.disputed_transactions[transaction_id] = amount

    def resolve(self, transaction_id: int) -> None:
        if self.locked:
            raise AccountLockedError()

        amount = self.disputed_transactions.get(transaction_id)
        if amount is None:
            raise TransactionNotDisputedError()

        self.held -= amount
        self.available += amount
        del self.disputed_transactions[transaction_id]

    def chargeback(self, transaction_id: int) -> None:
        # No lock check: a chargeback is what locks the account in the first place.
        amount = self.disputed_transactions.get(transaction_id)
        if amount is None:
            raise TransactionNotDisputedError()

        self.held -= amount
        self.total -= amount
        self.locked = True
        del self.disputed_transactions[transaction_id]

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=round_for_output(self.available),
            held=round_for_output(self.held),
            total=round_for_output(self.total),
            locked=self.locked,
        )


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.failed = 0

    def record_success(self):
        self.processed += 1

    def record_failure(self):
        self.failed += 1
