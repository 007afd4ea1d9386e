from typing import Optional


class PaymentsError(Exception):
    """Base class for all payments engine errors."""


class AccountError(PaymentsError):
    """Account operation refused. The record is skipped, the run continues."""

    message = "Account error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class AccountLockedError(AccountError):
    message = "Account is locked"


class InsufficientFundsError(AccountError):
    message = "Insufficient funds"


class TransactionAlreadyDisputedError(AccountError):
    message = "Transaction already disputed"


class TransactionNotDisputedError(AccountError):
    message = "Transaction not disputed"


class InvalidTransactionError(PaymentsError):
    """Transaction failed validation against static rules or history."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid transaction: {reason}")
        self.reason = reason


class ParseError(PaymentsError):
    """Input row could not be turned into a Transaction. Fatal to the run."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"Line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason
