"""Custom exceptions for the Loan Tracker engine."""


class LoanTrackerError(Exception):
    """Base exception for all Loan Tracker errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ValidationError(LoanTrackerError):
    """Raised when a single field or setting fails validation.

    Form fields are reported through ``Result`` values instead; this is
    raised for direct settings such as the interest rate.
    """

    def __init__(self, field: str, code: str, message: str = None):
        self.field = field
        self.code = code
        super().__init__(message or f"Invalid value for '{field}'", {'field': field, 'code': code})


class TransactionNotFoundError(LoanTrackerError):
    """Raised when a mutation references a transaction id that is not in the ledger."""

    def __init__(self, transaction_id: str = None):
        details = {}
        message = "Transaction not found"
        if transaction_id:
            details['transaction_id'] = transaction_id
            message = f"Transaction '{transaction_id}' not found"
        self.transaction_id = transaction_id
        super().__init__(message, details)


class FormatError(LoanTrackerError):
    """Raised when a backup or replacement set is structurally invalid.

    The ``details`` dict maps a location (``"transactions"`` or
    ``"transactions[3].amount"``) to a description of the problem.
    """
    pass


class StorageError(LoanTrackerError):
    """Raised when a storage operation fails."""
    pass


class StorageTransactionError(StorageError):
    """Raised when a storage transaction fails to complete."""
    pass
