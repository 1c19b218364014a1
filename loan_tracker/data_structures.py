import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Any

from loan_tracker.config import (
    DEFAULT_INTEREST_RATE, DAYS_PER_YEAR, MIN_AMOUNT, MAX_AMOUNT,
    MAX_NOTE_LENGTH, LOAN_OUT_LABEL, PAYMENT_LABEL, DATE_FORMAT_STORAGE
)


class TransactionType(Enum):
    LOAN_OUT = "LoanOut"
    PAYMENT = "Payment"


@dataclass(frozen=True)
class EngineConfig:
    """Runtime parameters shared by every engine service.

    Defaults come from ``loan_tracker.config``; callers override any of them
    per instance instead of patching module constants.
    """
    interest_rate: float = DEFAULT_INTEREST_RATE
    min_amount: Decimal = Decimal(str(MIN_AMOUNT))
    max_amount: Decimal = Decimal(str(MAX_AMOUNT))
    max_note_length: int = MAX_NOTE_LENGTH
    loan_out_label: str = LOAN_OUT_LABEL
    payment_label: str = PAYMENT_LABEL

    def __post_init__(self):
        # Accept plain numbers for the bounds
        object.__setattr__(self, 'min_amount', Decimal(str(self.min_amount)))
        object.__setattr__(self, 'max_amount', Decimal(str(self.max_amount)))
        if self.interest_rate < 0:
            raise ValueError(f"Interest rate cannot be negative: {self.interest_rate}")
        if self.min_amount <= 0 or self.min_amount > self.max_amount:
            raise ValueError(f"Invalid amount bounds: {self.min_amount} - {self.max_amount}")
        if self.max_note_length < 0:
            raise ValueError(f"Invalid notes limit: {self.max_note_length}")
        if self.loan_out_label == self.payment_label:
            raise ValueError("Transaction type labels must be distinct")

    @property
    def rate(self) -> Decimal:
        return Decimal(str(self.interest_rate))

    @property
    def type_labels(self) -> Dict[TransactionType, str]:
        return {
            TransactionType.LOAN_OUT: self.loan_out_label,
            TransactionType.PAYMENT: self.payment_label,
        }

    def label_for(self, tx_type: TransactionType) -> str:
        return self.type_labels[tx_type]

    def parse_type(self, label) -> Optional[TransactionType]:
        """Map an exact type label to its enum member, or None."""
        for tx_type, known in self.type_labels.items():
            if label == known:
                return tx_type
        return None

    def with_rate(self, interest_rate: float) -> 'EngineConfig':
        return replace(self, interest_rate=float(interest_rate))


def generate_transaction_id() -> str:
    """Unique id of the form ``txn_<epoch ms>_<9 hex chars>``."""
    return f"txn_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class Transaction:
    """One accepted loan or payment event. Never mutated once in a ledger."""
    id: str
    date: date
    type: TransactionType
    amount: Decimal
    notes: str = ""
    timestamp: Optional[datetime] = None

    @property
    def is_loan(self) -> bool:
        return self.type is TransactionType.LOAN_OUT

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_loan else -self.amount

    def to_record(self, config: EngineConfig) -> Dict[str, Any]:
        """Serialize to the persisted/backup record schema."""
        return {
            'id': self.id,
            'date': self.date.strftime(DATE_FORMAT_STORAGE),
            'type': config.label_for(self.type),
            'amount': float(self.amount),
            'notes': self.notes,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class TimelineRow:
    """A ledger entry annotated with interest and running balance.

    ``transaction`` is None for the synthetic trailing row that carries
    interest accrued from the last transaction up to today.
    """
    date: date
    transaction: Optional[Transaction]
    days_since_previous: int
    interest_accrued: Decimal
    running_balance_after: Decimal

    @property
    def is_current_interest(self) -> bool:
        return self.transaction is None


@dataclass(frozen=True)
class StatisticsSnapshot:
    current_balance: Decimal = Decimal("0")
    total_loaned: Decimal = Decimal("0")
    total_payments: Decimal = Decimal("0")
    total_interest: Decimal = Decimal("0")
    loan_count: int = 0
    payment_count: int = 0
    days_active: int = 0
    effective_rate: Decimal = Decimal("0")
    annualized_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class FieldIssue:
    field: str
    code: str
    message: str


@dataclass
class ValidationReport:
    """Outcome of validating one candidate transaction.

    ``errors`` and ``warnings`` map a field name to every issue found for
    it. ``values`` holds the normalized value of each field that passed.
    """
    errors: Dict[str, List[FieldIssue]] = field(default_factory=dict)
    warnings: Dict[str, List[FieldIssue]] = field(default_factory=dict)
    values: Dict[str, Any] = field(default_factory=dict)
    duplicate: Optional[Transaction] = None

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def add_error(self, field_name: str, code: str, message: str):
        self.errors.setdefault(field_name, []).append(FieldIssue(field_name, code, message))

    def add_warning(self, field_name: str, code: str, message: str):
        self.warnings.setdefault(field_name, []).append(FieldIssue(field_name, code, message))

    def error_codes(self, field_name: str) -> List[str]:
        return [issue.code for issue in self.errors.get(field_name, [])]

    def warning_codes(self, field_name: str) -> List[str]:
        return [issue.code for issue in self.warnings.get(field_name, [])]

    def warning_messages(self) -> List[str]:
        """Flat list of warning messages, for a confirm-to-proceed prompt."""
        return [issue.message for issues in self.warnings.values() for issue in issues]
