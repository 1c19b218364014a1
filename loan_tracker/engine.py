"""Business logic engine for Loan Tracker.

This module provides the LoanTracker class which acts as a facade over the
focused service classes in loan_tracker/services/. A LoanTracker is an
explicit, caller-owned instance; there is no module-level application
state.

Service Classes:
    - TransactionValidator: field validation and duplicate advisories
    - LedgerEngine: ordered storage and timeline replay
    - compute_statistics: aggregate figures over a timeline
"""
import threading
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping

from loan_tracker import backup, reports
from loan_tracker.config import SETTING_INTEREST_RATE
from loan_tracker.data_structures import (
    EngineConfig, StatisticsSnapshot, TimelineRow, Transaction, ValidationReport,
    generate_transaction_id
)
from loan_tracker.exceptions import FormatError, ValidationError
from loan_tracker.formatting import describe_statistics
from loan_tracker.logging_setup import get_logger
from loan_tracker.result import Result, ErrorType
from loan_tracker.services import LedgerEngine, TransactionValidator, compute_statistics
from loan_tracker.services.validation import parse_decimal

logger = get_logger(__name__)


class LoanTracker:
    """Tracks one running loan balance.

    Attributes:
        config: Engine parameters in effect.
        store: Optional TransactionStore; when set, saved data is loaded on
            construction and the ledger is saved after every mutation.
        validator: TransactionValidator instance.
        ledger: LedgerEngine instance.
    """

    def __init__(self, config: EngineConfig = None, store=None, clock: Callable[[], date] = None):
        self.config = config or EngineConfig()
        self.store = store
        self.clock = clock or date.today
        self._lock = threading.RLock()

        if store is not None:
            saved_rate = store.get_setting(SETTING_INTEREST_RATE)
            if saved_rate is not None:
                self.config = self.config.with_rate(float(saved_rate))

        self.validator = TransactionValidator(self.config, self.clock)
        self.ledger = LedgerEngine(self.config, self.clock)

        if store is not None:
            self._load()

    def _load(self):
        try:
            transactions = self.store.load_transactions(self.config)
        except FormatError as e:
            logger.warning("Failed to load saved data. Starting fresh: %s", e)
            return
        self.ledger.replace(transactions)
        logger.info("Loaded %d saved transactions", len(transactions))

    def _save(self):
        if self.store is not None:
            self.store.save_transactions(self.ledger.transactions(), self.config)

    @property
    def interest_rate(self) -> float:
        return self.config.interest_rate

    def set_interest_rate(self, rate: float):
        """Change the annual rate used for all subsequent computations.

        Raises:
            ValidationError: The rate is not a finite number or is negative.
                Nothing is changed or persisted.
        """
        value = parse_decimal(rate)
        if value is None:
            raise ValidationError(SETTING_INTEREST_RATE, ErrorType.INVALID_NUMBER,
                                  "Please enter a valid interest rate")
        if value < 0:
            raise ValidationError(SETTING_INTEREST_RATE, ErrorType.TOO_LOW,
                                  "Interest rate cannot be negative")
        with self._lock:
            self.config = self.config.with_rate(float(value))
            self.validator.config = self.config
            self.ledger.config = self.config
            if self.store is not None:
                self.store.set_setting(SETTING_INTEREST_RATE, self.config.interest_rate)
        logger.info("Interest rate set to %s", self.config.interest_rate)

    def transactions(self):
        return self.ledger.transactions()

    def validate(self, raw: Mapping) -> ValidationReport:
        """Validate a creation request against the current ledger."""
        return self.validator.validate_transaction(raw, self.ledger.transactions(), today=self.clock())

    def add_transaction(self, raw: Mapping, proceed_past_warnings: bool = False) -> Result:
        """Validate and insert a creation request.

        Args:
            raw: Mapping with ``date``, ``type``, ``amount`` and ``notes``.
            proceed_past_warnings: Accept the transaction even if it raised
                future-date or duplicate advisories.

        Returns:
            Result with the new Transaction, or a failure of type VALIDATION
            or WARNINGS_PENDING carrying the ValidationReport in ``details``.
        """
        with self._lock:
            report = self.validate(raw)
            if not report.valid:
                return Result.fail("Please fix the form errors before submitting",
                                   ErrorType.VALIDATION, report)
            if report.has_warnings and not proceed_past_warnings:
                return Result.fail("Warning:\n" + "\n".join(report.warning_messages()),
                                   ErrorType.WARNINGS_PENDING, report)

            values = report.values
            transaction = Transaction(
                id=generate_transaction_id(),
                date=values['date'],
                type=values['type'],
                amount=values['amount'],
                notes=values['notes'],
                timestamp=datetime.now(timezone.utc),
            )
            self.ledger.insert(transaction)
            self._save()

        advisories = [(issue.code, issue.message) for issues in report.warnings.values() for issue in issues]
        return Result(success=True, value=transaction, warnings=advisories, details=report)

    def delete_transaction(self, transaction_id: str) -> Transaction:
        """Remove a transaction by id.

        Raises:
            TransactionNotFoundError: If no transaction has that id.
        """
        with self._lock:
            removed = self.ledger.remove(transaction_id)
            self._save()
        return removed

    def clear_all(self):
        with self._lock:
            self.ledger.clear()
            self._save()

    def timeline(self, today: date = None) -> List[TimelineRow]:
        return self.ledger.compute_timeline(today)

    def statistics(self, today: date = None) -> StatisticsSnapshot:
        return compute_statistics(self.ledger.compute_timeline(today))

    def summary(self, today: date = None) -> Dict[str, str]:
        with self._lock:
            snapshot = self.statistics(today)
            return describe_statistics(snapshot, self.ledger.transactions(), self.config, today or self.clock())

    def export_backup(self, now: datetime = None) -> Dict[str, Any]:
        return backup.build_backup(self.ledger.transactions(), self.config, now)

    def save_backup(self, path, now: datetime = None) -> Dict[str, Any]:
        return backup.write_backup_file(path, self.ledger.transactions(), self.config, now)

    def import_backup(self, data) -> int:
        """Replace the ledger with a backup document's transactions.

        Raises:
            FormatError: The document is malformed. The ledger is untouched.
        """
        transactions = backup.parse_backup(data, self.config)
        with self._lock:
            self.ledger.replace(transactions)
            self._save()
        logger.info("Loaded %d transactions from backup", len(transactions))
        return len(transactions)

    def load_backup_file(self, path) -> int:
        return self.import_backup(backup.read_backup_file(path))

    def export_csv(self, path=None, today: date = None) -> str:
        return reports.export_csv(self.timeline(today), self.config, path)

    def export_excel(self, path, today: date = None) -> bool:
        return reports.export_excel(self.timeline(today), path, self.config)
