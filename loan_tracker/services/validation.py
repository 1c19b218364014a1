"""Transaction validation service for Loan Tracker.

This service validates and normalizes one candidate transaction:
- Date parsing and future-date advisories
- Amount parsing, rounding to the cent and bounds checks
- Type label checks
- Notes sanitization and length limits

Every field validator returns a ``Result``; nothing here raises for bad
user input. ``validate_transaction`` runs all of them and folds the
duplicate check in, so one call reports every problem at once.
"""
import html
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Iterable, Mapping, Optional

from dateutil import parser as date_parser

from loan_tracker.config import CURRENCY_SYMBOL
from loan_tracker.data_structures import (
    EngineConfig, Transaction, TransactionType, ValidationReport
)
from loan_tracker.logging_setup import get_logger
from loan_tracker.result import Result, ErrorType
from loan_tracker.services.duplicates import find_duplicate

logger = get_logger(__name__)

CENT = Decimal("0.01")


def round_to_cent(value: Decimal) -> Decimal:
    """Round to 2 places, ties away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_date(raw) -> Optional[date]:
    """Parse a calendar date, returning None when it cannot be parsed."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return date_parser.isoparse(raw.strip()).date()
    except (ValueError, OverflowError):
        return None


def parse_decimal(raw) -> Optional[Decimal]:
    """Parse a finite number from a string or number, or return None.

    Strings may carry a leading currency symbol and thousands separators.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        text = str(raw)
    elif isinstance(raw, str):
        text = raw.strip().replace(",", "")
        if text.startswith(CURRENCY_SYMBOL):
            text = text[len(CURRENCY_SYMBOL):].strip()
    else:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def sanitize_text(raw: str) -> str:
    """Trim and escape markup characters."""
    return html.escape(raw.strip(), quote=False)


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class TransactionValidator:
    """Validates candidate transactions against an EngineConfig.

    The validator is stateless between calls; ``clock`` only supplies
    "today" for the future-date advisory.
    """

    def __init__(self, config: EngineConfig = None, clock: Callable[[], date] = None):
        """Initialize TransactionValidator.

        Args:
            config: Engine parameters (bounds, labels). Defaults apply if None.
            clock: Callable returning today's date. Defaults to date.today.
        """
        self.config = config or EngineConfig()
        self.clock = clock or date.today

    @property
    def messages(self):
        cfg = self.config
        return {
            ErrorType.INVALID_DATE: "Please enter a valid date",
            ErrorType.REQUIRED: "Please enter a valid amount",
            ErrorType.INVALID_NUMBER: "Please enter a valid amount",
            ErrorType.TOO_LOW: f"Amount must be at least ${cfg.min_amount}",
            ErrorType.TOO_HIGH: f"Amount cannot exceed ${cfg.max_amount:,}",
            ErrorType.INVALID_TYPE: "Invalid transaction type",
            ErrorType.TOO_LONG: f"Notes cannot exceed {cfg.max_note_length} characters",
            ErrorType.FUTURE_DATE: "Future dates will affect interest calculations",
            ErrorType.DUPLICATE: "Similar transaction detected. Are you sure you want to add this?",
        }

    def _fail(self, code: str) -> Result:
        return Result.fail(self.messages[code], code)

    def validate_date(self, raw, today: date = None) -> Result:
        parsed = parse_date(raw)
        if parsed is None:
            return self._fail(ErrorType.INVALID_DATE)

        today = today or self.clock()
        warnings = []
        if parsed > today:
            warnings.append((ErrorType.FUTURE_DATE, self.messages[ErrorType.FUTURE_DATE]))
        return Result.ok(parsed, warnings)

    def validate_amount(self, raw) -> Result:
        if _is_empty(raw):
            return self._fail(ErrorType.REQUIRED)

        value = parse_decimal(raw)
        if value is None:
            return self._fail(ErrorType.INVALID_NUMBER)

        try:
            amount = round_to_cent(value)
        except InvalidOperation:
            # Too many digits to carry cents at the context precision
            return self._fail(ErrorType.TOO_HIGH if value > 0 else ErrorType.TOO_LOW)
        if amount < self.config.min_amount:
            return self._fail(ErrorType.TOO_LOW)
        if amount > self.config.max_amount:
            return self._fail(ErrorType.TOO_HIGH)
        return Result.ok(amount)

    def validate_type(self, raw) -> Result:
        if isinstance(raw, TransactionType):
            return Result.ok(raw)
        tx_type = self.config.parse_type(raw)
        if tx_type is None:
            return self._fail(ErrorType.INVALID_TYPE)
        return Result.ok(tx_type)

    def validate_notes(self, raw) -> Result:
        if _is_empty(raw):
            return Result.ok("")

        sanitized = sanitize_text(str(raw))
        if len(sanitized) > self.config.max_note_length:
            return self._fail(ErrorType.TOO_LONG)
        return Result.ok(sanitized)

    def validate_transaction(self, candidate: Mapping, existing: Iterable[Transaction] = (),
                             today: date = None) -> ValidationReport:
        """Validate every field of a creation request.

        Args:
            candidate: Mapping with ``date``, ``type``, ``amount`` and
                ``notes`` entries; missing entries count as empty.
            existing: Current ledger contents for the duplicate check.
            today: Optional override for the current date.

        Returns:
            ValidationReport with all errors, warnings and normalized values.
        """
        report = ValidationReport()
        checks = (
            ('date', lambda raw: self.validate_date(raw, today)),
            ('amount', self.validate_amount),
            ('type', self.validate_type),
            ('notes', self.validate_notes),
        )
        for field_name, check in checks:
            result = check(candidate.get(field_name))
            if result.success:
                report.values[field_name] = result.value
                for code, message in result.warnings:
                    report.add_warning(field_name, code, message)
            else:
                report.add_error(field_name, result.error_type, result.error)

        if all(name in report.values for name in ('date', 'type', 'amount')):
            duplicate = find_duplicate(report.values, existing)
            if duplicate is not None:
                report.duplicate = duplicate
                report.add_warning('duplicate', ErrorType.DUPLICATE, self.messages[ErrorType.DUPLICATE])

        if not report.valid:
            logger.debug("Rejected transaction fields: %s", sorted(report.errors))
        return report
