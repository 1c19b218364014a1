"""Backup import/export for Loan Tracker.

Backups are JSON documents of the form::

    {
      "version": "1.0",
      "exportDate": "2024-03-01T12:00:00+00:00",
      "interestRate": 0.0825,
      "transactions": [{"id", "date", "type", "amount", "notes", "timestamp"}, ...],
      "metadata": {"totalTransactions": 2, "dateRange": {"start", "end"} | null}
    }

Parsing is all-or-nothing: ``parse_backup`` either returns every
transaction or raises FormatError describing every problem found.
"""
import json
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Sequence

from dateutil import parser as date_parser

from loan_tracker.config import BACKUP_PREFIX, DATA_VERSION, DATE_FORMAT_STORAGE
from loan_tracker.data_structures import EngineConfig, Transaction, generate_transaction_id
from loan_tracker.exceptions import FormatError
from loan_tracker.logging_setup import get_logger
from loan_tracker.services.validation import TransactionValidator

logger = get_logger(__name__)

REQUIRED_FIELDS = ('date', 'type', 'amount')


def default_backup_filename(today: date = None) -> str:
    today = today or date.today()
    return f"{BACKUP_PREFIX}{today.strftime(DATE_FORMAT_STORAGE)}.json"


def build_backup(transactions: Sequence[Transaction], config: EngineConfig = None,
                 now: datetime = None) -> Dict[str, Any]:
    """Serialize a ledger (in order) to the backup schema."""
    config = config or EngineConfig()
    now = now or datetime.now(timezone.utc)
    transactions = list(transactions)

    date_range = None
    if transactions:
        date_range = {
            'start': transactions[0].date.strftime(DATE_FORMAT_STORAGE),
            'end': transactions[-1].date.strftime(DATE_FORMAT_STORAGE),
        }

    return {
        'version': DATA_VERSION,
        'exportDate': now.isoformat(),
        'interestRate': config.interest_rate,
        'transactions': [tx.to_record(config) for tx in transactions],
        'metadata': {
            'totalTransactions': len(transactions),
            'dateRange': date_range,
        },
    }


def dumps(backup: Dict[str, Any]) -> str:
    return json.dumps(backup, indent=2)


def write_backup_file(path, transactions: Sequence[Transaction], config: EngineConfig = None,
                      now: datetime = None) -> Dict[str, Any]:
    backup = build_backup(transactions, config, now)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(dumps(backup))
    logger.info("Wrote backup of %d transactions to %s", len(backup['transactions']), path)
    return backup


def read_backup_file(path) -> Dict[str, Any]:
    """Load a backup document. Invalid JSON raises FormatError."""
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise FormatError("Invalid file format. Please select a valid backup file.",
                          {'json': str(e)})


def _parse_timestamp(raw, default: datetime) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            return date_parser.isoparse(raw.strip())
        except (ValueError, OverflowError):
            logger.warning("Unparseable timestamp %r, using import time", raw)
    return default


def transaction_from_record(record, config: EngineConfig = None, now: datetime = None) -> Transaction:
    """Rebuild a Transaction from a persisted record.

    Notes are stored already sanitized, so they are length-checked and
    rejected if they carry raw markup, but never escaped a second time.
    A missing id is regenerated and a missing timestamp defaults to
    ``now``.

    Raises:
        FormatError: With one entry per invalid field.
    """
    config = config or EngineConfig()
    if not isinstance(record, dict):
        raise FormatError("Invalid transaction record", {'record': 'expected an object'})

    validator = TransactionValidator(config)
    problems = {}
    for name in REQUIRED_FIELDS:
        if record.get(name) is None:
            problems[name] = 'missing'

    values = {}
    if 'date' not in problems:
        result = validator.validate_date(record['date'], today=date.max)
        if result:
            values['date'] = result.value
        else:
            problems['date'] = result.error
    if 'type' not in problems:
        result = validator.validate_type(record['type'])
        if result:
            values['type'] = result.value
        else:
            problems['type'] = result.error
    if 'amount' not in problems:
        result = validator.validate_amount(record['amount'])
        if result:
            values['amount'] = result.value
        else:
            problems['amount'] = result.error

    notes = record.get('notes') or ""
    if not isinstance(notes, str):
        problems['notes'] = 'must be text'
    elif len(notes) > config.max_note_length:
        problems['notes'] = f"longer than {config.max_note_length} characters"
    elif "<" in notes or ">" in notes:
        problems['notes'] = "contains unescaped markup"

    if problems:
        raise FormatError("Invalid transaction record", problems)

    raw_id = record.get('id')
    return Transaction(
        id=str(raw_id) if raw_id not in (None, "") else generate_transaction_id(),
        date=values['date'],
        type=values['type'],
        amount=values['amount'],
        notes=notes,
        timestamp=_parse_timestamp(record.get('timestamp'), now or datetime.now(timezone.utc)),
    )


def parse_records(records, config: EngineConfig = None, now: datetime = None) -> List[Transaction]:
    """Convert a list of records, failing as a whole on any bad record."""
    if not isinstance(records, list):
        raise FormatError("Invalid backup file format", {'transactions': 'must be a list'})

    now = now or datetime.now(timezone.utc)
    transactions = []
    problems = {}
    seen_ids = set()
    for index, record in enumerate(records):
        try:
            tx = transaction_from_record(record, config, now)
        except FormatError as e:
            for field_name, problem in e.details.items():
                problems[f"transactions[{index}].{field_name}"] = problem
            continue
        if tx.id in seen_ids:
            problems[f"transactions[{index}].id"] = f"duplicate id '{tx.id}'"
            continue
        seen_ids.add(tx.id)
        transactions.append(tx)

    if problems:
        raise FormatError("Invalid backup file format", problems)
    return transactions


def parse_backup(data, config: EngineConfig = None, now: datetime = None) -> List[Transaction]:
    """Validate a backup document and return its transactions.

    Raises:
        FormatError: ``transactions`` is absent or not a list, or any record
            is invalid. Nothing is returned in that case.
    """
    if not isinstance(data, dict):
        raise FormatError("Invalid data format", {'format': 'expected an object'})
    if 'transactions' not in data:
        raise FormatError("Invalid backup file format", {'transactions': 'missing'})

    transactions = parse_records(data['transactions'], config, now)

    config = config or EngineConfig()
    backup_rate = data.get('interestRate')
    if backup_rate is not None and backup_rate != config.interest_rate:
        logger.warning("Backup interest rate %s differs from configured rate %s",
                       backup_rate, config.interest_rate)
    return transactions
