"""Ledger service for Loan Tracker.

The LedgerEngine owns the ordered transaction collection. It keeps entries
sorted by date (stable, so same-date entries stay in insertion order) and
rebuilds the timeline on demand through the BalanceRecalculator.
"""
import threading
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from loan_tracker.data_structures import EngineConfig, TimelineRow, Transaction
from loan_tracker.exceptions import FormatError, TransactionNotFoundError
from loan_tracker.logging_setup import get_logger
from loan_tracker.services.balance_calculator import BalanceRecalculator

logger = get_logger(__name__)


def _by_date(tx: Transaction):
    return tx.date


class LedgerEngine:
    """Ordered collection of accepted transactions.

    Every mutation and every timeline computation runs under one lock, so a
    reader never sees the list mid-sort or mid-replace. The last timeline is
    memoized against a mutation counter and dropped on any change.

    Attributes:
        config: Engine parameters; the interest rate drives accrual.
        clock: Callable returning today's date for trailing interest.
    """

    def __init__(self, config: EngineConfig = None, clock: Callable[[], date] = None,
                 transactions: Iterable[Transaction] = None):
        self.config = config or EngineConfig()
        self.clock = clock or date.today
        self._lock = threading.RLock()
        self._transactions: List[Transaction] = []
        self._version = 0
        self._timeline_key = None
        self._timeline_rows: List[TimelineRow] = []
        if transactions:
            self.replace(transactions)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self):
        return len(self._transactions)

    def __iter__(self):
        return iter(self.transactions())

    def transactions(self) -> Tuple[Transaction, ...]:
        """Snapshot of the ledger in order."""
        with self._lock:
            return tuple(self._transactions)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        with self._lock:
            for tx in self._transactions:
                if tx.id == transaction_id:
                    return tx
        return None

    def _touch(self):
        self._version += 1
        self._timeline_key = None
        self._timeline_rows = []

    def insert(self, transaction: Transaction):
        """Append an already-validated transaction and restore date order."""
        with self._lock:
            self._transactions.append(transaction)
            self._transactions.sort(key=_by_date)
            self._touch()
        logger.info("Inserted transaction %s (%s)", transaction.id, transaction.date)

    def remove(self, transaction_id: str) -> Transaction:
        """Delete the entry with ``transaction_id`` and return it.

        Raises:
            TransactionNotFoundError: No entry has that id. The ledger is
                left unchanged.
        """
        with self._lock:
            for index, tx in enumerate(self._transactions):
                if tx.id == transaction_id:
                    del self._transactions[index]
                    self._touch()
                    break
            else:
                raise TransactionNotFoundError(transaction_id)
        logger.info("Removed transaction %s", transaction_id)
        return tx

    def replace(self, transactions: Iterable[Transaction]):
        """Swap in a whole new set of transactions, or nothing at all.

        Raises:
            FormatError: An item is not a Transaction or an id repeats.
        """
        candidates = list(transactions)
        problems = {}
        seen = set()
        for index, tx in enumerate(candidates):
            if not isinstance(tx, Transaction):
                problems[f"transactions[{index}]"] = f"expected Transaction, got {type(tx).__name__}"
            elif tx.id in seen:
                problems[f"transactions[{index}].id"] = f"duplicate id '{tx.id}'"
            else:
                seen.add(tx.id)
        if problems:
            raise FormatError("Replacement set rejected", problems)

        with self._lock:
            self._transactions = sorted(candidates, key=_by_date)
            self._touch()
        logger.info("Ledger replaced with %d transactions", len(candidates))

    def clear(self):
        self.replace([])

    def compute_timeline(self, today: date = None) -> List[TimelineRow]:
        """Timeline rows for the current ledger, accruing interest to ``today``."""
        with self._lock:
            today = today or self.clock()
            key = (self._version, today, self.config.rate)
            if key != self._timeline_key:
                calculator = BalanceRecalculator(self.config)
                self._timeline_rows = calculator.build_timeline(self._transactions, today)
                self._timeline_key = key
                logger.debug("Recomputed timeline for %d transactions", len(self._transactions))
            return list(self._timeline_rows)
