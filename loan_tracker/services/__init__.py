"""Services package for Loan Tracker business logic.

Each module covers one concern of the engine: field validation, duplicate
detection, ledger ordering, timeline replay and statistics.
"""

from .validation import TransactionValidator
from .duplicates import find_duplicate
from .balance_calculator import BalanceRecalculator, days_between, simple_interest
from .ledger import LedgerEngine
from .statistics import compute_statistics

__all__ = ['TransactionValidator', 'find_duplicate', 'BalanceRecalculator', 'days_between',
           'simple_interest', 'LedgerEngine', 'compute_statistics']
