"""Loan Tracker: running loan balance with simple daily interest."""

from loan_tracker.data_structures import (
    EngineConfig, Transaction, TransactionType, TimelineRow, StatisticsSnapshot, ValidationReport
)
from loan_tracker.engine import LoanTracker

__all__ = ['LoanTracker', 'EngineConfig', 'Transaction', 'TransactionType', 'TimelineRow',
           'StatisticsSnapshot', 'ValidationReport']
