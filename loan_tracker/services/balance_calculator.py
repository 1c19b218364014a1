"""Balance calculation service for Loan Tracker.

This service handles the chronological replay of a ledger:
- Day counts between accrual boundaries
- Simple daily interest on a positive balance
- Running balance reconstruction, including interest up to today
"""
import math
from datetime import date, datetime
from decimal import Decimal
from typing import List, Sequence

from loan_tracker.config import DAYS_PER_YEAR
from loan_tracker.data_structures import EngineConfig, TimelineRow, Transaction

ZERO = Decimal("0")
SECONDS_PER_DAY = 24 * 60 * 60


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def days_between(start, end) -> int:
    """Whole days from ``start`` to ``end``, rounded up and floored at 0.

    Accepts dates or datetimes. An ``end`` before ``start`` yields 0, so a
    reversed interval never produces negative interest.
    """
    if start is None or end is None:
        return 0
    delta = _as_datetime(end) - _as_datetime(start)
    return max(0, math.ceil(delta.total_seconds() / SECONDS_PER_DAY))


def simple_interest(principal: Decimal, annual_rate: Decimal, days: int) -> Decimal:
    """principal * (annual_rate / 365) * days, or 0 for non-positive inputs."""
    if principal <= 0 or days <= 0:
        return ZERO
    return principal * (annual_rate / DAYS_PER_YEAR) * days


class BalanceRecalculator:
    """Replays a sorted ledger into timeline rows.

    Interest accrues only while the balance is strictly positive; an
    overpaid (negative) balance is a credit and earns nothing.
    """

    def __init__(self, config: EngineConfig = None):
        """Initialize BalanceRecalculator.

        Args:
            config: Engine parameters; only the interest rate is used.
        """
        self.config = config or EngineConfig()

    def build_timeline(self, transactions: Sequence[Transaction], today: date) -> List[TimelineRow]:
        """Walk ``transactions`` (already in ledger order) once.

        Args:
            transactions: Ledger entries sorted by date.
            today: Date the trailing interest row accrues up to.

        Returns:
            One row per transaction, plus a trailing current-interest row
            when the final balance is positive and ``today`` is later than
            the last transaction date.
        """
        rate = self.config.rate
        rows = []
        balance = ZERO
        previous_date = None

        for tx in transactions:
            days = days_between(previous_date, tx.date) if previous_date is not None else 0
            interest = ZERO
            if previous_date is not None and balance > 0:
                interest = simple_interest(balance, rate, days)
                balance += interest

            balance += tx.signed_amount
            rows.append(TimelineRow(
                date=tx.date,
                transaction=tx,
                days_since_previous=days,
                interest_accrued=interest,
                running_balance_after=balance,
            ))
            previous_date = tx.date

        if rows and balance > 0:
            days = days_between(previous_date, today)
            if days > 0:
                interest = simple_interest(balance, rate, days)
                rows.append(TimelineRow(
                    date=today,
                    transaction=None,
                    days_since_previous=days,
                    interest_accrued=interest,
                    running_balance_after=balance + interest,
                ))
        return rows
