"""Aggregate statistics over a computed timeline."""
from decimal import Decimal
from typing import Sequence

from loan_tracker.config import DAYS_PER_YEAR
from loan_tracker.data_structures import StatisticsSnapshot, TimelineRow
from loan_tracker.services.balance_calculator import days_between

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def compute_statistics(timeline: Sequence[TimelineRow]) -> StatisticsSnapshot:
    """Summarize a timeline. Pure: same rows in, same snapshot out.

    ``total_interest`` and ``current_balance`` include the trailing
    current-interest row when present; counts and ``days_active`` only look
    at real transactions. ``days_active`` is 0 for a single transaction.
    """
    tx_rows = [row for row in timeline if not row.is_current_interest]

    total_loaned = ZERO
    total_payments = ZERO
    loan_count = 0
    payment_count = 0
    for row in tx_rows:
        tx = row.transaction
        if tx.is_loan:
            total_loaned += tx.amount
            loan_count += 1
        else:
            total_payments += tx.amount
            payment_count += 1

    total_interest = sum((row.interest_accrued for row in timeline), ZERO)
    current_balance = timeline[-1].running_balance_after if timeline else ZERO
    days_active = days_between(tx_rows[0].date, tx_rows[-1].date) if tx_rows else 0

    effective_rate = ZERO
    annualized_rate = ZERO
    if total_loaned > 0:
        effective_rate = total_interest / total_loaned * HUNDRED
        if days_active > 0:
            annualized_rate = effective_rate * DAYS_PER_YEAR / days_active

    return StatisticsSnapshot(
        current_balance=current_balance,
        total_loaned=total_loaned,
        total_payments=total_payments,
        total_interest=total_interest,
        loan_count=loan_count,
        payment_count=payment_count,
        days_active=days_active,
        effective_rate=effective_rate,
        annualized_rate=annualized_rate,
    )
