"""Duplicate detection for candidate transactions.

A near-match is advisory only: the caller decides whether to proceed.
"""
from decimal import Decimal
from typing import Iterable, Optional

from loan_tracker.config import DUPLICATE_TOLERANCE
from loan_tracker.data_structures import Transaction


def _field(candidate, name):
    if isinstance(candidate, dict):
        return candidate.get(name)
    return getattr(candidate, name, None)


def find_duplicate(candidate, existing: Iterable[Transaction],
                   tolerance: Decimal = Decimal(str(DUPLICATE_TOLERANCE))) -> Optional[Transaction]:
    """Return the first existing transaction that looks like ``candidate``.

    A match has the same date, the same type and an amount differing by
    less than ``tolerance``. ``candidate`` may be a Transaction or a dict of
    normalized ``date``/``type``/``amount`` values; an entry sharing the
    candidate's id is never reported as its own duplicate.
    """
    cand_date = _field(candidate, 'date')
    cand_type = _field(candidate, 'type')
    cand_amount = _field(candidate, 'amount')
    cand_id = _field(candidate, 'id')
    if cand_date is None or cand_type is None or cand_amount is None:
        return None

    cand_amount = Decimal(str(cand_amount))
    for tx in existing:
        if cand_id and tx.id == cand_id:
            continue
        if tx.date == cand_date and tx.type == cand_type and abs(tx.amount - cand_amount) < tolerance:
            return tx
    return None
