"""Display helpers: currency, dates and the statistics card subtexts."""
from datetime import date
from decimal import Decimal
from typing import Dict, Sequence

from loan_tracker.config import CURRENCY_SYMBOL, DATE_FORMAT_DISPLAY
from loan_tracker.data_structures import EngineConfig, StatisticsSnapshot, Transaction
from loan_tracker.services.balance_calculator import days_between
from loan_tracker.services.validation import round_to_cent


def format_currency(amount) -> str:
    """``$1,234.56``; negatives as ``-$1,234.56``."""
    value = round_to_cent(Decimal(str(amount)))
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):,.2f}"


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT_DISPLAY)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def relative_time(value: date, today: date = None) -> str:
    today = today or date.today()
    days = days_between(value, today)
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{_plural(days, 'day')} ago"
    if days < 30:
        return f"{_plural(days // 7, 'week')} ago"
    if days < 365:
        return f"{_plural(days // 30, 'month')} ago"
    return f"{_plural(days // 365, 'year')} ago"


def describe_statistics(snapshot: StatisticsSnapshot, transactions: Sequence[Transaction],
                        config: EngineConfig = None, today: date = None) -> Dict[str, str]:
    """Subtexts shown under each statistics card."""
    config = config or EngineConfig()
    if transactions:
        last = transactions[-1]
        balance_change = f"Last {config.label_for(last.type).lower()}: {format_currency(last.amount)}"
        date_range = f"{format_date(transactions[0].date)} - {format_date(transactions[-1].date)}"
        last_activity = relative_time(last.date, today)
    else:
        balance_change = "No transactions yet"
        date_range = "No activity"
        last_activity = "No activity"

    return {
        'balance_change': balance_change,
        'loan_count': _plural(snapshot.loan_count, 'loan'),
        'payment_count': _plural(snapshot.payment_count, 'payment'),
        'effective_rate': f"{snapshot.effective_rate:.2f}% of principal",
        'date_range': date_range,
        'last_activity': last_activity,
    }
