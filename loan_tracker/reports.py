"""
Report export module for Loan Tracker.
Turns a computed timeline into a table and writes it as CSV or Excel.
"""
from datetime import date
from typing import Sequence

import pandas as pd

from loan_tracker.config import (
    CURRENT_INTEREST_LABEL, CURRENT_INTEREST_NOTE, DATE_FORMAT_STORAGE, EXPORT_PREFIX
)
from loan_tracker.data_structures import EngineConfig, TimelineRow
from loan_tracker.logging_setup import get_logger

logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "Date", "Type", "Amount", "Days Since Last Entry",
    "Interest Accrued", "Running Balance", "Notes",
]


def default_export_filename(today: date = None, extension: str = ".csv") -> str:
    today = today or date.today()
    return f"{EXPORT_PREFIX}{today.strftime(DATE_FORMAT_STORAGE)}{extension}"


def timeline_to_dataframe(timeline: Sequence[TimelineRow], config: EngineConfig = None) -> pd.DataFrame:
    """One row per timeline entry, money columns rounded to cents.

    The trailing current-interest row gets its own type label and an empty
    amount.
    """
    config = config or EngineConfig()
    records = []
    for row in timeline:
        tx = row.transaction
        if tx is None:
            tx_type, amount, notes = CURRENT_INTEREST_LABEL, None, CURRENT_INTEREST_NOTE
        else:
            tx_type, amount, notes = config.label_for(tx.type), float(tx.amount), tx.notes
        records.append({
            "Date": row.date.strftime(DATE_FORMAT_STORAGE),
            "Type": tx_type,
            "Amount": amount,
            "Days Since Last Entry": int(row.days_since_previous),
            "Interest Accrued": round(float(row.interest_accrued), 2),
            "Running Balance": round(float(row.running_balance_after), 2),
            "Notes": notes,
        })

    df = pd.DataFrame(records, columns=EXPORT_COLUMNS)
    df["Amount"] = df["Amount"].astype(float)
    df["Days Since Last Entry"] = df["Days Since Last Entry"].astype(int)
    return df


def export_csv(timeline: Sequence[TimelineRow], config: EngineConfig = None, path=None) -> str:
    """Render the timeline as CSV text, also writing it to ``path`` if given.

    Quote characters inside text fields are escaped by doubling them.
    """
    df = timeline_to_dataframe(timeline, config)
    content = df.to_csv(index=False, float_format="%.2f", na_rep="", lineterminator="\n")
    if path is not None:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        logger.info("Exported %d rows to %s", len(df), path)
    return content


def export_excel(timeline: Sequence[TimelineRow], path, config: EngineConfig = None,
                 title: str = "LOAN LEDGER") -> bool:
    """Write the timeline to an .xlsx workbook.

    Returns:
        True if successful.
    """
    df = timeline_to_dataframe(timeline, config)
    with pd.ExcelWriter(path, engine='xlsxwriter') as writer:
        df.to_excel(writer, sheet_name="Ledger", index=False, startrow=2)
        workbook = writer.book
        worksheet = writer.sheets["Ledger"]

        header_fmt = workbook.add_format({
            'bold': True, 'font_size': 14, 'align': 'center',
            'bg_color': '#2b5797', 'font_color': 'white'
        })
        currency_fmt = workbook.add_format({'num_format': '#,##0.00'})

        worksheet.merge_range(0, 0, 0, len(EXPORT_COLUMNS) - 1, title, header_fmt)
        worksheet.set_column(0, 1, 16)
        worksheet.set_column(2, 2, 14, currency_fmt)
        worksheet.set_column(3, 3, 12)
        worksheet.set_column(4, 5, 16, currency_fmt)
        worksheet.set_column(6, 6, 40)

    logger.info("Exported %d rows to %s", len(df), path)
    return True
