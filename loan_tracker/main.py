"""Command-line entry point for Loan Tracker.

Every command opens the SQLite journal given by ``--db`` through a
LoanTracker, so data persists between invocations.
"""
import argparse
import sys
from typing import List, Optional

from loan_tracker.backup import default_backup_filename
from loan_tracker.config import APP_VERSION, CURRENT_INTEREST_LABEL, DEFAULT_DB_NAME
from loan_tracker.database import TransactionStore
from loan_tracker.engine import LoanTracker
from loan_tracker.exceptions import LoanTrackerError
from loan_tracker.formatting import format_currency, format_date
from loan_tracker.logging_setup import configure_logging
from loan_tracker.reports import default_export_filename
from loan_tracker.result import ErrorType


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="loan-tracker", description="Track a loan balance with daily interest")
    ap.add_argument("--db", default=DEFAULT_DB_NAME, help="SQLite journal file")
    ap.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    ap.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    sub = ap.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a loan or payment")
    add.add_argument("date", help="YYYY-MM-DD")
    add.add_argument("type", help="'Loan Out' or 'Payment'")
    add.add_argument("amount")
    add.add_argument("--notes", default="")
    add.add_argument("--yes", action="store_true", help="Proceed past warnings")

    delete = sub.add_parser("delete", help="Delete a transaction by id")
    delete.add_argument("id")

    sub.add_parser("list", help="Show the ledger with interest and balances")
    sub.add_parser("stats", help="Show summary statistics")
    sub.add_parser("clear", help="Delete all transactions")

    rate = sub.add_parser("set-rate", help="Set the annual interest rate (e.g. 0.0825)")
    rate.add_argument("rate", type=float)

    csv_cmd = sub.add_parser("export-csv", help="Export the ledger as CSV")
    csv_cmd.add_argument("path", nargs="?")

    xlsx_cmd = sub.add_parser("export-excel", help="Export the ledger as an Excel workbook")
    xlsx_cmd.add_argument("path", nargs="?")

    save = sub.add_parser("backup", help="Write a JSON backup")
    save.add_argument("path", nargs="?")

    restore = sub.add_parser("restore", help="Replace all data with a JSON backup")
    restore.add_argument("path")
    return ap


def _print_report_issues(report):
    for issues in list(report.errors.values()) + list(report.warnings.values()):
        for issue in issues:
            print(f"  {issue.field}: {issue.message}")


def run(args, tracker: LoanTracker) -> int:
    if args.command == "add":
        result = tracker.add_transaction(
            {'date': args.date, 'type': args.type, 'amount': args.amount, 'notes': args.notes},
            proceed_past_warnings=args.yes,
        )
        if not result:
            print(result.error.splitlines()[0])
            _print_report_issues(result.details)
            if result.error_type == ErrorType.WARNINGS_PENDING:
                print("Re-run with --yes to add it anyway.")
            return 1
        print(f"Added {result.value.id}")
    elif args.command == "delete":
        tracker.delete_transaction(args.id)
        print("Transaction deleted successfully")
    elif args.command == "list":
        for row in tracker.timeline():
            tx = row.transaction
            label = CURRENT_INTEREST_LABEL if tx is None else tracker.config.label_for(tx.type)
            amount = "" if tx is None else format_currency(tx.amount)
            print(f"{format_date(row.date):<14}{label:<18}{amount:>16}{row.days_since_previous:>6}"
                  f"{format_currency(row.interest_accrued):>14}{format_currency(row.running_balance_after):>18}"
                  f"  {'' if tx is None else tx.id}")
    elif args.command == "stats":
        snapshot = tracker.statistics()
        texts = tracker.summary()
        print(f"Current balance: {format_currency(snapshot.current_balance)} ({texts['balance_change']})")
        print(f"Total loaned:    {format_currency(snapshot.total_loaned)} ({texts['loan_count']})")
        print(f"Total payments:  {format_currency(snapshot.total_payments)} ({texts['payment_count']})")
        print(f"Total interest:  {format_currency(snapshot.total_interest)} ({texts['effective_rate']})")
        print(f"Days active:     {snapshot.days_active} ({texts['date_range']})")
        print(f"Last activity:   {texts['last_activity']}")
    elif args.command == "clear":
        tracker.clear_all()
        print("All data cleared successfully")
    elif args.command == "set-rate":
        tracker.set_interest_rate(args.rate)
        print(f"Interest rate set to {tracker.interest_rate:.4%}")
    elif args.command == "export-csv":
        path = args.path or default_export_filename(tracker.clock())
        tracker.export_csv(path)
        print(f"Data exported to {path}")
    elif args.command == "export-excel":
        path = args.path or default_export_filename(tracker.clock(), ".xlsx")
        tracker.export_excel(path)
        print(f"Data exported to {path}")
    elif args.command == "backup":
        path = args.path or default_backup_filename(tracker.clock())
        tracker.save_backup(path)
        print(f"Backup created at {path}")
    elif args.command == "restore":
        count = tracker.load_backup_file(args.path)
        print(f"Loaded {count} transactions from backup")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        with TransactionStore(args.db) as store:
            return run(args, LoanTracker(store=store))
    except LoanTrackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
