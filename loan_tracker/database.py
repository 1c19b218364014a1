"""SQLite persistence for Loan Tracker.

The store keeps the ledger in the persisted-record schema plus a ``seq``
column, so that same-date entries reload in the order they were saved.
"""
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from loan_tracker.backup import parse_records
from loan_tracker.config import DEFAULT_DB_NAME
from loan_tracker.data_structures import EngineConfig, Transaction
from loan_tracker.exceptions import StorageError, StorageTransactionError
from loan_tracker.logging_setup import get_logger

logger = get_logger(__name__)


class TransactionStore:
    """Handles all SQLite operations for the transaction ledger."""

    def __init__(self, db_name=DEFAULT_DB_NAME):
        self.db_name = db_name
        try:
            self.conn = sqlite3.connect(db_name, check_same_thread=False)
        except sqlite3.Error as e:
            raise StorageError(f"Unable to open database: {e}", {'db_name': str(db_name)})
        self._closed = False
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        if hasattr(self, 'conn'):
            self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Context manager for database transactions with automatic rollback on failure.

        Usage:
            with store.transaction():
                cursor.execute(...)
                cursor.execute(...)
        """
        try:
            yield
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StorageTransactionError(f"Transaction failed: {str(e)}")
        except Exception:
            self.conn.rollback()
            raise

    def create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS transactions (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                date TEXT NOT NULL,
                type TEXT NOT NULL,
                amount REAL NOT NULL,
                notes TEXT DEFAULT '',
                timestamp TEXT
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self.conn.commit()

    def save_transactions(self, transactions: Sequence[Transaction], config: EngineConfig = None):
        """Replace the stored ledger with ``transactions`` in one transaction."""
        config = config or EngineConfig()
        vals = []
        for tx in transactions:
            record = tx.to_record(config)
            vals.append((
                record['id'],
                record['date'],
                record['type'],
                record['amount'],
                record['notes'],
                record['timestamp'],
            ))

        with self.transaction():
            cursor = self.conn.cursor()
            cursor.execute("DELETE FROM transactions")
            cursor.executemany("""
                INSERT INTO transactions (id, date, type, amount, notes, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
            """, vals)
        logger.debug("Saved %d transactions to %s", len(vals), self.db_name)

    def get_records(self) -> List[Dict]:
        """Raw stored records in saved order."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT id, date, type, amount, notes, timestamp FROM transactions ORDER BY seq")
        cols = [description[0] for description in cursor.description]
        return [dict(zip(cols, row)) for row in cursor.fetchall()]

    def load_transactions(self, config: EngineConfig = None, now: datetime = None) -> List[Transaction]:
        """Rebuild stored transactions.

        Raises:
            FormatError: A stored record no longer validates (e.g. the type
                labels were reconfigured).
        """
        return parse_records(self.get_records(), config, now)

    def get_setting(self, key, default=None) -> Optional[str]:
        """Get a setting value."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key=?", (key,))
        res = cursor.fetchone()
        return res[0] if res else default

    def set_setting(self, key, value):
        """Set a setting value."""
        with self.transaction():
            self.conn.execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, str(value)))
