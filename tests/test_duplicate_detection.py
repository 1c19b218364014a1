"""Tests for near-duplicate detection of candidate transactions."""
import unittest
from datetime import date
from decimal import Decimal

from loan_tracker.data_structures import Transaction, TransactionType
from loan_tracker.services.duplicates import find_duplicate


def make_tx(tx_id, day, tx_type=TransactionType.LOAN_OUT, amount="100.00"):
    return Transaction(id=tx_id, date=date.fromisoformat(day), type=tx_type, amount=Decimal(amount))


class TestFindDuplicate(unittest.TestCase):

    def setUp(self):
        self.ledger = [
            make_tx("a", "2023-01-01", TransactionType.LOAN_OUT, "100.00"),
            make_tx("b", "2023-01-01", TransactionType.PAYMENT, "100.00"),
            make_tx("c", "2023-01-02", TransactionType.LOAN_OUT, "250.00"),
        ]

    def test_exact_match(self):
        candidate = {'date': date(2023, 1, 2), 'type': TransactionType.LOAN_OUT, 'amount': Decimal("250.00")}
        self.assertEqual(find_duplicate(candidate, self.ledger).id, "c")

    def test_amount_within_a_cent(self):
        candidate = {'date': date(2023, 1, 1), 'type': TransactionType.LOAN_OUT, 'amount': Decimal("100.009")}
        self.assertEqual(find_duplicate(candidate, self.ledger).id, "a")

    def test_amount_a_full_cent_away_is_not_duplicate(self):
        candidate = {'date': date(2023, 1, 1), 'type': TransactionType.LOAN_OUT, 'amount': Decimal("100.01")}
        self.assertIsNone(find_duplicate(candidate, self.ledger))

    def test_type_must_match(self):
        candidate = {'date': date(2023, 1, 2), 'type': TransactionType.PAYMENT, 'amount': Decimal("250.00")}
        self.assertIsNone(find_duplicate(candidate, self.ledger))

    def test_date_must_match(self):
        candidate = {'date': date(2023, 1, 3), 'type': TransactionType.LOAN_OUT, 'amount': Decimal("250.00")}
        self.assertIsNone(find_duplicate(candidate, self.ledger))

    def test_only_first_match_reported(self):
        ledger = self.ledger + [make_tx("d", "2023-01-01", TransactionType.LOAN_OUT, "100.00")]
        candidate = make_tx("new", "2023-01-01", TransactionType.LOAN_OUT, "100.00")
        self.assertEqual(find_duplicate(candidate, ledger).id, "a")

    def test_transaction_is_not_its_own_duplicate(self):
        self.assertIsNone(find_duplicate(self.ledger[2], self.ledger))

    def test_incomplete_candidate(self):
        self.assertIsNone(find_duplicate({'date': date(2023, 1, 1)}, self.ledger))

    def test_empty_ledger(self):
        self.assertIsNone(find_duplicate(self.ledger[0], []))


if __name__ == '__main__':
    unittest.main()
