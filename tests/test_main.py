"""Tests for the command-line entry point."""
import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from loan_tracker.main import build_parser, main


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db = os.path.join(self.tmpdir.name, "ledger.db")

    def tearDown(self):
        self.tmpdir.cleanup()

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(["--db", self.db, "--log-level", "WARNING"] + list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_parser_requires_command(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args([])

    def test_add_list_and_delete(self):
        code, out, _ = self.run_cli("add", "2023-01-01", "Loan Out", "1000", "--notes", "seed")
        self.assertEqual(code, 0)
        tx_id = out.strip().split()[-1]
        self.assertTrue(tx_id.startswith("txn_"))

        code, out, _ = self.run_cli("list")
        self.assertEqual(code, 0)
        self.assertIn(tx_id, out)
        self.assertIn("Current Interest", out)

        code, out, _ = self.run_cli("delete", tx_id)
        self.assertEqual(code, 0)
        self.assertIn("Transaction deleted successfully", out)

    def test_invalid_add(self):
        code, out, _ = self.run_cli("add", "2023-01-01", "Gift", "abc")
        self.assertEqual(code, 1)
        self.assertIn("Please fix the form errors before submitting", out)
        self.assertIn("type: Invalid transaction type", out)

    def test_duplicate_needs_yes(self):
        self.run_cli("add", "2023-01-01", "Payment", "20")
        code, out, _ = self.run_cli("add", "2023-01-01", "Payment", "20")
        self.assertEqual(code, 1)
        self.assertIn("--yes", out)

        code, _, _ = self.run_cli("add", "2023-01-01", "Payment", "20", "--yes")
        self.assertEqual(code, 0)

    def test_delete_unknown(self):
        code, _, err = self.run_cli("delete", "txn_0_missing")
        self.assertEqual(code, 1)
        self.assertIn("txn_0_missing", err)

    def test_stats(self):
        self.run_cli("add", "2023-01-01", "Loan Out", "1000")
        self.run_cli("add", "2023-02-01", "Payment", "100")
        code, out, _ = self.run_cli("stats")
        self.assertEqual(code, 0)
        self.assertIn("Total loaned:    $1,000.00 (1 loan)", out)
        self.assertIn("Total payments:  $100.00 (1 payment)", out)
        self.assertIn("Last activity:", out)

    def test_backup_restore_and_exports(self):
        self.run_cli("add", "2023-01-01", "Loan Out", "1000")
        backup_path = os.path.join(self.tmpdir.name, "backup.json")
        csv_path = os.path.join(self.tmpdir.name, "ledger.csv")

        self.assertEqual(self.run_cli("backup", backup_path)[0], 0)
        self.assertEqual(self.run_cli("export-csv", csv_path)[0], 0)
        self.assertTrue(os.path.exists(csv_path))

        self.assertEqual(self.run_cli("clear")[0], 0)
        code, out, _ = self.run_cli("restore", backup_path)
        self.assertEqual(code, 0)
        self.assertIn("Loaded 1 transactions from backup", out)

    def test_restore_invalid_file(self):
        bad = os.path.join(self.tmpdir.name, "bad.json")
        with open(bad, "w", encoding="utf-8") as f:
            f.write("[1, 2")
        code, _, err = self.run_cli("restore", bad)
        self.assertEqual(code, 1)
        self.assertIn("Invalid file format", err)

    def test_set_rate(self):
        self.assertEqual(self.run_cli("set-rate", "0.05")[0], 0)

    def test_negative_rate_rejected(self):
        code, _, err = self.run_cli("set-rate", "-0.01")
        self.assertEqual(code, 1)
        self.assertIn("Interest rate cannot be negative", err)


if __name__ == '__main__':
    unittest.main()
