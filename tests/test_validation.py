"""Tests for field validation and whole-transaction validation reports."""
import unittest
from datetime import date, datetime
from decimal import Decimal

from loan_tracker.data_structures import EngineConfig, Transaction, TransactionType
from loan_tracker.result import ErrorType
from loan_tracker.services.validation import TransactionValidator, parse_date, round_to_cent

TODAY = date(2024, 6, 15)


class TestValidateAmount(unittest.TestCase):

    def setUp(self):
        self.validator = TransactionValidator(clock=lambda: TODAY)

    def assertAmount(self, raw, expected):
        result = self.validator.validate_amount(raw)
        self.assertTrue(result.success, f"{raw!r} rejected: {result.error}")
        self.assertEqual(result.value, Decimal(expected))
        self.assertEqual(result.value.as_tuple().exponent, -2)

    def assertFails(self, raw, code):
        result = self.validator.validate_amount(raw)
        self.assertFalse(result.success, f"{raw!r} accepted")
        self.assertEqual(result.error_type, code)

    def test_bounds_accepted(self):
        self.assertAmount("0.01", "0.01")
        self.assertAmount("999999999.99", "999999999.99")
        self.assertAmount("1000", "1000.00")

    def test_rounds_to_nearest_cent_half_away_from_zero(self):
        self.assertAmount("12.345", "12.35")
        self.assertAmount("12.344", "12.34")
        self.assertAmount("0.005", "0.01")

    def test_numbers_and_currency_strings(self):
        self.assertAmount(50, "50.00")
        self.assertAmount(19.99, "19.99")
        self.assertAmount("$1,250.50", "1250.50")
        self.assertAmount("  42.1 ", "42.10")

    def test_too_low(self):
        self.assertFails("0.00", ErrorType.TOO_LOW)
        self.assertFails("0.004", ErrorType.TOO_LOW)
        self.assertFails("-5", ErrorType.TOO_LOW)
        self.assertFails("-1e30", ErrorType.TOO_LOW)

    def test_too_high(self):
        self.assertFails("1000000000", ErrorType.TOO_HIGH)
        self.assertFails("999999999.995", ErrorType.TOO_HIGH)
        self.assertFails("1e30", ErrorType.TOO_HIGH)
        self.assertFails("1" * 29, ErrorType.TOO_HIGH)
        self.assertFails(Decimal("1E+999"), ErrorType.TOO_HIGH)

    def test_required(self):
        self.assertFails("", ErrorType.REQUIRED)
        self.assertFails("   ", ErrorType.REQUIRED)
        self.assertFails(None, ErrorType.REQUIRED)

    def test_invalid_number(self):
        self.assertFails("abc", ErrorType.INVALID_NUMBER)
        self.assertFails("12.3.4", ErrorType.INVALID_NUMBER)
        self.assertFails("NaN", ErrorType.INVALID_NUMBER)
        self.assertFails("Infinity", ErrorType.INVALID_NUMBER)
        self.assertFails(True, ErrorType.INVALID_NUMBER)

    def test_configured_bounds(self):
        validator = TransactionValidator(EngineConfig(min_amount=10, max_amount=100))
        self.assertEqual(validator.validate_amount("9.99").error_type, ErrorType.TOO_LOW)
        self.assertEqual(validator.validate_amount("100.01").error_type, ErrorType.TOO_HIGH)
        self.assertIn("$10", validator.validate_amount("5").error)

    def test_round_to_cent_negative_tie(self):
        self.assertEqual(round_to_cent(Decimal("-0.125")), Decimal("-0.13"))


class TestValidateDate(unittest.TestCase):

    def setUp(self):
        self.validator = TransactionValidator(clock=lambda: TODAY)

    def test_valid_date(self):
        result = self.validator.validate_date("2024-01-31")
        self.assertTrue(result.success)
        self.assertEqual(result.value, date(2024, 1, 31))
        self.assertEqual(result.warnings, [])

    def test_today_is_not_future(self):
        self.assertEqual(self.validator.validate_date("2024-06-15").warnings, [])

    def test_future_date_warns_but_succeeds(self):
        result = self.validator.validate_date("2024-06-16")
        self.assertTrue(result.success)
        self.assertEqual([code for code, _ in result.warnings], [ErrorType.FUTURE_DATE])

    def test_invalid_dates(self):
        for raw in ("", None, "not a date", "2023-02-30", "2023-13-01", 20230101):
            result = self.validator.validate_date(raw)
            self.assertFalse(result.success, raw)
            self.assertEqual(result.error_type, ErrorType.INVALID_DATE)

    def test_date_objects_accepted(self):
        self.assertEqual(self.validator.validate_date(date(2023, 5, 1)).value, date(2023, 5, 1))
        self.assertEqual(parse_date(datetime(2023, 5, 1, 13, 45)), date(2023, 5, 1))


class TestValidateTypeAndNotes(unittest.TestCase):

    def setUp(self):
        self.validator = TransactionValidator(clock=lambda: TODAY)

    def test_type_labels(self):
        self.assertEqual(self.validator.validate_type("Loan Out").value, TransactionType.LOAN_OUT)
        self.assertEqual(self.validator.validate_type("Payment").value, TransactionType.PAYMENT)

    def test_type_must_match_exactly(self):
        for raw in ("loan out", "Payment ", "", None, "Deposit"):
            self.assertEqual(self.validator.validate_type(raw).error_type, ErrorType.INVALID_TYPE, raw)

    def test_custom_type_labels(self):
        validator = TransactionValidator(EngineConfig(loan_out_label="Lent", payment_label="Repaid"))
        self.assertEqual(validator.validate_type("Lent").value, TransactionType.LOAN_OUT)
        self.assertFalse(validator.validate_type("Loan Out").success)

    def test_empty_notes(self):
        self.assertEqual(self.validator.validate_notes("").value, "")
        self.assertEqual(self.validator.validate_notes(None).value, "")
        self.assertEqual(self.validator.validate_notes("   ").value, "")

    def test_notes_are_escaped_and_trimmed(self):
        result = self.validator.validate_notes("  <b>rent</b> & more ")
        self.assertEqual(result.value, "&lt;b&gt;rent&lt;/b&gt; &amp; more")

    def test_notes_limit_applies_after_escaping(self):
        self.assertTrue(self.validator.validate_notes("a" * 500).success)
        self.assertEqual(self.validator.validate_notes("a" * 501).error_type, ErrorType.TOO_LONG)
        # 500 raw characters grow to 503 once "<" becomes "&lt;"
        self.assertEqual(self.validator.validate_notes("a" * 499 + "<").error_type, ErrorType.TOO_LONG)


class TestValidateTransaction(unittest.TestCase):

    def setUp(self):
        self.validator = TransactionValidator(clock=lambda: TODAY)

    def test_valid_transaction(self):
        report = self.validator.validate_transaction(
            {'date': "2024-01-01", 'type': "Loan Out", 'amount': "1000", 'notes': "first"})
        self.assertTrue(report.valid)
        self.assertFalse(report.has_warnings)
        self.assertEqual(report.values, {
            'date': date(2024, 1, 1),
            'type': TransactionType.LOAN_OUT,
            'amount': Decimal("1000.00"),
            'notes': "first",
        })

    def test_every_field_reported_at_once(self):
        report = self.validator.validate_transaction(
            {'date': "bogus", 'type': "Gift", 'amount': "", 'notes': "x" * 600})
        self.assertFalse(report.valid)
        self.assertEqual(report.error_codes('date'), [ErrorType.INVALID_DATE])
        self.assertEqual(report.error_codes('type'), [ErrorType.INVALID_TYPE])
        self.assertEqual(report.error_codes('amount'), [ErrorType.REQUIRED])
        self.assertEqual(report.error_codes('notes'), [ErrorType.TOO_LONG])

    def test_missing_keys_count_as_empty(self):
        report = self.validator.validate_transaction({})
        self.assertEqual(set(report.errors), {'date', 'type', 'amount'})

    def test_duplicate_and_future_warnings(self):
        existing = [Transaction(id="t1", date=date(2024, 7, 1), type=TransactionType.PAYMENT,
                                amount=Decimal("20.00"))]
        report = self.validator.validate_transaction(
            {'date': "2024-07-01", 'type': "Payment", 'amount': "20.004"}, existing)
        self.assertTrue(report.valid)
        self.assertEqual(report.warning_codes('date'), [ErrorType.FUTURE_DATE])
        self.assertEqual(report.warning_codes('duplicate'), [ErrorType.DUPLICATE])
        self.assertEqual(report.duplicate.id, "t1")
        self.assertEqual(len(report.warning_messages()), 2)

    def test_no_duplicate_check_when_fields_invalid(self):
        existing = [Transaction(id="t1", date=date(2024, 1, 1), type=TransactionType.PAYMENT,
                                amount=Decimal("20.00"))]
        report = self.validator.validate_transaction(
            {'date': "2024-01-01", 'type': "Nope", 'amount': "20"}, existing)
        self.assertNotIn('duplicate', report.warnings)


if __name__ == '__main__':
    unittest.main()
