import datetime
from decimal import Decimal
from unittest import mock
from django.test import TestCase, override_settings
from ledger_core.exceptions import ConfigurationError
from ledger_core.models import CLOSING_REFERENCE, Account, JournalEntry
from ledger_core.services import (close_period, post_journal_entry,
                                  verify_balances)
from ledger_core.services.posting import lock_accounts
from .helpers import balance_of, create_chart, line


""" Period close """
class ClosePeriodTests(TestCase):

    def setUp(self):
        self.accounts = create_chart()

    def post(self, debit_code, credit_code, amount, description="Entry"):
        return post_journal_entry(
            date="2025-12-15",
            description=description,
            lines=[
                line(self.accounts[debit_code], debit=amount),
                line(self.accounts[credit_code], credit=amount),
            ],
        )

    def test_close_moves_net_income_to_retained_earnings(self):
        self.post("1000", "4000", 700, "Product sales")
        self.post("1000", "4200", 300, "Services")
        self.post("6000", "1000", 250, "Rent")
        self.post("6100", "1000", 150, "Salaries")

        result = close_period(date="2025-12-31")

        self.assertEqual(result["net_income"], Decimal("600.00"))
        self.assertEqual(len(result["closing_entries"]), 2)
        for code in ("4000", "4200", "6000", "6100"):
            self.assertEqual(balance_of(code), Decimal("0.00"))
        self.assertEqual(balance_of("3200"), Decimal("600.00"))
        # cash is untouched
        self.assertEqual(balance_of("1000"), Decimal("600.00"))

        entries = JournalEntry.objects.filter(reference=CLOSING_REFERENCE).order_by("id")
        self.assertEqual(
            [e.description for e in entries],
            ["Closing revenue accounts", "Closing expense accounts"],
        )
        for entry in entries:
            self.assertTrue(entry.is_posted)
            self.assertTrue(entry.is_balanced())
            self.assertEqual(entry.date, datetime.date(2025, 12, 31))

        # stored balances still agree with the journal
        self.assertEqual(verify_balances(), [])

    def test_net_loss_reduces_retained_earnings(self):
        self.post("1000", "4000", 100)
        self.post("6000", "1000", 400)

        result = close_period(date="2025-12-31")

        self.assertEqual(result["net_income"], Decimal("-300.00"))
        self.assertEqual(balance_of("3200"), Decimal("-300.00"))
        self.assertEqual(verify_balances(), [])

    def test_abnormal_contra_revenue_is_closed(self):
        self.post("1000", "4000", 1000)
        # returns give Sales Returns a debit balance
        self.post("4100", "1000", 50)

        result = close_period(date="2025-12-31")

        self.assertEqual(balance_of("4100"), Decimal("0.00"))
        self.assertEqual(result["net_income"], Decimal("950.00"))
        self.assertEqual(balance_of("3200"), Decimal("950.00"))
        self.assertEqual(verify_balances(), [])

    def test_nothing_to_close(self):
        result = close_period(date="2025-12-31")
        self.assertEqual(result["net_income"], Decimal("0.00"))
        self.assertEqual(result["closing_entries"], [])
        self.assertFalse(JournalEntry.objects.filter(reference=CLOSING_REFERENCE).exists())

    def test_only_expenses(self):
        self.post("6000", "1000", 80)
        result = close_period(date="2025-12-31")
        self.assertEqual(len(result["closing_entries"]), 1)
        self.assertEqual(result["closing_entries"][0].description, "Closing expense accounts")
        self.assertEqual(balance_of("3200"), Decimal("-80.00"))

    def test_accounts_are_locked_once_in_posting_order(self):
        self.post("1000", "4000", 100)
        self.post("6000", "1000", 40)
        with mock.patch(
            "ledger_core.services.closing.lock_accounts", wraps=lock_accounts
        ) as locker:
            close_period(date="2025-12-31")

        locker.assert_called_once()
        expected = set(
            Account.objects.filter(is_active=True, ac_type__in=("revenue", "expense"))
            .values_list("pk", flat=True)
        )
        expected.add(self.accounts["3200"].pk)
        self.assertEqual(set(locker.call_args.args[0]), expected)
        self.assertEqual(balance_of("3200"), Decimal("60.00"))

    def test_missing_retained_earnings_aborts(self):
        self.post("1000", "4000", 100)
        with override_settings(LEDGER_RETAINED_EARNINGS_CODE="3999"):
            with self.assertRaises(ConfigurationError) as cm:
                close_period(date="2025-12-31")
        self.assertIn("3999", str(cm.exception))
        self.assertEqual(balance_of("4000"), Decimal("100.00"))
        self.assertFalse(JournalEntry.objects.filter(reference=CLOSING_REFERENCE).exists())
