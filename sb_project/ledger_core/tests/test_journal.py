from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from ledger_core.exceptions import NotFoundError, UnbalancedJournalError
from ledger_core.models import Account, AuditLog, JournalEntry, JournalLine
from ledger_core.services import (create_adjustment, get_journal_entry,
                                  list_journal_entries, post_journal_entry)
from .helpers import line

""" Success tests """
class JournalEntrySuccessTests(TestCase):

    def setUp(self):
        # setup debit-normal and credit-normal accounts
        self.cash = Account.objects.create(code="1000", name="Cash", ac_type="asset")
        self.payable = Account.objects.create(code="2000", name="Accounts Payable", ac_type="liability")
        self.revenue = Account.objects.create(code="4000", name="Sales Revenue", ac_type="revenue")
        self.rent = Account.objects.create(code="6000", name="Rent Expense", ac_type="expense")

    def test_balanced_entry_posts_and_moves_balances(self):
        entry = post_journal_entry(
            date="2025-09-15",
            description="Cash sale",
            lines=[line(self.cash, debit=500), line(self.revenue, credit=500)],
        )

        entry.refresh_from_db()
        self.assertTrue(entry.is_posted)
        self.assertIsNotNone(entry.posted_at)
        self.assertEqual(entry.lines.count(), 2)

        self.cash.refresh_from_db()
        self.revenue.refresh_from_db()
        self.assertEqual(self.cash.balance, Decimal("500.00"))
        self.assertEqual(self.revenue.balance, Decimal("500.00"))

    """ Debit raises asset/expense, credit raises liability/equity/revenue """
    def test_sign_convention(self):
        post_journal_entry(
            date="2025-09-15",
            description="Pay supplier",
            lines=[line(self.payable, debit=100), line(self.cash, credit=100)],
        )
        post_journal_entry(
            date="2025-09-16",
            description="Rent",
            lines=[line(self.rent, debit=40), line(self.cash, credit=40)],
        )

        self.payable.refresh_from_db()
        self.cash.refresh_from_db()
        self.rent.refresh_from_db()
        # debit of 100 to a liability decreases it
        self.assertEqual(self.payable.balance, Decimal("-100.00"))
        # credit of 140 to an asset decreases it
        self.assertEqual(self.cash.balance, Decimal("-140.00"))
        # debit to an expense increases it
        self.assertEqual(self.rent.balance, Decimal("40.00"))

    def test_lines_keep_their_order(self):
        entry = post_journal_entry(
            date="2025-09-15",
            description="Split",
            lines=[
                line(self.rent, debit=30),
                line(self.cash, credit=10),
                line(self.payable, credit=20),
            ],
        )
        accounts = list(entry.lines.values_list("account__code", flat=True))
        self.assertEqual(accounts, ["6000", "1000", "2000"])

    def test_difference_within_tolerance_is_accepted(self):
        entry = post_journal_entry(
            date="2025-09-15",
            description="Rounding",
            lines=[line(self.cash, debit="100.00"), line(self.revenue, credit="99.99")],
        )
        self.assertTrue(entry.is_balanced())

    def test_same_account_on_several_lines_nets_out(self):
        post_journal_entry(
            date="2025-09-15",
            description="Contra",
            lines=[
                line(self.cash, debit=70),
                line(self.cash, credit=20),
                line(self.revenue, credit=50),
            ],
        )
        self.cash.refresh_from_db()
        self.assertEqual(self.cash.balance, Decimal("50.00"))

    def test_reference_and_audit_row_are_recorded(self):
        entry = post_journal_entry(
            date="2025-09-15",
            description="Cash sale",
            reference="INV-7",
            lines=[line(self.cash, debit=5), line(self.revenue, credit=5)],
        )
        self.assertEqual(entry.reference, "INV-7")
        self.assertTrue(
            AuditLog.objects.filter(
                action="post", object_type="JournalEntry", object_id=str(entry.pk)
            ).exists()
        )

    def test_adjustment_is_flagged(self):
        entry = create_adjustment(
            date="2025-12-31",
            description="Accrue rent",
            adjustment_type="Accrued Expense",
            lines=[line(self.rent, debit=25), line(self.payable, credit=25)],
        )
        self.assertTrue(entry.is_adjustment)
        self.assertEqual(entry.adjustment_type, "Accrued Expense")

    def test_list_filters(self):
        post_journal_entry(
            date="2025-01-10", description="Early",
            lines=[line(self.cash, debit=1), line(self.revenue, credit=1)],
        )
        adj = create_adjustment(
            date="2025-03-31", description="Adj", adjustment_type="Prepaid",
            lines=[line(self.rent, debit=2), line(self.cash, credit=2)],
        )
        late = post_journal_entry(
            date="2025-06-01", description="Late",
            lines=[line(self.cash, debit=3), line(self.revenue, credit=3)],
        )

        # newest first
        self.assertEqual(list(list_journal_entries())[0].pk, late.pk)
        self.assertEqual([e.pk for e in list_journal_entries(is_adjustment=True)], [adj.pk])
        self.assertEqual(
            [e.pk for e in list_journal_entries(adjustment_type="Prepaid")], [adj.pk]
        )
        in_range = list_journal_entries(
            start_date="2025-02-01", end_date="2025-05-31"
        )
        self.assertEqual([e.pk for e in in_range], [adj.pk])

    def test_get_missing_entry_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            get_journal_entry(987654)


""" Failure tests """
class JournalEntryFailureTests(TestCase):

    def setUp(self):
        self.cash = Account.objects.create(code="1000", name="Cash", ac_type="asset")
        self.revenue = Account.objects.create(code="4000", name="Sales Revenue", ac_type="revenue")

    def assert_nothing_posted(self):
        self.cash.refresh_from_db()
        self.revenue.refresh_from_db()
        self.assertEqual(self.cash.balance, Decimal("0.00"))
        self.assertEqual(self.revenue.balance, Decimal("0.00"))
        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(JournalLine.objects.count(), 0)

    """ Test for Unbalanced Entry """
    def test_unbalanced_entry_is_rejected(self):
        with self.assertRaises(UnbalancedJournalError) as cm:
            post_journal_entry(
                date="2025-09-15",
                description="Broken",
                lines=[line(self.cash, debit=100), line(self.revenue, credit=90)],
            )
        self.assertIn("Journal not balanced", str(cm.exception))
        self.assert_nothing_posted()

    def test_single_line_is_rejected(self):
        with self.assertRaises(ValidationError):
            post_journal_entry(
                date="2025-09-15", description="Lonely", lines=[line(self.cash, debit=0)]
            )
        self.assert_nothing_posted()

    def test_missing_description_and_bad_date(self):
        lines = [line(self.cash, debit=1), line(self.revenue, credit=1)]
        with self.assertRaises(ValidationError):
            post_journal_entry(date="2025-09-15", description="  ", lines=lines)
        with self.assertRaises(ValidationError):
            post_journal_entry(date="2025-02-30", description="x", lines=lines)
        with self.assertRaises(ValidationError):
            post_journal_entry(date=None, description="x", lines=lines)
        self.assert_nothing_posted()

    def test_negative_and_non_numeric_amounts(self):
        with self.assertRaises(ValidationError):
            post_journal_entry(
                date="2025-09-15", description="x",
                lines=[line(self.cash, debit=-5), line(self.revenue, credit=-5)],
            )
        with self.assertRaises(ValidationError):
            post_journal_entry(
                date="2025-09-15", description="x",
                lines=[line(self.cash, debit="ten"), line(self.revenue, credit=10)],
            )
        self.assert_nothing_posted()

    """ A missing account aborts the whole entry, including lines on valid accounts """
    def test_post_atomicity_on_missing_account(self):
        with self.assertRaises(NotFoundError):
            post_journal_entry(
                date="2025-09-15",
                description="Ghost",
                lines=[
                    line(self.cash, debit=100),
                    {"account_id": 999999, "debit": 0, "credit": 100},
                ],
            )
        self.assert_nothing_posted()

    def test_adjustment_requires_known_type(self):
        lines = [line(self.cash, debit=1), line(self.revenue, credit=1)]
        with self.assertRaises(ValidationError):
            create_adjustment(
                date="2025-12-31", description="x", adjustment_type=None, lines=lines
            )
        with self.assertRaises(ValidationError):
            create_adjustment(
                date="2025-12-31", description="x", adjustment_type="Bonus", lines=lines
            )
        self.assert_nothing_posted()


""" Posted entries are immutable """
class JournalEntryImmutabilityTests(TestCase):

    def setUp(self):
        self.cash = Account.objects.create(code="1000", name="Cash", ac_type="asset")
        self.revenue = Account.objects.create(code="4000", name="Sales Revenue", ac_type="revenue")
        self.entry = post_journal_entry(
            date="2025-09-15",
            description="Cash sale",
            lines=[line(self.cash, debit=10), line(self.revenue, credit=10)],
        )

    def test_posted_entry_cannot_be_modified(self):
        self.entry.description = "Rewritten"
        with self.assertRaises(ValidationError):
            self.entry.save()

    def test_posted_entry_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.entry.delete()
        self.assertTrue(JournalEntry.objects.filter(pk=self.entry.pk).exists())

    def test_lines_cannot_be_added_or_deleted(self):
        with self.assertRaises(ValidationError):
            JournalLine(journal=self.entry, account=self.cash, debit=Decimal("1.00")).save()
        with self.assertRaises(ValidationError):
            self.entry.lines.first().delete()
        self.assertEqual(self.entry.lines.count(), 2)
