from decimal import Decimal
from django.core.exceptions import ValidationError
from django.conf import settings
from django.db import transaction
from django.db.models import ProtectedError
from django.test import TestCase, override_settings
from ledger_core.exceptions import (AccountInUseError, DuplicateCodeError,
                                    NotFoundError)
from ledger_core.models import Account, AuditLog
from ledger_core.services import (create_account, delete_account, get_account,
                                  list_accounts, missing_control_accounts,
                                  post_journal_entry, update_account)
from .helpers import create_chart, line


""" Chart of accounts maintenance """
class AccountServiceTests(TestCase):

    def test_create_starts_at_zero(self):
        account = create_account(
            {"code": "1050", "name": "Petty Cash", "ac_type": "Asset", "balance": "999"}
        )
        self.assertEqual(account.ac_type, "asset")
        self.assertEqual(account.balance, Decimal("0.00"))
        self.assertTrue(account.is_active)
        self.assertTrue(
            AuditLog.objects.filter(action="create", object_type="Account").exists()
        )

    def test_duplicate_code(self):
        create_account({"code": "1050", "name": "Petty Cash", "ac_type": "asset"})
        with self.assertRaises(DuplicateCodeError) as cm:
            create_account({"code": "1050", "name": "Other", "ac_type": "asset"})
        self.assertEqual(cm.exception.field, "code")

    def test_invalid_input(self):
        with self.assertRaises(ValidationError):
            create_account({"code": "", "name": "Nameless", "ac_type": "asset"})
        with self.assertRaises(ValidationError):
            create_account({"code": "9000", "name": "Odd", "ac_type": "contra"})

    def test_active_flag_accepts_string_booleans(self):
        account = create_account(
            {"code": "1050", "name": "Petty Cash", "ac_type": "asset", "is_active": "false"}
        )
        self.assertFalse(account.is_active)

        account = update_account(account.pk, {"is_active": "true"})
        self.assertTrue(account.is_active)
        update_account(account.pk, {"is_active": "false"})
        account.refresh_from_db()
        self.assertFalse(account.is_active)

    def test_update_never_touches_balance(self):
        cash = Account.objects.create(code="1000", name="Cash", ac_type="asset")
        revenue = Account.objects.create(code="4000", name="Sales", ac_type="revenue")
        post_journal_entry(
            date="2025-09-15", description="Sale",
            lines=[line(cash, debit=40), line(revenue, credit=40)],
        )

        updated = update_account(cash.pk, {"name": "Cash on Hand", "balance": "1"})
        updated.refresh_from_db()
        self.assertEqual(updated.name, "Cash on Hand")
        self.assertEqual(updated.balance, Decimal("40.00"))

    def test_type_change_is_refused_once_used(self):
        cash = Account.objects.create(code="1000", name="Cash", ac_type="asset")
        revenue = Account.objects.create(code="4000", name="Sales", ac_type="revenue")
        post_journal_entry(
            date="2025-09-15", description="Sale",
            lines=[line(cash, debit=40), line(revenue, credit=40)],
        )
        with self.assertRaises(ValidationError):
            update_account(cash.pk, {"ac_type": "expense"})

        unused = Account.objects.create(code="6500", name="Misc", ac_type="expense")
        self.assertEqual(update_account(unused.pk, {"ac_type": "liability"}).ac_type, "liability")

    def test_update_to_taken_code(self):
        Account.objects.create(code="1000", name="Cash", ac_type="asset")
        other = Account.objects.create(code="1010", name="Bank", ac_type="asset")
        with self.assertRaises(DuplicateCodeError):
            update_account(other.pk, {"code": "1000"})

    def test_list_filters(self):
        create_chart()
        Account.objects.filter(code="4200").update(is_active=False)
        revenue_codes = [a.code for a in list_accounts(ac_type="revenue")]
        self.assertEqual(revenue_codes, ["4000", "4100", "4200"])
        active = [a.code for a in list_accounts(ac_type="revenue", is_active=True)]
        self.assertEqual(active, ["4000", "4100"])

    def test_get_unknown(self):
        with self.assertRaises(NotFoundError):
            get_account(424242)


""" Deleting accounts """
class AccountDeleteTests(TestCase):

    def setUp(self):
        self.accounts = create_chart()

    def test_delete_unused_account(self):
        delete_account(self.accounts["6200"].pk)
        self.assertFalse(Account.objects.filter(code="6200").exists())

    def test_control_account_cannot_be_deleted(self):
        with self.assertRaises(AccountInUseError):
            delete_account(self.accounts["1200"].pk)
        with self.assertRaises(AccountInUseError):
            delete_account(self.accounts["3200"].pk)

    def test_referenced_account_cannot_be_deleted(self):
        post_journal_entry(
            date="2025-09-15", description="Rent",
            lines=[line(self.accounts["6000"], debit=5), line(self.accounts["1000"], credit=5)],
        )
        with self.assertRaises(AccountInUseError):
            delete_account(self.accounts["6000"].pk)
        # deletes that bypass the service hit the PROTECT foreign key
        with self.assertRaises(ProtectedError):
            self.accounts["6000"].delete()

    def test_control_account_delete_is_blocked_at_model_level(self):
        with self.assertRaises(AccountInUseError):
            # the signal aborts the delete mid-transaction
            with transaction.atomic():
                Account.objects.filter(code="2000").delete()
        self.assertTrue(Account.objects.filter(code="2000").exists())

    def test_missing_control_accounts(self):
        self.assertEqual(missing_control_accounts(), {})
        codes = {**settings.LEDGER_CONTROL_ACCOUNTS, "freight_expense": "5999"}
        with override_settings(LEDGER_CONTROL_ACCOUNTS=codes):
            self.assertEqual(missing_control_accounts(), {"freight_expense": "5999"})
        self.assertEqual(missing_control_accounts(), {})
