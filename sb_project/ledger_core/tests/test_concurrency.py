import threading
from decimal import Decimal
from django.db import connection
from django.test import TransactionTestCase
from ledger_core.models import Account, InventoryItem, JournalEntry
from ledger_core.services import (balance_sheet, post_journal_entry,
                                  record_transaction)
from ledger_core.services.locking import ledger_write
from .helpers import create_chart, line

THREADS = 8
POSTS_PER_THREAD = 5


""" Balances under concurrent posting """
class ConcurrentPostingTests(TransactionTestCase):
    # Worker threads need committed rows, so no wrapping transaction here

    def run_workers(self, work):
        barrier = threading.Barrier(THREADS)
        errors = []

        def worker():
            try:
                barrier.wait()
                for _ in range(POSTS_PER_THREAD):
                    work()
            except Exception as exc:  # surfaced by the assertion below
                errors.append(exc)
            finally:
                # each thread owns its own DB connection
                connection.close()

        threads = [threading.Thread(target=worker) for _ in range(THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(errors, [])

    def test_no_lost_updates(self):
        cash = Account.objects.create(code="1000", name="Cash", ac_type="asset")
        revenue = Account.objects.create(code="4000", name="Sales Revenue", ac_type="revenue")

        self.run_workers(
            lambda: post_journal_entry(
                date="2025-09-15",
                description="Counter sale",
                lines=[line(cash, debit=10), line(revenue, credit=10)],
            )
        )

        cash.refresh_from_db()
        revenue.refresh_from_db()
        total = Decimal(10 * THREADS * POSTS_PER_THREAD)
        self.assertEqual(cash.balance, total)
        self.assertEqual(revenue.balance, total)
        self.assertEqual(JournalEntry.objects.count(), THREADS * POSTS_PER_THREAD)

    def test_concurrent_purchases_keep_stock_and_books_in_step(self):
        create_chart()
        item = InventoryItem.objects.create(
            sku="A1", name="Widget", category="Parts",
            cost_price=Decimal("2.00"), selling_price=Decimal("5.00"),
        )

        self.run_workers(
            lambda: record_transaction(
                date="2025-09-15",
                tx_type="purchase",
                description="Restock",
                items=[{"inventory_item_id": item.pk, "quantity": 1, "unit_price": 2}],
            )
        )

        item.refresh_from_db()
        runs = THREADS * POSTS_PER_THREAD
        self.assertEqual(item.quantity, Decimal(runs))
        self.assertEqual(Account.objects.get(code="1200").balance, Decimal(2 * runs))
        self.assertEqual(Account.objects.get(code="2000").balance, Decimal(2 * runs))


""" Reports against in-flight postings """
class ReportConsistencyTests(TransactionTestCase):

    def test_report_waits_for_posting_in_progress(self):
        accounts = create_chart()
        posted = threading.Event()
        release = threading.Event()
        result = {}

        def slow_purchase():
            try:
                with ledger_write():
                    post_journal_entry(
                        date="2025-09-15",
                        description="Stock on credit",
                        lines=[line(accounts["1200"], debit=100), line(accounts["2000"], credit=100)],
                    )
                    posted.set()
                    release.wait(5)
            finally:
                connection.close()

        def read_sheet():
            try:
                result["sheet"] = balance_sheet()
            finally:
                connection.close()

        writer = threading.Thread(target=slow_purchase)
        writer.start()
        self.assertTrue(posted.wait(5))

        reader = threading.Thread(target=read_sheet)
        reader.start()
        reader.join(0.2)
        # the unit of work is still open, so the report has to wait
        self.assertTrue(reader.is_alive())

        release.set()
        writer.join()
        reader.join()
        sheet = result["sheet"]
        self.assertEqual(sheet["assets"]["total"], Decimal("100.00"))
        self.assertEqual(sheet["liabilities"]["total"], Decimal("100.00"))
        self.assertTrue(sheet["is_balanced"])
