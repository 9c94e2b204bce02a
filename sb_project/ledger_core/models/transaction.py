from decimal import Decimal
from django.conf import settings
from django.db import models
from .item import InventoryItem
from .journal import JournalEntry

TRANSACTION_TYPES = [
    ("purchase", "Purchase"),
    ("purchase-return", "Purchase Return"),
    ("purchase-allowance", "Purchase Allowance"),
    ("purchase-discount", "Purchase Discount"),
    ("inbound-freight", "Inbound Freight"),
    ("sale", "Sale"),
    ("sale-return", "Sale Return"),
    ("sale-allowance", "Sale Allowance"),
    ("sale-discount", "Sale Discount"),
    ("outbound-freight", "Outbound Freight"),
]


# ---------- Inventory transaction (Header) & lines ----------
class InventoryTransaction(models.Model):
    """
    A purchase/sale style event. Recording one moves item quantities
    and posts exactly one balanced journal entry, in a single unit.
    """

    date = models.DateField()
    tx_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    description = models.TextField()
    # Σ line totals, rounded to cents
    total = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    reference = models.CharField(max_length=200, null=True, blank=True)

    # The entry generated for this transaction
    # (its reference is this transaction's id)
    journal_entry = models.OneToOneField(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,  # Prevent breaking historical ledger
        related_name="inventory_transaction",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["tx_type", "date"], name="tx_type_date_idx"),
        ]

    def __str__(self):
        return f"TX {self.pk} {self.date} {self.tx_type} {self.total}"


class InventoryTransactionLine(models.Model):
    transaction = models.ForeignKey(
        InventoryTransaction,
        on_delete=models.CASCADE,
        related_name="items",
    )
    # can’t delete an item that appears in history
    item = models.ForeignKey(
        InventoryItem, on_delete=models.PROTECT, related_name="transaction_lines"
    )
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_price = models.DecimalField(max_digits=18, decimal_places=4)
    # quantity × unit_price, rounded to cents
    total = models.DecimalField(max_digits=18, decimal_places=2)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="txl_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="txl_unit_price_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_id} | {self.item_id} x {self.quantity} @ {self.unit_price}"
