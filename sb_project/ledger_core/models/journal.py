from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from .account import Account

ADJUSTMENT_TYPES = [
    ("Depreciation", "Depreciation"),
    ("Prepaid", "Prepaid"),
    ("Unearned Revenue", "Unearned Revenue"),
    ("Accrued Revenue", "Accrued Revenue"),
    ("Accrued Expense", "Accrued Expense"),
    ("Supplies", "Supplies"),
]

# Reference stamped on the entries written by the period close
CLOSING_REFERENCE = "CLOSING"


# ---------- Journal (Header) & JournalLine ----------
class JournalEntry(models.Model):  # Represents one accounting transaction
    """
    A posted set of balanced debit/credit lines.
    Entries are written once by the posting engine and never edited:
    corrections are made with new entries.
    """

    # Business metadata
    date = models.DateField()
    description = models.TextField()
    # Inventory transaction id, "CLOSING", or a caller supplied reference
    reference = models.CharField(max_length=200, null=True, blank=True)

    # Period-end adjustments are flagged so the
    # adjusted trial balance can overlay them
    is_adjustment = models.BooleanField(default=False)
    adjustment_type = models.CharField(
        max_length=20, choices=ADJUSTMENT_TYPES, null=True, blank=True
    )

    is_posted = models.BooleanField(default=False)
    posted_at = models.DateTimeField(null=True, blank=True)
    # Track user who created it
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        # Speed up listing & filtering
        # (e.g. show all adjustments this month)
        indexes = [
            models.Index(fields=["date"], name="je_date_idx"),
            models.Index(fields=["is_adjustment", "date"], name="je_adj_date_idx"),
            models.Index(fields=["reference"], name="je_reference_idx"),
        ]
        verbose_name_plural = "journal entries"

    def __str__(self):
        state = "posted" if self.is_posted else "draft"
        return f"JE {self.pk} {self.date} [{state}]"

    # Aggregate all debit and credit amounts across entry’s lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        aggs = self.lines.aggregate(
            total_debit=models.Sum("debit"),
            total_credit=models.Sum("credit"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )

    # True if double-entry rule holds within the ledger tolerance
    def is_balanced(self):
        debit, credit = self.compute_totals()
        return abs(debit - credit) <= settings.LEDGER_BALANCE_TOLERANCE

    def save(self, *args, **kwargs):
        if self.pk:  # Does this row already exist in DB?
            # Fetch "original" row to compare
            orig = JournalEntry.objects.filter(pk=self.pk).only("is_posted").first()
            if orig and orig.is_posted:
                raise ValidationError(
                    "Cannot modify a posted JournalEntry. It is immutable."
                )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # Posted entries are part of the audit trail
        if self.is_posted:
            raise ValidationError("Cannot delete a posted JournalEntry.")
        return super().delete(*args, **kwargs)


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    Each line belongs to a journal entry and to one GL account.
    Lines keep their insertion order (id ascending).
    """

    journal = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    # Must point to one Account (can’t delete account if lines exist → PROTECT)
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="journal_lines"
    )
    description = models.CharField(max_length=400, blank=True, default="")

    debit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        # For fast queries like “all lines for this account”
        indexes = [
            models.Index(fields=["account", "journal"], name="jl_account_journal_idx"),
        ]
        # Enforce debits and credits must be non-negative
        constraints = [
            models.CheckConstraint(
                condition=models.Q(debit__gte=0) & models.Q(credit__gte=0),
                name="jl_non_negative_amounts",
            ),
        ]

    # Show journal, account, and amounts in admin dropdowns and debug logs
    def __str__(self):
        return f"{self.journal_id} | {self.account_id} | D:{self.debit} C:{self.credit}"

    def clean(self):
        # Ensure no negative values sneak in
        # (redundant with CheckConstraint but useful at app-level)
        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit and credit must be >= 0")

    def save(self, *args, **kwargs):
        # Lines are written in bulk by the posting engine;
        # a single save() on a posted journal is an edit attempt
        if self.journal_id and JournalEntry.objects.filter(
            pk=self.journal_id, is_posted=True
        ).exists():
            raise ValidationError(
                "Cannot add or modify JournalLine: parent journal is posted."
            )
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # Prevent deletion if parent journal is posted
        if JournalEntry.objects.filter(pk=self.journal_id, is_posted=True).exists():
            raise ValidationError(
                "Cannot delete JournalLine: parent JournalEntry is posted."
            )
        return super().delete(*args, **kwargs)
