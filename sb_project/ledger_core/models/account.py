from decimal import Decimal
from django.db import models

# Choice Lists
AC_TYPES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("revenue", "Revenue"),
    ("expense", "Expense"),
]

# Which side increases an account of each type
# Assets/Expenses → Debit, Liabilities/Equity/Revenue → Credit.
NORMAL_BALANCE = {
    "asset": "debit",
    "expense": "debit",
    "liability": "credit",
    "equity": "credit",
    "revenue": "credit",
}


def balance_delta(ac_type, debit, credit):
    """Signed change a (debit, credit) pair makes to an account of `ac_type`."""
    if NORMAL_BALANCE[ac_type] == "debit":
        return debit - credit
    return credit - debit


class Account(models.Model):
    """
    Ledger account in the Chart of Accounts.
    - code is unique across the ledger ("1200" Inventory, "2000" AP ...)
    - ac_type decides the sign convention and which report shows it
    - balance is the running net of every posted line on this account,
      always expressed on the account's normal side
    """

    # Every account has a code
    # which lets you sort/group accounts consistently in reports.
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(
        max_length=200
    )  # Human-readable name → "Cash on Hand", "Accounts Payable".

    # Classify account into one of the 5 basic accounting types
    ac_type = models.CharField(
        max_length=10,
        choices=AC_TYPES,
        # This tells the system whether the account
        # goes on the Balance Sheet or the Income Statement
    )
    description = models.TextField(blank=True, default="")

    # Materialized aggregate: only the posting engine
    # and the period close write to it (via F() increments)
    balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # “soft deactivate” accounts (hide from reports)
    # without deleting history
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        indexes = [
            # For reports grouped by ac_type
            # (Trial Balance, Income Statement, Balance Sheet)
            models.Index(fields=["ac_type", "is_active"], name="acct_type_active_idx"),
        ]

    def __str__(self):
        # Example: "1200 – Inventory"
        return f"{self.code} – {self.name}"

    @property
    def normal_balance(self):
        return NORMAL_BALANCE[self.ac_type]

    def delta_for(self, debit, credit):
        return balance_delta(self.ac_type, debit, credit)
