import logging
from django.db import transaction
from django.db.models import Sum
from ..models import Account, JournalLine, balance_delta
from .validation import ZERO

logger = logging.getLogger(__name__)


# ----------------------------
# Stored balance vs journal replay
# ----------------------------
def replay_balances():
    """Recompute every account balance from its journal lines, keyed by pk."""
    sums = (
        JournalLine.objects.values("account_id", "account__ac_type")
        .annotate(debit=Sum("debit"), credit=Sum("credit"))
    )
    return {
        row["account_id"]: balance_delta(
            row["account__ac_type"], row["debit"] or ZERO, row["credit"] or ZERO
        )
        for row in sums
    }


def verify_balances():
    """
    Compare each stored balance with its replayed value.
    Returns a list of mismatches (empty when the ledger is consistent).
    """
    with transaction.atomic():
        accounts = list(Account.objects.order_by("code"))
        replayed = replay_balances()

    mismatches = []
    for account in accounts:
        expected = replayed.get(account.pk, ZERO)
        if account.balance != expected:
            mismatches.append(
                {
                    "account_id": account.pk,
                    "code": account.code,
                    "stored": account.balance,
                    "replayed": expected,
                }
            )
            logger.warning(
                "Stored balance differs from journal replay",
                extra={
                    "code": account.code,
                    "stored": str(account.balance),
                    "replayed": str(expected),
                },
            )
    return mismatches
