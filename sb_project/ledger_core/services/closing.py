import logging
from django.db.models import F
from django.utils import timezone
from ..models import CLOSING_REFERENCE, Account
from .audit_helper import log_action
from .chart import retained_earnings_account
from .locking import ledger_write
from .posting import PostingLine, lock_accounts, normalize_lines, write_entry
from .validation import ZERO, parse_date

logger = logging.getLogger(__name__)

CLOSED_TYPES = ("revenue", "expense")


# ----------------------------
# Period close
# ----------------------------
def _closing_lines(accounts, retained, closes_debit_side):
    """
    Lines that bring every account in `accounts` to zero, balanced
    against Retained Earnings.

    closes_debit_side=True is the revenue entry: a positive revenue
    balance is debited. Expense balances are credited. Abnormal
    (negative) balances go on the other side so amounts stay >= 0.
    """
    lines = []
    total = ZERO
    for account in accounts:
        amount = abs(account.balance)
        debit_it = (account.balance > 0) == closes_debit_side
        lines.append(
            PostingLine(
                account.pk,
                amount if debit_it else ZERO,
                ZERO if debit_it else amount,
                f"Close {account.code} {account.name}",
            )
        )
        total += account.balance

    # Retained Earnings takes the other side of the net amount
    if total:
        amount = abs(total)
        re_on_credit = (total > 0) == closes_debit_side
        lines.append(
            PostingLine(
                retained.pk,
                ZERO if re_on_credit else amount,
                amount if re_on_credit else ZERO,
                "Transfer to retained earnings",
            )
        )
    return lines, total


def close_period(date=None, user=None):
    """
    Close revenue and expense accounts into Retained Earnings.

    Writes up to two posted entries (reference "CLOSING"), resets every
    closed balance to 0 and adds net income to Retained Earnings, all in
    one unit of work. There is no undo.
    """
    close_date = parse_date(date) if date else timezone.localdate()

    with ledger_write():
        # Missing Retained Earnings is fatal before anything is read
        retained = retained_earnings_account()
        candidate_ids = list(
            Account.objects.filter(is_active=True, ac_type__in=CLOSED_TYPES)
            .values_list("pk", flat=True)
        )
        # One lock for every row touched, in the pk order posting uses
        locked = lock_accounts(candidate_ids + [retained.pk])
        retained = locked[retained.pk]
        open_accounts = sorted(
            (
                a for a in locked.values()
                if a.is_active and a.ac_type in CLOSED_TYPES and a.balance != 0
            ),
            key=lambda a: a.code,
        )
        revenues = [a for a in open_accounts if a.ac_type == "revenue"]
        expenses = [a for a in open_accounts if a.ac_type == "expense"]

        closing_entries = []
        revenue_total = ZERO
        expense_total = ZERO

        if revenues:
            lines, revenue_total = _closing_lines(revenues, retained, closes_debit_side=True)
            closing_entries.append(
                write_entry(
                    date=close_date,
                    description="Closing revenue accounts",
                    # re-run the balance check on the generated lines
                    lines=normalize_lines([ln._asdict() for ln in lines]),
                    reference=CLOSING_REFERENCE,
                    user=user,
                )
            )
        if expenses:
            lines, expense_total = _closing_lines(expenses, retained, closes_debit_side=False)
            closing_entries.append(
                write_entry(
                    date=close_date,
                    description="Closing expense accounts",
                    lines=normalize_lines([ln._asdict() for ln in lines]),
                    reference=CLOSING_REFERENCE,
                    user=user,
                )
            )

        net_income = revenue_total - expense_total
        now = timezone.now()
        Account.objects.filter(pk__in=[a.pk for a in open_accounts]).update(
            balance=ZERO, updated_at=now
        )
        if net_income:
            Account.objects.filter(pk=retained.pk).update(
                balance=F("balance") + net_income, updated_at=now
            )

        log_action(
            action="close",
            instance=retained,
            user=user,
            changes={
                "date": close_date,
                "net_income": net_income,
                "closed_accounts": [a.code for a in open_accounts],
                "journal_ids": [e.pk for e in closing_entries],
            },
        )

    logger.info(
        "Period closed",
        extra={
            "date": str(close_date),
            "net_income": str(net_income),
            "closing_entries": [e.pk for e in closing_entries],
        },
    )
    return {"net_income": net_income, "closing_entries": closing_entries}
