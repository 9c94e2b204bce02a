"""
Read-side reports over the ledger.

None of these functions write. Each reads under ledger_read() so a
report is computed from a single consistent view of the balances;
the statements go further and load every account they show in one query.
"""
from django.conf import settings
from django.db.models import Q, Sum
from django.utils import timezone
from ..exceptions import NotFoundError
from ..models import Account, JournalLine, balance_delta
from .locking import ledger_read
from .validation import ZERO


def present_balance(account, balance):
    """
    Split a signed balance into (debit, credit) columns.
    A balance on the normal side shows on that side; a negative
    (contra/abnormal) balance shows as a positive figure on the other.
    """
    amount = abs(balance)
    on_normal_side = balance >= 0
    if (account.normal_balance == "debit") == on_normal_side:
        return amount, ZERO
    return ZERO, amount


def _tolerance():
    return settings.LEDGER_BALANCE_TOLERANCE


def _trial_balance_rows(accounts, balances):
    rows = []
    total_debit = ZERO
    total_credit = ZERO
    for account in accounts:
        debit, credit = present_balance(account, balances[account.pk])
        rows.append({"account": account, "debit": debit, "credit": credit})
        total_debit += debit
        total_credit += credit
    return {
        "rows": rows,
        "totals": {
            "debit": total_debit,
            "credit": total_credit,
            "is_balanced": abs(total_debit - total_credit) < _tolerance(),
        },
    }


# ----------------------------
# Trial balances
# ----------------------------
def trial_balance():
    with ledger_read():
        accounts = list(Account.objects.filter(is_active=True).order_by("code"))
    return _trial_balance_rows(accounts, {a.pk: a.balance for a in accounts})


def adjustment_effects():
    """Net signed effect of every adjusting-entry line, per account pk."""
    sums = (
        JournalLine.objects.filter(journal__is_adjustment=True)
        .values("account_id", "account__ac_type")
        .annotate(debit=Sum("debit"), credit=Sum("credit"))
    )
    return {
        row["account_id"]: balance_delta(
            row["account__ac_type"], row["debit"] or ZERO, row["credit"] or ZERO
        )
        for row in sums
    }


def adjusted_trial_balance():
    """Trial balance with the adjusting entries overlaid onto each stored balance."""
    with ledger_read():
        accounts = list(Account.objects.filter(is_active=True).order_by("code"))
        effects = adjustment_effects()
    balances = {a.pk: a.balance + effects.get(a.pk, ZERO) for a in accounts}
    return _trial_balance_rows(accounts, balances)


# ----------------------------
# General ledger (T-accounts)
# ----------------------------
def _account_ledger(account, lines):
    entries = []
    running = ZERO
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        running += account.delta_for(line.debit, line.credit)
        total_debit += line.debit
        total_credit += line.credit
        journal = line.journal
        entries.append(
            {
                "date": journal.date,
                "journal_id": journal.pk,
                "description": line.description or journal.description,
                "reference": journal.reference,
                "debit": line.debit,
                "credit": line.credit,
                "running_balance": running,
            }
        )
    return {
        "account": account,
        "entries": entries,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "balance": running,
    }


def general_ledger(*, account_id=None, start_date=None, end_date=None):
    """
    Replay journal lines per account in chronological order.

    Without a date range the final running balance of each account
    equals its stored balance.
    """
    with ledger_read():
        if account_id is not None:
            account = Account.objects.filter(pk=account_id).first()
            if account is None:
                raise NotFoundError(f"Account {account_id} not found")
            accounts = [account]
        else:
            accounts = list(Account.objects.order_by("code"))

        line_filter = Q(account_id=account_id) if account_id is not None else Q()
        if start_date:
            line_filter &= Q(journal__date__gte=start_date)
        if end_date:
            line_filter &= Q(journal__date__lte=end_date)
        lines = (
            JournalLine.objects.filter(line_filter)
            .select_related("journal")
            .order_by("journal__date", "journal_id", "id")
        )
        by_account = {a.pk: [] for a in accounts}
        for line in lines:
            by_account[line.account_id].append(line)

    return [_account_ledger(a, by_account[a.pk]) for a in accounts]


# ----------------------------
# Financial statements
# ----------------------------
def _sections(*ac_types):
    """Active accounts of `ac_types` read in one query, grouped per type with a total."""
    with ledger_read():
        accounts = list(
            Account.objects.filter(is_active=True, ac_type__in=ac_types).order_by("code")
        )
    sections = {}
    for ac_type in ac_types:
        members = [a for a in accounts if a.ac_type == ac_type]
        sections[ac_type] = {
            "accounts": members,
            "total": sum((a.balance for a in members), ZERO),
        }
    return sections


def income_statement(*, start_date=None, end_date=None):
    """
    Revenue, expenses and net income from the current balances.
    The date range is echoed back; balances are point-in-time totals.
    """
    sections = _sections("revenue", "expense")
    revenue = sections["revenue"]
    expenses = sections["expense"]
    return {
        "start_date": start_date,
        "end_date": end_date,
        "revenue": revenue,
        "expenses": expenses,
        "net_income": revenue["total"] - expenses["total"],
    }


def balance_sheet():
    sections = _sections("asset", "liability", "equity")
    assets = sections["asset"]
    total_le = sections["liability"]["total"] + sections["equity"]["total"]
    return {
        "date": timezone.localdate(),
        "assets": assets,
        "liabilities": sections["liability"],
        "equity": sections["equity"],
        "total_liabilities_and_equity": total_le,
        "is_balanced": abs(assets["total"] - total_le) < _tolerance(),
    }
