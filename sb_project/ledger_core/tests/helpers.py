from ledger_core.models import Account
from ledger_core.services import DEFAULT_CHART


def create_chart():
    """Create the default chart of accounts and return it keyed by code."""
    Account.objects.bulk_create(
        [Account(code=code, name=name, ac_type=ac_type) for code, name, ac_type in DEFAULT_CHART]
    )
    return {a.code: a for a in Account.objects.all()}


def balance_of(code):
    return Account.objects.get(code=code).balance


def line(account, debit=0, credit=0):
    return {"account_id": account.pk, "debit": debit, "credit": credit}
