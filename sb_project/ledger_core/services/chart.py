import logging
from django.conf import settings
from ..exceptions import MissingControlAccountError
from ..models import Account

logger = logging.getLogger(__name__)

# ----------------------------
# Chart of accounts & control accounts
# ----------------------------
# (code, name, type) rows created by `manage.py seed_chart`.
# The control codes below must match settings.LEDGER_CONTROL_ACCOUNTS
DEFAULT_CHART = [
    ("1000", "Cash", "asset"),
    ("1100", "Accounts Receivable", "asset"),
    ("1200", "Inventory", "asset"),
    ("1300", "Prepaid Expenses", "asset"),
    ("1400", "Supplies", "asset"),
    ("1500", "Equipment", "asset"),
    ("1510", "Accumulated Depreciation", "asset"),
    ("2000", "Accounts Payable", "liability"),
    ("2100", "Accrued Liabilities", "liability"),
    ("2200", "Unearned Revenue", "liability"),
    ("3000", "Owner's Capital", "equity"),
    ("3200", "Retained Earnings", "equity"),
    ("4000", "Sales Revenue", "revenue"),
    ("4100", "Sales Returns and Allowances", "revenue"),
    ("4200", "Service Revenue", "revenue"),
    ("5000", "Cost of Goods Sold", "expense"),
    ("5100", "Purchase Returns and Allowances", "expense"),
    ("5200", "Freight Expense", "expense"),
    ("6000", "Rent Expense", "expense"),
    ("6100", "Salaries Expense", "expense"),
    ("6200", "Supplies Expense", "expense"),
    ("6300", "Depreciation Expense", "expense"),
]


def control_account_codes():
    """Every code the engine looks up by itself: control accounts + retained earnings."""
    codes = dict(settings.LEDGER_CONTROL_ACCOUNTS)
    codes["retained_earnings"] = settings.LEDGER_RETAINED_EARNINGS_CODE
    return codes


def resolve_control_accounts(roles, lock=False):
    """
    Map role names ("inventory", "accounts_payable" ...) to Account rows.
    Raise MissingControlAccountError naming the first code that is missing.
    """
    codes = control_account_codes()
    wanted = {role: codes[role] for role in roles}
    qs = Account.objects.filter(code__in=wanted.values())
    if lock:
        qs = qs.select_for_update().order_by("pk")
    by_code = {acct.code: acct for acct in qs}

    resolved = {}
    for role, code in sorted(wanted.items()):
        if code not in by_code:
            logger.error(
                "Control account missing",
                extra={"role": role, "code": code},
            )
            raise MissingControlAccountError(code, role)
        resolved[role] = by_code[code]
    return resolved


def retained_earnings_account(lock=False):
    return resolve_control_accounts(["retained_earnings"], lock=lock)["retained_earnings"]


def missing_control_accounts():
    """Return {role: code} for every configured code with no Account row."""
    codes = control_account_codes()
    present = set(
        Account.objects.filter(code__in=codes.values()).values_list("code", flat=True)
    )
    return {role: code for role, code in codes.items() if code not in present}
