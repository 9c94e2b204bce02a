"""
Posting rules for inventory transactions.

Each transaction type maps to a pure function
`(total, cost) -> [RuleLine, ...]` that names the control account
*roles* to debit and credit. The rules never touch the database:
the translator resolves roles to Account rows and hands the lines
to the posting engine.

Adding a transaction type means adding one function and one
entry in POSTING_RULES.
"""
from collections import namedtuple
from decimal import Decimal

ZERO = Decimal("0.00")

# role: key of settings.LEDGER_CONTROL_ACCOUNTS
RuleLine = namedtuple("RuleLine", "role debit credit")

# How each type moves stock: +1 in, -1 out, 0 no quantity change
QUANTITY_DIRECTION = {
    "purchase": 1,
    "sale-return": 1,
    "sale": -1,
    "purchase-return": -1,
}


def _pair(debit_role, credit_role, amount):
    """Debit one role and credit another; zero amounts produce no lines."""
    if amount <= ZERO:
        return []
    return [
        RuleLine(debit_role, amount, ZERO),
        RuleLine(credit_role, ZERO, amount),
    ]


def purchase(total, cost):
    # Dr Inventory / Cr Accounts Payable
    return _pair("inventory", "accounts_payable", total)


def purchase_return(total, cost):
    # Dr Accounts Payable / Cr Inventory
    return _pair("accounts_payable", "inventory", total)


def purchase_reduction(total, cost):
    # allowance or discount: Dr Accounts Payable / Cr Purchase Returns
    return _pair("accounts_payable", "purchase_returns", total)


def inbound_freight(total, cost):
    # freight in is capitalized into inventory
    return _pair("inventory", "accounts_payable", total)


def outbound_freight(total, cost):
    return _pair("freight_expense", "accounts_payable", total)


def sale(total, cost):
    # revenue side at selling price, COGS side at cost
    return (
        _pair("accounts_receivable", "sales_revenue", total)
        + _pair("cost_of_goods_sold", "inventory", cost)
    )


def sale_return(total, cost):
    return (
        _pair("sales_returns", "accounts_receivable", total)
        + _pair("inventory", "cost_of_goods_sold", cost)
    )


def sale_reduction(total, cost):
    # allowance or discount: Dr Sales Returns / Cr Accounts Receivable
    return _pair("sales_returns", "accounts_receivable", total)


POSTING_RULES = {
    "purchase": purchase,
    "purchase-return": purchase_return,
    "purchase-allowance": purchase_reduction,
    "purchase-discount": purchase_reduction,
    "inbound-freight": inbound_freight,
    "outbound-freight": outbound_freight,
    "sale": sale,
    "sale-return": sale_return,
    "sale-allowance": sale_reduction,
    "sale-discount": sale_reduction,
}


def lines_for(tx_type, total, cost):
    return POSTING_RULES[tx_type](total, cost)
