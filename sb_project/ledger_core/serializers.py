"""
Plain dict renderers for the JSON API.

Keys are camelCase to match the web client; Decimal amounts
are turned into strings by DjangoJSONEncoder inside JsonResponse.
"""


def account_ref(account):
    return {
        "id": account.pk,
        "code": account.code,
        "name": account.name,
        "type": account.ac_type,
    }


def account_to_dict(account):
    return {
        **account_ref(account),
        "description": account.description,
        "balance": account.balance,
        "isActive": account.is_active,
        "createdAt": account.created_at,
        "updatedAt": account.updated_at,
    }


def journal_entry_to_dict(entry):
    return {
        "id": entry.pk,
        "date": entry.date,
        "description": entry.description,
        "reference": entry.reference,
        "isAdjustment": entry.is_adjustment,
        "adjustmentType": entry.adjustment_type,
        "isPosted": entry.is_posted,
        "postedAt": entry.posted_at,
        "createdAt": entry.created_at,
        # lines, in the order they were posted
        "entries": [
            {
                "accountId": line.account_id,
                "account": account_ref(line.account),
                "description": line.description,
                "debit": line.debit,
                "credit": line.credit,
            }
            for line in entry.lines.all()
        ],
    }


def item_to_dict(item):
    return {
        "id": item.pk,
        "name": item.name,
        "sku": item.sku,
        "description": item.description,
        "category": item.category,
        "costPrice": item.cost_price,
        "sellingPrice": item.selling_price,
        "quantity": item.quantity,
        "reorderLevel": item.reorder_level,
        "location": item.location,
        "isActive": item.is_active,
        "isLowStock": item.is_low_stock,
        "createdAt": item.created_at,
        "updatedAt": item.updated_at,
    }


def transaction_to_dict(tx):
    return {
        "id": tx.pk,
        "date": tx.date,
        "type": tx.tx_type,
        "description": tx.description,
        "total": tx.total,
        "reference": tx.reference,
        "journalEntryId": tx.journal_entry_id,
        "createdAt": tx.created_at,
        "items": [
            {
                "inventoryItemId": line.item_id,
                "item": {"id": line.item_id, "name": line.item.name, "sku": line.item.sku},
                "quantity": line.quantity,
                "unitPrice": line.unit_price,
                "total": line.total,
            }
            for line in tx.items.all()
        ],
    }


def trial_balance_to_dict(report):
    return {
        "trialBalance": [
            {
                "account": account_ref(row["account"]),
                "debit": row["debit"],
                "credit": row["credit"],
            }
            for row in report["rows"]
        ],
        "totals": {
            "debit": report["totals"]["debit"],
            "credit": report["totals"]["credit"],
            "isBalanced": report["totals"]["is_balanced"],
        },
    }


def ledger_to_list(ledger):
    return [
        {
            "account": account_ref(section["account"]),
            "entries": [
                {
                    "date": row["date"],
                    "journalEntryId": row["journal_id"],
                    "description": row["description"],
                    "reference": row["reference"],
                    "debit": row["debit"],
                    "credit": row["credit"],
                    "runningBalance": row["running_balance"],
                }
                for row in section["entries"]
            ],
            "totals": {
                "debit": section["total_debit"],
                "credit": section["total_credit"],
            },
            "balance": section["balance"],
        }
        for section in ledger
    ]


def _statement_section(section):
    return {
        "accounts": [
            {**account_ref(a), "balance": a.balance} for a in section["accounts"]
        ],
        "total": section["total"],
    }


def income_statement_to_dict(report):
    return {
        "startDate": report["start_date"],
        "endDate": report["end_date"],
        "revenue": _statement_section(report["revenue"]),
        "expenses": _statement_section(report["expenses"]),
        "netIncome": report["net_income"],
    }


def balance_sheet_to_dict(report):
    return {
        "date": report["date"],
        "assets": _statement_section(report["assets"]),
        "liabilities": _statement_section(report["liabilities"]),
        "equity": _statement_section(report["equity"]),
        "totalLiabilitiesAndEquity": report["total_liabilities_and_equity"],
        "isBalanced": report["is_balanced"],
    }
