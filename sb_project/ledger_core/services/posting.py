import logging
from collections import namedtuple
from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone
from ..exceptions import NotFoundError, UnbalancedJournalError
from ..models import ADJUSTMENT_TYPES, Account, JournalEntry, JournalLine
from .audit_helper import log_action
from .locking import ledger_write
from .validation import (ZERO, parse_date, parse_decimal, parse_pk,
                         require_text, to_cents)

logger = logging.getLogger(__name__)

ADJUSTMENT_TYPE_VALUES = {value for value, _ in ADJUSTMENT_TYPES}

# A validated line, ready to persist
PostingLine = namedtuple("PostingLine", "account_id debit credit description")


# ----------------------------
# Journal-related workflows
# ----------------------------
def normalize_lines(lines):
    """
    Validate raw lines and return PostingLine tuples.

    Each line is a mapping with either `account` (an Account) or
    `account_id`, plus `debit` / `credit` (missing means 0) and an
    optional `description`. Raises ValidationError before anything
    is written.
    """
    if not lines or len(lines) < 2:
        raise ValidationError("A journal entry needs at least two lines")

    normalized = []
    for idx, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise ValidationError(f"Line {idx} is malformed")
        account = line.get("account")
        if isinstance(account, Account):
            account_id = account.pk
        else:
            raw_id = line.get("account_id", account)
            if raw_id in (None, ""):
                raise ValidationError(f"Line {idx}: account is required")
            account_id = parse_pk(raw_id, f"Line {idx} account")
        debit = to_cents(parse_decimal(line.get("debit"), f"Line {idx} debit", default=ZERO))
        credit = to_cents(parse_decimal(line.get("credit"), f"Line {idx} credit", default=ZERO))
        normalized.append(
            PostingLine(account_id, debit, credit, str(line.get("description") or ""))
        )

    # Enforce double-entry rule: debits = credits (within tolerance)
    total_debit = sum((ln.debit for ln in normalized), ZERO)
    total_credit = sum((ln.credit for ln in normalized), ZERO)
    if abs(total_debit - total_credit) > settings.LEDGER_BALANCE_TOLERANCE:
        raise UnbalancedJournalError(
            f"Journal not balanced: debits={total_debit}, credits={total_credit}"
        )
    return normalized


def lock_accounts(account_ids):
    """Lock the referenced accounts (pk order) and return them by pk."""
    accounts = {
        acct.pk: acct
        for acct in Account.objects.select_for_update()
        .filter(pk__in=set(account_ids))
        .order_by("pk")
    }
    missing = sorted(set(account_ids) - accounts.keys())
    if missing:
        raise NotFoundError(f"Account {missing[0]} not found")
    return accounts


def apply_lines(accounts, lines):
    """
    Add each line's signed effect to its account balance.
    The increment runs in SQL (balance = balance + delta), never as a
    read-modify-write of a Python value.
    """
    deltas = {}
    for line in lines:
        account = accounts[line.account_id]
        deltas[account.pk] = deltas.get(account.pk, ZERO) + account.delta_for(
            line.debit, line.credit
        )
    now = timezone.now()
    for account_id, delta in deltas.items():
        if delta:
            Account.objects.filter(pk=account_id).update(
                balance=F("balance") + delta, updated_at=now
            )
    return deltas


def write_entry(
    *, date, description, lines, reference=None,
    is_adjustment=False, adjustment_type=None, user=None,
):
    """Persist a posted entry and its validated lines. Balances are the caller's job."""
    entry = JournalEntry.objects.create(
        date=date,
        description=description,
        reference=reference or None,
        is_adjustment=bool(is_adjustment),
        adjustment_type=adjustment_type,
        is_posted=True,
        posted_at=timezone.now(),
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    # Lines go in one INSERT, in the order given
    JournalLine.objects.bulk_create(
        [
            JournalLine(
                journal=entry,
                account_id=ln.account_id,
                description=ln.description,
                debit=ln.debit,
                credit=ln.credit,
            )
            for ln in lines
        ]
    )
    return entry


def post_journal_entry(
    *,
    date,
    description,
    lines,
    is_adjustment=False,
    adjustment_type=None,
    reference=None,
    user=None,
):
    """
    Validate and atomically post one journal entry.

    Either every line is persisted and every balance moved, or
    nothing changes. Returns the posted JournalEntry.
    """
    entry_date = parse_date(date)
    description = require_text(description, "description")
    if adjustment_type in ("", None):
        adjustment_type = None
    elif adjustment_type not in ADJUSTMENT_TYPE_VALUES:
        raise ValidationError(f"Unknown adjustment type: {adjustment_type}")
    normalized = normalize_lines(lines)

    with ledger_write():
        # Lock rows to avoid lost updates on the balances
        accounts = lock_accounts([ln.account_id for ln in normalized])
        entry = write_entry(
            date=entry_date,
            description=description,
            lines=normalized,
            reference=reference,
            is_adjustment=is_adjustment,
            adjustment_type=adjustment_type,
            user=user,
        )
        deltas = apply_lines(accounts, normalized)

        log_action(
            action="post",
            instance=entry,
            user=user,
            changes={
                "reference": entry.reference,
                "balances": {accounts[pk].code: delta for pk, delta in deltas.items()},
            },
        )

    logger.info(
        "Journal entry posted",
        extra={
            "journal_id": entry.pk,
            "reference": entry.reference,
            "is_adjustment": entry.is_adjustment,
            "total": str(sum((ln.debit for ln in normalized), Decimal("0.00"))),
        },
    )
    return entry


def create_adjustment(*, date, description, adjustment_type, lines, reference=None, user=None):
    """Post a period-end adjusting entry; the adjustment type is mandatory."""
    if adjustment_type in (None, ""):
        raise ValidationError("adjustmentType is required")
    return post_journal_entry(
        date=date,
        description=description,
        lines=lines,
        is_adjustment=True,
        adjustment_type=adjustment_type,
        reference=reference,
        user=user,
    )


def list_journal_entries(
    *, is_adjustment=None, adjustment_type=None, start_date=None, end_date=None
):
    # newest first, with lines and their accounts in two extra queries
    qs = JournalEntry.objects.prefetch_related("lines__account").order_by("-date", "-id")
    if is_adjustment is not None:
        qs = qs.filter(is_adjustment=is_adjustment)
    if adjustment_type:
        qs = qs.filter(adjustment_type=adjustment_type)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    return qs


def get_journal_entry(entry_id):
    entry = (
        JournalEntry.objects.prefetch_related("lines__account")
        .filter(pk=entry_id)
        .first()
    )
    if entry is None:
        raise NotFoundError(f"Journal entry {entry_id} not found")
    return entry
