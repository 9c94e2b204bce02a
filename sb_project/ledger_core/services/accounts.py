import logging
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from ..exceptions import AccountInUseError, DuplicateCodeError, NotFoundError
from ..models import AC_TYPES, Account
from .audit_helper import log_action
from .chart import control_account_codes
from .validation import parse_bool, require_text

logger = logging.getLogger(__name__)

AC_TYPE_VALUES = {value for value, _ in AC_TYPES}


# ----------------------------
# Chart of accounts maintenance
# ----------------------------
def _clean_type(value):
    ac_type = require_text(value, "type").lower()
    if ac_type not in AC_TYPE_VALUES:
        raise ValidationError(f"Invalid account type: {value}")
    return ac_type


def get_account(account_id):
    account = Account.objects.filter(pk=account_id).first()
    if account is None:
        raise NotFoundError(f"Account {account_id} not found")
    return account


def list_accounts(*, ac_type=None, is_active=None):
    qs = Account.objects.order_by("code")
    if ac_type:
        qs = qs.filter(ac_type=ac_type)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs


def create_account(data, user=None):
    """
    Create a ledger account. Balance always starts at 0:
    it is never taken from the caller.
    """
    code = require_text(data.get("code"), "code")
    name = require_text(data.get("name"), "name")
    ac_type = _clean_type(data.get("ac_type"))

    if Account.objects.filter(code=code).exists():
        raise DuplicateCodeError(f"Account code {code} already exists", field="code")

    try:
        with transaction.atomic():
            account = Account.objects.create(
                code=code,
                name=name,
                ac_type=ac_type,
                description=str(data.get("description") or ""),
                is_active=parse_bool(data.get("is_active", True)) is not False,
            )
            log_action(
                action="create",
                instance=account,
                user=user,
                changes={"code": code, "name": name, "type": ac_type},
            )
    except IntegrityError:
        # lost a race with another create on the same code
        raise DuplicateCodeError(f"Account code {code} already exists", field="code")

    logger.info("Account created", extra={"account_id": account.pk, "code": code})
    return account


def update_account(account_id, data, user=None):
    """Update descriptive fields. `balance` is ignored if supplied."""
    account = get_account(account_id)
    changes = {}

    if "code" in data:
        code = require_text(data["code"], "code")
        if code != account.code:
            if Account.objects.filter(code=code).exclude(pk=account.pk).exists():
                raise DuplicateCodeError(f"Account code {code} already exists", field="code")
            changes["code"] = code
    if "name" in data:
        name = require_text(data["name"], "name")
        if name != account.name:
            changes["name"] = name
    if "ac_type" in data:
        ac_type = _clean_type(data["ac_type"])
        if ac_type != account.ac_type:
            # the stored balance was built with the old sign convention
            if account.journal_lines.exists():
                raise ValidationError(
                    "Cannot change the type of an account that has journal lines."
                )
            changes["ac_type"] = ac_type
    if "description" in data:
        description = str(data["description"] or "")
        if description != account.description:
            changes["description"] = description
    if "is_active" in data:
        is_active = bool(parse_bool(data["is_active"]))
        if is_active != account.is_active:
            changes["is_active"] = is_active

    if not changes:
        return account

    for field, value in changes.items():
        setattr(account, field, value)
    try:
        with transaction.atomic():
            # update_fields: never write back a stale balance
            account.save(update_fields=list(changes) + ["updated_at"])
            log_action(action="update", instance=account, user=user, changes=changes)
    except IntegrityError:
        raise DuplicateCodeError(f"Account code {changes.get('code')} already exists", field="code")

    logger.info("Account updated", extra={"account_id": account.pk, "fields": sorted(changes)})
    return account


def delete_account(account_id, user=None):
    """
    Hard delete. Refused for control accounts and for accounts
    referenced by any journal line; deactivate those instead.
    """
    account = get_account(account_id)
    if account.code in control_account_codes().values():
        raise AccountInUseError(
            f"Account {account.code} is a control account and cannot be deleted."
        )
    if account.journal_lines.exists():
        raise AccountInUseError("Cannot delete account used in journal lines.")

    with transaction.atomic():
        log_action(action="delete", instance=account, user=user, changes={"code": account.code})
        account.delete()
    logger.info("Account deleted", extra={"account_id": account_id, "code": account.code})
