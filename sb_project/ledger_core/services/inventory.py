import logging
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from ..exceptions import (DuplicateSkuError, InsufficientQuantityError,
                          NotFoundError)
from ..models import (TRANSACTION_TYPES, InventoryItem, InventoryTransaction,
                      InventoryTransactionLine)
from .audit_helper import log_action
from .chart import resolve_control_accounts
from .locking import ledger_write
from .posting import post_journal_entry
from .posting_rules import QUANTITY_DIRECTION, lines_for
from .validation import (ZERO, parse_bool, parse_date, parse_decimal,
                         parse_pk, require_text, to_cents, to_quantity)

logger = logging.getLogger(__name__)

TRANSACTION_TYPE_VALUES = {value for value, _ in TRANSACTION_TYPES}
ITEM_TEXT_FIELDS = ("name", "sku", "category", "description", "location")
ITEM_PRICE_FIELDS = ("cost_price", "selling_price", "reorder_level")


# ----------------------------
# Inventory items
# ----------------------------
def get_item(item_id):
    item = InventoryItem.objects.filter(pk=item_id).first()
    if item is None:
        raise NotFoundError(f"Inventory item {item_id} not found")
    return item


def list_items(*, category=None, low_stock=False):
    qs = InventoryItem.objects.order_by("name")
    if category:
        qs = qs.filter(category=category)
    if low_stock:
        qs = qs.filter(quantity__lte=F("reorder_level"))
    return qs


def create_item(data, user=None):
    """Create an item; `quantity` here is the opening stock on hand."""
    values = {
        "name": require_text(data.get("name"), "name"),
        "sku": require_text(data.get("sku"), "sku"),
        "category": require_text(data.get("category"), "category"),
        "description": str(data.get("description") or ""),
        "location": str(data.get("location") or ""),
        "cost_price": to_cents(parse_decimal(data.get("cost_price"), "costPrice")),
        "selling_price": to_cents(parse_decimal(data.get("selling_price"), "sellingPrice")),
        "quantity": parse_decimal(data.get("quantity"), "quantity", default=ZERO),
        "is_active": parse_bool(data.get("is_active", True)) is not False,
    }
    if data.get("reorder_level") not in (None, ""):
        values["reorder_level"] = parse_decimal(data.get("reorder_level"), "reorderLevel")

    if InventoryItem.objects.filter(sku=values["sku"]).exists():
        raise DuplicateSkuError(f"SKU {values['sku']} already exists", field="sku")

    try:
        with transaction.atomic():
            item = InventoryItem(**values)
            item.save()
            log_action(action="create", instance=item, user=user, changes={"sku": item.sku})
    except IntegrityError:
        # lost a race with another create on the same SKU
        raise DuplicateSkuError(f"SKU {values['sku']} already exists", field="sku")

    logger.info("Inventory item created", extra={"item_id": item.pk, "sku": item.sku})
    return item


def update_item(item_id, data, user=None):
    """
    Update item master data. Stock on hand is not editable here:
    it only moves through inventory transactions.
    """
    item = get_item(item_id)
    changes = {}

    for field in ITEM_TEXT_FIELDS:
        if field not in data:
            continue
        if field in ("name", "sku", "category"):
            value = require_text(data[field], field)
        else:
            value = str(data[field] or "")
        if getattr(item, field) != value:
            changes[field] = value

    for field in ITEM_PRICE_FIELDS:
        if field in data:
            value = parse_decimal(data[field], field)
            if field != "reorder_level":
                value = to_cents(value)
            if getattr(item, field) != value:
                changes[field] = value

    if "is_active" in data:
        changes["is_active"] = bool(parse_bool(data["is_active"]))

    if "sku" in changes and InventoryItem.objects.filter(sku=changes["sku"]).exclude(pk=item.pk).exists():
        raise DuplicateSkuError(f"SKU {changes['sku']} already exists", field="sku")

    if not changes:
        return item

    for field, value in changes.items():
        setattr(item, field, value)
    with transaction.atomic():
        # update_fields keeps a concurrent quantity change intact
        item.save(update_fields=list(changes) + ["updated_at"])
        log_action(action="update", instance=item, user=user, changes=changes)
    return item


def delete_item(item_id, user=None):
    item = get_item(item_id)
    if item.transaction_lines.exists():
        raise ValidationError(
            "Cannot delete an inventory item that appears in transactions."
        )
    with transaction.atomic():
        log_action(action="delete", instance=item, user=user, changes={"sku": item.sku})
        item.delete()
    logger.info("Inventory item deleted", extra={"item_id": item_id})


# ----------------------------
# Inventory transactions
# ----------------------------
def _parse_items(items):
    """Return [(item_id, quantity, unit_price, total)] for the raw item list."""
    if not items:
        raise ValidationError("At least one item is required")
    parsed = []
    for idx, raw in enumerate(items, start=1):
        if not isinstance(raw, dict) or raw.get("inventory_item_id") in (None, ""):
            raise ValidationError(
                "Each item must have an inventory item ID, quantity, and unit price"
            )
        item_id = parse_pk(raw["inventory_item_id"], f"Item {idx} inventoryItemId")
        quantity = to_quantity(
            parse_decimal(raw.get("quantity"), f"Item {idx} quantity", allow_zero=False)
        )
        # a quantity below the stored precision would be saved as 0
        if quantity == 0:
            raise ValidationError(f"Item {idx} quantity must be > 0")
        unit_price = to_quantity(parse_decimal(raw.get("unit_price"), f"Item {idx} unitPrice"))
        parsed.append((item_id, quantity, unit_price, to_cents(quantity * unit_price)))
    return parsed


def record_transaction(*, date, tx_type, description, items, reference=None, user=None):
    """
    Record an inventory event: move stock and post its journal entry.

    Everything happens in one unit of work. An unknown item, an
    underflow, a zero-value posting or any missing control account
    (all of them are checked, not only the ones this type posts to)
    aborts the whole transaction with nothing written.
    """
    if tx_type not in TRANSACTION_TYPE_VALUES:
        raise ValidationError(f"Unknown transaction type: {tx_type}")
    tx_date = parse_date(date)
    description = require_text(description, "description")
    parsed = _parse_items(items)
    total = sum((line[3] for line in parsed), ZERO)
    direction = QUANTITY_DIRECTION.get(tx_type, 0)

    with ledger_write():
        accounts = resolve_control_accounts(settings.LEDGER_CONTROL_ACCOUNTS)

        # Lock the stock rows this transaction reads and moves
        stock = {
            item.pk: item
            for item in InventoryItem.objects.select_for_update()
            .filter(pk__in={line[0] for line in parsed})
            .order_by("pk")
        }
        for item_id, *_ in parsed:
            if item_id not in stock:
                raise NotFoundError(f"Inventory item {item_id} not found")

        # Same item on several lines moves once, by the summed quantity
        moves = {}
        for item_id, quantity, _, _ in parsed:
            moves[item_id] = moves.get(item_id, ZERO) + quantity
        if direction < 0:
            for item_id, quantity in moves.items():
                item = stock[item_id]
                if item.quantity < quantity:
                    raise InsufficientQuantityError(
                        f"Insufficient quantity for item {item.name} "
                        f"(on hand {item.quantity}, requested {quantity})",
                        item=item,
                    )

        cost = to_cents(
            sum((stock[item_id].cost_price * quantity for item_id, quantity, _, _ in parsed), ZERO)
        )
        rule_lines = lines_for(tx_type, total, cost)
        if not rule_lines:
            raise ValidationError("Transaction total must be greater than zero")

        tx = InventoryTransaction.objects.create(
            date=tx_date,
            tx_type=tx_type,
            description=description,
            total=total,
            reference=reference or None,
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
        InventoryTransactionLine.objects.bulk_create(
            [
                InventoryTransactionLine(
                    transaction=tx,
                    item_id=item_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    total=line_total,
                )
                for item_id, quantity, unit_price, line_total in parsed
            ]
        )

        if direction:
            now = timezone.now()
            for item_id, quantity in moves.items():
                InventoryItem.objects.filter(pk=item_id).update(
                    quantity=F("quantity") + direction * quantity, updated_at=now
                )

        entry = post_journal_entry(
            date=tx_date,
            description=f"{description} ({tx_type})",
            lines=[
                {
                    "account": accounts[line.role],
                    "debit": line.debit,
                    "credit": line.credit,
                }
                for line in rule_lines
            ],
            reference=str(tx.pk),
            user=user,
        )
        tx.journal_entry = entry
        tx.save(update_fields=["journal_entry"])
        log_action(
            action="create",
            instance=tx,
            user=user,
            changes={"type": tx_type, "total": total, "journal_id": entry.pk},
        )

    logger.info(
        "Inventory transaction recorded",
        extra={"transaction_id": tx.pk, "type": tx_type, "total": str(total)},
    )
    return tx


def list_transactions(*, tx_type=None, start_date=None, end_date=None):
    qs = InventoryTransaction.objects.prefetch_related("items__item").order_by("-date", "-id")
    if tx_type:
        qs = qs.filter(tx_type=tx_type)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    return qs
