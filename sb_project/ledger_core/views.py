import json
import logging
from functools import wraps
from django.core.exceptions import ValidationError
from django.http import HttpResponseNotAllowed, JsonResponse
from django.views.csrf import csrf_failure as default_csrf_failure
from django.views.decorators.csrf import ensure_csrf_cookie
from . import serializers, services
from .exceptions import (ConfigurationError, DuplicateKeyError,
                         InsufficientQuantityError, NotFoundError,
                         UnauthorizedError)
from .services.validation import (parse_bool, parse_optional_date,
                                  parse_pk)

logger = logging.getLogger(__name__)

# camelCase request keys → service keyword names
ACCOUNT_KEYS = {
    "code": "code",
    "name": "name",
    "type": "ac_type",
    "description": "description",
    "isActive": "is_active",
}
ITEM_KEYS = {
    "name": "name",
    "sku": "sku",
    "description": "description",
    "category": "category",
    "costPrice": "cost_price",
    "sellingPrice": "selling_price",
    "quantity": "quantity",
    "reorderLevel": "reorder_level",
    "location": "location",
    "isActive": "is_active",
}


def _rename(data, mapping):
    return {new: data[old] for old, new in mapping.items() if old in data}


def _error(message, status, **extra):
    return JsonResponse({"error": message, **extra}, status=status)


def _validation_message(exc):
    return "; ".join(exc.messages)


def api_view(*methods):
    """
    Wrap a JSON endpoint:
    - only `methods` are accepted (405 otherwise)
    - caller must be an authenticated staff user (401)
    - service errors become JSON error responses
    - every response carries the csrftoken cookie; session clients echo
      it in the X-CSRFToken header on POST/PUT/DELETE (see csrf_failure)
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in methods:
                return HttpResponseNotAllowed(methods)
            try:
                user = request.user
                if not (user.is_authenticated and user.is_staff):
                    raise UnauthorizedError()
                return view(request, *args, **kwargs)
            except UnauthorizedError:
                # no detail about why
                return _error("Unauthorized", 401)
            except DuplicateKeyError as e:
                return _error(_validation_message(e), 400, field=e.field)
            except InsufficientQuantityError as e:
                item_id = e.item.pk if e.item is not None else None
                return _error(_validation_message(e), 400, itemId=item_id)
            except ValidationError as e:
                return _error(_validation_message(e), 400)
            except NotFoundError as e:
                return _error(str(e), 404)
            except ConfigurationError as e:
                # misconfigured chart of accounts, the message names the code
                logger.error("Ledger configuration error: %s", e)
                return _error(str(e), 500)
            except Exception:
                logger.exception("Unhandled error in %s", view.__name__)
                return _error("Internal server error", 500)
        return ensure_csrf_cookie(wrapper)
    return decorator


def csrf_failure(request, reason=""):
    """CSRF rejections on the JSON API stay JSON; the admin keeps Django's page."""
    if request.path.startswith("/api/"):
        logger.warning("CSRF check failed", extra={"path": request.path, "reason": reason})
        return _error("CSRF verification failed", 403)
    return default_csrf_failure(request, reason=reason)


def _json_body(request):
    try:
        data = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _lines_from(data):
    entries = data.get("entries")
    if not isinstance(entries, list):
        raise ValidationError("Date, description, and at least two entries are required")
    return [
        {
            "account_id": e.get("accountId"),
            "debit": e.get("debit"),
            "credit": e.get("credit"),
            "description": e.get("description"),
        } if isinstance(e, dict) else e
        for e in entries
    ]


def _date_range(request):
    return (
        parse_optional_date(request.GET.get("startDate"), "startDate"),
        parse_optional_date(request.GET.get("endDate"), "endDate"),
    )


# ---------- Accounts ----------
@api_view("GET", "POST")
def accounts_view(request):
    if request.method == "POST":
        data = _rename(_json_body(request), ACCOUNT_KEYS)
        account = services.create_account(data, user=request.user)
        return JsonResponse(serializers.account_to_dict(account), status=201)

    is_active = request.GET.get("isActive")
    accounts = services.list_accounts(
        ac_type=request.GET.get("type") or None,
        is_active=parse_bool(is_active) if is_active not in (None, "") else None,
    )
    return JsonResponse([serializers.account_to_dict(a) for a in accounts], safe=False)


@api_view("GET", "PUT", "DELETE")
def account_detail_view(request, account_id):
    if request.method == "PUT":
        data = _rename(_json_body(request), ACCOUNT_KEYS)
        account = services.update_account(account_id, data, user=request.user)
        return JsonResponse(serializers.account_to_dict(account))
    if request.method == "DELETE":
        services.delete_account(account_id, user=request.user)
        return JsonResponse({"message": "Account deleted successfully"})
    return JsonResponse(serializers.account_to_dict(services.get_account(account_id)))


# ---------- Journal entries & adjustments ----------
@api_view("GET", "POST")
def journal_entries_view(request):
    if request.method == "POST":
        data = _json_body(request)
        entry = services.post_journal_entry(
            date=data.get("date"),
            description=data.get("description"),
            lines=_lines_from(data),
            is_adjustment=bool(parse_bool(data.get("isAdjustment", False))),
            adjustment_type=data.get("adjustmentType"),
            reference=data.get("reference"),
            user=request.user,
        )
        entry = services.get_journal_entry(entry.pk)
        return JsonResponse(serializers.journal_entry_to_dict(entry), status=201)

    start_date, end_date = _date_range(request)
    is_adjustment = request.GET.get("isAdjustment")
    entries = services.list_journal_entries(
        is_adjustment=parse_bool(is_adjustment) if is_adjustment not in (None, "") else None,
        adjustment_type=request.GET.get("adjustmentType") or None,
        start_date=start_date,
        end_date=end_date,
    )
    return JsonResponse([serializers.journal_entry_to_dict(e) for e in entries], safe=False)


@api_view("GET")
def journal_entry_detail_view(request, entry_id):
    entry = services.get_journal_entry(entry_id)
    return JsonResponse(serializers.journal_entry_to_dict(entry))


@api_view("GET", "POST")
def adjustments_view(request):
    if request.method == "POST":
        data = _json_body(request)
        entry = services.create_adjustment(
            date=data.get("date"),
            description=data.get("description"),
            adjustment_type=data.get("adjustmentType"),
            lines=_lines_from(data),
            reference=data.get("reference"),
            user=request.user,
        )
        entry = services.get_journal_entry(entry.pk)
        return JsonResponse(serializers.journal_entry_to_dict(entry), status=201)

    start_date, end_date = _date_range(request)
    entries = services.list_journal_entries(
        is_adjustment=True,
        adjustment_type=request.GET.get("adjustmentType") or None,
        start_date=start_date,
        end_date=end_date,
    )
    return JsonResponse([serializers.journal_entry_to_dict(e) for e in entries], safe=False)


# ---------- Reports ----------
@api_view("GET")
def ledger_view(request):
    start_date, end_date = _date_range(request)
    account_id = request.GET.get("accountId")
    ledger = services.general_ledger(
        account_id=parse_pk(account_id, "accountId") if account_id else None,
        start_date=start_date,
        end_date=end_date,
    )
    return JsonResponse(serializers.ledger_to_list(ledger), safe=False)


@api_view("GET")
def trial_balance_view(request):
    return JsonResponse(serializers.trial_balance_to_dict(services.trial_balance()))


@api_view("GET")
def adjusted_trial_balance_view(request):
    return JsonResponse(serializers.trial_balance_to_dict(services.adjusted_trial_balance()))


@api_view("GET")
def income_statement_view(request):
    start_date, end_date = _date_range(request)
    report = services.income_statement(start_date=start_date, end_date=end_date)
    return JsonResponse(serializers.income_statement_to_dict(report))


@api_view("GET")
def balance_sheet_view(request):
    return JsonResponse(serializers.balance_sheet_to_dict(services.balance_sheet()))


# ---------- Inventory ----------
@api_view("GET", "POST")
def inventory_view(request):
    if request.method == "POST":
        data = _rename(_json_body(request), ITEM_KEYS)
        item = services.create_item(data, user=request.user)
        return JsonResponse(serializers.item_to_dict(item), status=201)

    items = services.list_items(
        category=request.GET.get("category") or None,
        low_stock=bool(parse_bool(request.GET.get("lowStock"))),
    )
    return JsonResponse([serializers.item_to_dict(i) for i in items], safe=False)


@api_view("GET", "PUT", "DELETE")
def inventory_detail_view(request, item_id):
    if request.method == "PUT":
        data = _rename(_json_body(request), ITEM_KEYS)
        item = services.update_item(item_id, data, user=request.user)
        return JsonResponse(serializers.item_to_dict(item))
    if request.method == "DELETE":
        services.delete_item(item_id, user=request.user)
        return JsonResponse({"message": "Inventory item deleted successfully"})
    return JsonResponse(serializers.item_to_dict(services.get_item(item_id)))


@api_view("GET", "POST")
def transactions_view(request):
    if request.method == "POST":
        data = _json_body(request)
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise ValidationError("Date, type, description, and at least one item are required")
        tx = services.record_transaction(
            date=data.get("date"),
            tx_type=data.get("type"),
            description=data.get("description"),
            items=[
                {
                    "inventory_item_id": i.get("inventoryItemId"),
                    "quantity": i.get("quantity"),
                    "unit_price": i.get("unitPrice"),
                } if isinstance(i, dict) else i
                for i in raw_items
            ],
            reference=data.get("reference"),
            user=request.user,
        )
        tx = services.list_transactions().get(pk=tx.pk)
        return JsonResponse(serializers.transaction_to_dict(tx), status=201)

    start_date, end_date = _date_range(request)
    transactions = services.list_transactions(
        tx_type=request.GET.get("type") or None,
        start_date=start_date,
        end_date=end_date,
    )
    return JsonResponse([serializers.transaction_to_dict(t) for t in transactions], safe=False)


# ---------- Period close ----------
@api_view("POST")
def close_period_view(request):
    data = _json_body(request)
    result = services.close_period(data.get("date"), user=request.user)
    return JsonResponse(
        {
            "message": "Period closed successfully",
            "netIncome": result["net_income"],
            "closingEntries": [
                serializers.journal_entry_to_dict(e) for e in result["closing_entries"]
            ],
        }
    )
