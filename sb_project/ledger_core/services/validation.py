import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date as _parse_iso_date
from django.utils.dateparse import parse_datetime

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")
# quantities and unit prices are stored with 4 decimal places
QUANTITY_PLACES = Decimal("0.0001")


# ------------------------------------
# Input parsing shared by the services
# ------------------------------------
def to_cents(value):
    """Round a Decimal to 2 places (half up), the ledger's storage precision."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_quantity(value):
    """Round a Decimal to the 4 places quantities and unit prices are stored with."""
    return Decimal(value).quantize(QUANTITY_PLACES, rounding=ROUND_HALF_UP)


def require_text(value, field):
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def parse_decimal(value, field, *, allow_zero=True, default=None):
    """
    Turn a JSON number / numeric string into a non-negative Decimal.
    `default` is returned for missing values; without one they are an error.
    """
    if value is None or value == "":
        if default is not None:
            return default
        raise ValidationError(f"{field} is required")
    # True/False are ints in Python, never amounts
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if amount == 0 and not allow_zero:
        raise ValidationError(f"{field} must be > 0")
    return amount


def parse_date(value, field="date"):
    """Accept a date, a datetime or an ISO string ("2025-09-15" or a full timestamp)."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = require_text(value, field)
    try:
        parsed = _parse_iso_date(text)
        if parsed is None:
            stamp = parse_datetime(text)
            parsed = stamp.date() if stamp else None
    except ValueError:
        # well formed but impossible, e.g. 2025-02-30
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be a valid date (YYYY-MM-DD)")
    return parsed


def parse_optional_date(value, field):
    if value in (None, ""):
        return None
    return parse_date(value, field)


def parse_bool(value):
    """Query-string style booleans: "true"/"1"/"yes" are True."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    return str(value).strip().lower() in ("true", "1", "yes", "on")


def parse_pk(value, field):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an id")
