from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from ..services import verify_balances

# ---------- Admin actions ----------


@admin.action(description="Verify balances against the journal")
def verify_account_balances(modeladmin, request, queryset):
    """
    Replay the journal and report every selected account whose
    stored balance disagrees with the replayed one.
    """
    selected = set(queryset.values_list("pk", flat=True))
    mismatches = [m for m in verify_balances() if m["account_id"] in selected]

    for m in mismatches:
        modeladmin.message_user(
            request,
            _("Account %(code)s: stored %(stored)s, journal %(replayed)s") % m,
            level=messages.ERROR,
        )

    # Final summary message
    modeladmin.message_user(
        request,
        _("Checked %(total)d accounts. %(failures)d mismatched.") % {
            "total": len(selected),
            "failures": len(mismatches),
        },
        level=messages.WARNING if mismatches else messages.SUCCESS,
    )
