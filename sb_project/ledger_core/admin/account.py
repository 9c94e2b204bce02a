from django.contrib import admin
from ledger_core.models import Account
from .actions import verify_account_balances


# Register `Account` model
@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    # show key accounting fields
    list_display = (
        "id",
        "code",
        "name",
        "ac_type",
        "balance",
        "is_active",
    )
    list_filter = ("ac_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    fields = ("code", "name", "ac_type", "description", "balance", "is_active")
    # balance only moves through postings and the period close
    readonly_fields = ("balance",)
    actions = [verify_account_balances]

    def save_model(self, request, obj, form, change):
        if change:
            # write only what the form changed, never a stale balance
            changed = [f for f in form.changed_data if f != "balance"]
            if changed:
                obj.save(update_fields=changed + ["updated_at"])
            return
        super().save_model(request, obj, form, change)
