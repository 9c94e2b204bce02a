from django.contrib import admin
from ledger_core.models import InventoryItem, InventoryTransaction
from .inlines import InventoryTransactionLineInline
from .ReadOnly import ReadOnlyAdmin


# Register `InventoryItem` model
@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = (
        "id", "sku", "name", "category", "cost_price",
        "selling_price", "quantity", "reorder_level", "is_active",
    )
    search_fields = ("sku", "name")
    list_filter = ("category", "is_active")
    # stock on hand only moves through inventory transactions
    readonly_fields = ("quantity",)

    def save_model(self, request, obj, form, change):
        if change:
            changed = [f for f in form.changed_data if f != "quantity"]
            if changed:
                obj.save(update_fields=changed + ["updated_at"])
            return
        super().save_model(request, obj, form, change)


# Register `InventoryTransaction` model
@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(ReadOnlyAdmin):
    list_display = ("id", "date", "tx_type", "description", "total", "journal_entry")
    list_filter = ("tx_type", "date")
    search_fields = ("description", "reference")
    inlines = [InventoryTransactionLineInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("journal_entry")
