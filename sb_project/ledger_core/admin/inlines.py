from django.contrib import admin

from ledger_core.models import InventoryTransactionLine, JournalLine

# ---------- Read-only inline admin classes ----------


class JournalLineInline(admin.TabularInline):
    """Show JournalLine rows on the JournalEntry page"""

    model = JournalLine
    extra = 0  # don’t show “empty” rows
    fields = ("account", "description", "debit", "credit")
    readonly_fields = fields  # posted lines are never edited
    ordering = ("id",)  # lines appear in posting order
    can_delete = False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("account")

    def has_add_permission(self, request, obj=None):
        return False


class InventoryTransactionLineInline(admin.TabularInline):
    """Show item rows on the InventoryTransaction page"""

    model = InventoryTransactionLine
    extra = 0
    fields = ("item", "quantity", "unit_price", "total")
    readonly_fields = fields
    can_delete = False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("item")

    def has_add_permission(self, request, obj=None):
        return False
