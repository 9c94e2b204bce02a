from decimal import Decimal
from django.contrib import admin
from django.utils.html import format_html
from ledger_core.models import JournalEntry
from .inlines import JournalLineInline
from .ReadOnly import ReadOnlyAdmin


# Register `JournalEntry` model
@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdmin):
    """Posted entries are immutable: view only, no add/change/delete"""

    list_display = (
        "id",
        "date",
        "reference",
        "description",
        "is_adjustment",
        "adjustment_type",
        "posted_at",
        "created_by",
        "balanced",
    )
    list_filter = ("is_adjustment", "adjustment_type", "date")
    search_fields = ("reference", "description", "id")
    inlines = [JournalLineInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("created_by")

    """ Computed column for balance check """
    # Show total debits / total credits for each journal
    @admin.display(description="Debits / Credits")
    def balanced(self, obj):
        d, c = obj.compute_totals()
        # format: bold debits / small credits
        return format_html(
            "<b>{}</b> / <small>{}</small>",
            d or Decimal("0.00"),
            c or Decimal("0.00")
        )
