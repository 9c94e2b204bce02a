import json
from django.contrib import admin
from django.core.serializers.json import DjangoJSONEncoder
from django.utils.html import format_html

from ledger_core.models import AuditLog

from .ReadOnly import ReadOnlyAdmin


# Register `AuditLog` model
@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAdmin):
    # who posted / closed / edited what, newest first
    list_display = ("created_at", "actor", "action", "object_type", "object_id")
    list_filter = ("action", "object_type")
    search_fields = ("object_id", "user__username")
    date_hierarchy = "created_at"
    list_select_related = ("user",)
    fields = ("created_at", "user", "action", "object_type", "object_id", "changes_pretty")

    def get_readonly_fields(self, request, obj=None):
        return self.fields

    # Writes made by management commands or Celery have no user
    @admin.display(description="User", ordering="user__username")
    def actor(self, obj):
        return obj.user or "system"

    @admin.display(description="Changes")
    def changes_pretty(self, obj):
        if not obj.changes:
            return "-"
        text = json.dumps(obj.changes, indent=2, sort_keys=True, cls=DjangoJSONEncoder)
        return format_html("<pre>{}</pre>", text)
