from django.contrib import admin

"""Base admin for ledger records that only the services write
(posted journal entries, inventory transactions, audit log).
Staff can browse and open them; nothing can be added, edited or removed."""


class ReadOnlyAdmin(admin.ModelAdmin):
    list_per_page = 50
    # Newest records first, matching the API listings
    ordering = ("-id",)

    # every concrete field, including foreign keys
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    # Without change permission Django renders the view-only page
    # (no save buttons) for users holding view or change rights
    def has_change_permission(self, request, obj=None):
        return False

    def has_view_permission(self, request, obj=None):
        return request.user.is_active and request.user.is_staff

    # No bulk actions on history (drops delete_selected too)
    def get_actions(self, request):
        return {}
