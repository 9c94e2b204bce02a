from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # JSON API for the ledger, inventory and reports
    path("api/", include("ledger_core.urls")),
]
