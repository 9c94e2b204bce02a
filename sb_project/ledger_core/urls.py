from django.urls import path

from . import views

app_name = "ledger_core"

urlpatterns = [
    path("accounts", views.accounts_view, name="accounts"),
    path("accounts/<int:account_id>", views.account_detail_view, name="account-detail"),
    path("journal-entries", views.journal_entries_view, name="journal-entries"),
    path("journal-entries/<int:entry_id>", views.journal_entry_detail_view, name="journal-entry-detail"),
    path("adjustments", views.adjustments_view, name="adjustments"),
    path("ledger", views.ledger_view, name="ledger"),
    path("trial-balance", views.trial_balance_view, name="trial-balance"),
    path("trial-balance/adjusted", views.adjusted_trial_balance_view, name="trial-balance-adjusted"),
    path("financials/income-statement", views.income_statement_view, name="income-statement"),
    path("financials/balance-sheet", views.balance_sheet_view, name="balance-sheet"),
    path("inventory", views.inventory_view, name="inventory"),
    path("inventory/<int:item_id>", views.inventory_detail_view, name="inventory-detail"),
    path("transactions", views.transactions_view, name="transactions"),
    path("close-period", views.close_period_view, name="close-period"),
]
