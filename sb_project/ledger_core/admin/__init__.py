from .account import AccountAdmin
from .actions import verify_account_balances
from .auditlog import AuditLogAdmin
from .inlines import InventoryTransactionLineInline, JournalLineInline
from .item import InventoryItemAdmin, InventoryTransactionAdmin
from .journal import JournalEntryAdmin
