from .account import AC_TYPES, NORMAL_BALANCE, Account, balance_delta
from .auditlog import AuditLog
from .item import InventoryItem
from .journal import (ADJUSTMENT_TYPES, CLOSING_REFERENCE, JournalEntry,
                      JournalLine)
from .transaction import (TRANSACTION_TYPES, InventoryTransaction,
                          InventoryTransactionLine)
