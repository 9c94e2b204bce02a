from .accounts import (create_account, delete_account, get_account,
                       list_accounts, update_account)
from .chart import (DEFAULT_CHART, control_account_codes,
                    missing_control_accounts, resolve_control_accounts)
from .closing import close_period
from .inventory import (create_item, delete_item, get_item, list_items,
                        list_transactions, record_transaction, update_item)
from .posting import (create_adjustment, get_journal_entry,
                      list_journal_entries, post_journal_entry)
from .reports import (adjusted_trial_balance, balance_sheet, general_ledger,
                      income_statement, trial_balance)
from .verification import replay_balances, verify_balances
