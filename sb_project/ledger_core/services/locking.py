import threading
from contextlib import contextmanager
from django.db import transaction

# One writer at a time per process. Row locks (select_for_update)
# cover other processes on backends that support them.
_ledger_lock = threading.RLock()


@contextmanager
def ledger_write():
    """
    Open the unit of work every balance mutation runs in.

    The lock is taken before the transaction begins and released after it
    commits or rolls back, so a second writer never reads a balance that
    is about to change. Nested calls (an inventory transaction posting its
    journal entry) re-enter the lock and become savepoints.
    """
    with _ledger_lock:
        with transaction.atomic():
            yield


@contextmanager
def ledger_read():
    """
    Open the unit of work a multi-query report reads in.

    Holding the writer lock keeps in-process postings from landing
    between two queries of the same report. On PostgreSQL the outermost
    transaction also runs at REPEATABLE READ so every query shares one
    snapshot, even with writers in other processes.
    """
    connection = transaction.get_connection()
    outermost = not connection.in_atomic_block
    with _ledger_lock:
        with transaction.atomic():
            if outermost and connection.vendor == "postgresql":
                # must come before any other statement in the transaction
                with connection.cursor() as cursor:
                    cursor.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ")
            yield
