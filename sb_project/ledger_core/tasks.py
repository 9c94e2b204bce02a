import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def verify_account_balances():
    """
    Replay the journal and compare it with every stored balance.
    Returns the number of accounts that disagree.
    """
    # import services lazily to avoid circular imports at module import time
    from .services import verify_balances

    mismatches = verify_balances()
    if mismatches:
        logger.error(
            "Ledger verification failed",
            extra={"mismatched_codes": [m["code"] for m in mismatches]},
        )
    else:
        logger.info("Ledger verification passed")
    return len(mismatches)
