from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .exceptions import AccountInUseError
from .models import Account
from .services.chart import control_account_codes

"""Block deletion of the control accounts the ledger posts to.
Accounts with journal lines are already PROTECTed by the FK."""


# pre_delete fires just before Django deletes an Account,
# including deletes issued from the admin or a queryset
@receiver(pre_delete, sender=Account)
def prevent_delete_required_account(sender, instance, **kwargs):
    if instance.code in control_account_codes().values():
        raise AccountInUseError(
            f"Account {instance.code} is a control account and cannot be deleted."
        )
