from django.core.management.base import BaseCommand, CommandError
from ledger_core.services import control_account_codes, missing_control_accounts


class Command(BaseCommand):
    help = "Fail if any configured control account code has no Account row."

    def handle(self, *args, **options):
        missing = missing_control_accounts()
        if missing:
            listing = ", ".join(f"{role}={code}" for role, code in sorted(missing.items()))
            raise CommandError(f"Missing control accounts: {listing}")
        self.stdout.write(
            self.style.SUCCESS(
                f"All {len(control_account_codes())} control accounts are present."
            )
        )
