from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from ledger_core.models import Account
from ledger_core.services import DEFAULT_CHART

User = get_user_model()


class Command(BaseCommand):
    help = (
        "Create the default chart of accounts (including every control "
        "account the inventory postings and the period close need)."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--admin-username",  # Define flag
            default=None,
            help="Also create a staff user with this username (skipped if it exists).",
        )
        parser.add_argument(
            "--admin-password", default="admin12345", help="Password for the staff user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        for code, name, ac_type in DEFAULT_CHART:
            # existing codes are left untouched, balances included
            _, was_created = Account.objects.get_or_create(
                code=code, defaults={"name": name, "ac_type": ac_type}
            )
            created += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Chart of accounts ready: {created} created, "
                f"{len(DEFAULT_CHART) - created} already present."
            )
        )

        username = options["admin_username"]
        if username and not User.objects.filter(username=username).exists():
            User.objects.create_user(
                username=username,
                password=options["admin_password"],
                is_staff=True,
            )
            self.stdout.write(self.style.SUCCESS(f"Staff user '{username}' created."))
