from django.core.management.base import BaseCommand, CommandError
from ledger_core.tasks import verify_account_balances
from ledger_core.services import verify_balances


class Command(BaseCommand):
    help = "Replay the journal and compare it with every stored account balance."

    def add_arguments(self, parser):
        parser.add_argument(
            "--async",
            action="store_true",
            dest="run_async",
            help="Queue the check on the Celery worker instead of running it here.",
        )

    def handle(self, *args, **options):
        if options["run_async"]:
            result = verify_account_balances.delay()
            self.stdout.write(self.style.NOTICE(f"Queued ledger verification ({result.id})."))
            return

        mismatches = verify_balances()
        for m in mismatches:
            self.stdout.write(
                self.style.ERROR(
                    f"{m['code']}: stored {m['stored']}, journal {m['replayed']}"
                )
            )
        if mismatches:
            raise CommandError(f"{len(mismatches)} account(s) disagree with the journal.")
        self.stdout.write(self.style.SUCCESS("Every balance matches the journal."))
