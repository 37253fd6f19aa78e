from django.core.management.base import BaseCommand
from donations import sweeps

class Command(BaseCommand):
    help = "Run the expiry sweeps once (for deployments without celery beat)."

    def add_arguments(self, parser):
        parser.add_argument("--only", choices=["expired", "warnings"], default=None,
                            help="Run just one of the two sweeps.")

    def handle(self, *args, **opts):
        only = opts["only"]
        if only in (None, "expired"):
            r = sweeps.delete_expired_donations()
            self.stdout.write(self.style.SUCCESS(f"Expired: {r['deleted']} deleted, {r['errors']} errors."))
        if only in (None, "warnings"):
            r = sweeps.send_expiry_warnings()
            self.stdout.write(self.style.SUCCESS(f"Warnings: {r['sent']} sent, {r['errors']} errors."))
