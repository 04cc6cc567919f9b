"""
Django management command to send license expiry warnings.
"""

from django.core.management.base import BaseCommand

from core.tasks import notify_expiring_licenses


class Command(BaseCommand):
    """Command to send license expiry warnings."""

    help = "Notify owners of licenses that expire soon"

    def handle(self, *args, **options):
        """Execute the command."""
        sent = notify_expiring_licenses()
        for days, count in sent.items():
            self.stdout.write(f"  - {count} warning(s) for licenses expiring within {days} day(s)")
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS("Expiry warnings sent"))
