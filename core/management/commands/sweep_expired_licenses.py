"""
Django management command to mark expired licenses.

This command should be run periodically (e.g., via cron or scheduled task).
"""

import asyncio
import logging

from django.core.management.base import BaseCommand

from CredentialService.services import build_license_manager
from licenses.domain.license import utc_now
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to mark expired licenses."""

    help = "Move ACTIVE licenses past their expiry to EXPIRED"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually update licenses",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        if options["dry_run"]:
            overdue = asyncio.run(DjangoLicenseRepository().find_overdue(utc_now()))
            self.stdout.write(f"Found {len(overdue)} expired license(s)")
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            for license in overdue[:10]:  # Show first 10
                self.stdout.write(f"  - License {license.id} expired at {license.expires_at}")
            return

        count = asyncio.run(build_license_manager().sweep_expired())
        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(f"Successfully marked {count} license(s) as expired")
        )
