"""
Django management command to delete expired verification tokens.
"""

import asyncio

from django.core.management.base import BaseCommand

from CredentialService.services import build_verification_token_service


class Command(BaseCommand):
    """Command to delete expired verification tokens."""

    help = "Delete verification tokens past their expiry"

    def handle(self, *args, **options):
        """Execute the command."""
        count = asyncio.run(build_verification_token_service().sweep_expired())
        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(f"Deleted {count} expired token(s)")
        )
