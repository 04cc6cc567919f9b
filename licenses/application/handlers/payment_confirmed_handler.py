"""
PaymentConfirmedHandler.

Handles a confirmed payment by issuing licenses.
"""

import logging
from typing import List

from licenses.application.commands.payment_confirmed import PaymentConfirmedCommand
from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.services.license_manager import LicenseManager

logger = logging.getLogger(__name__)


class PaymentConfirmedHandler:
    """Handler for PaymentConfirmedCommand."""

    def __init__(self, license_manager: LicenseManager):
        """Initialize handler with the license service."""
        self.license_manager = license_manager

    async def handle(self, command: PaymentConfirmedCommand) -> List[LicenseDTO]:
        """
        Handle payment confirmed command.

        An unpaid order issues nothing.

        Args:
            command: PaymentConfirmedCommand

        Returns:
            List of LicenseDTO for the issued licenses

        Raises:
            PersistenceFailureError: If a license could not be stored
        """
        if not command.paid:
            logger.info("Order %s not paid, no licenses issued", command.order_id)
            return []

        issued = []
        for item in command.items:
            for _ in range(item.quantity):
                license = await self.license_manager.issue(
                    user_id=command.user_id,
                    product_id=item.product_id,
                    duration_days=item.duration_days,
                    actor_id=str(command.user_id),
                )
                issued.append(LicenseDTO.from_entity(license))

        logger.info(
            "Issued licenses for order",
            extra={"order_id": command.order_id, "count": len(issued)},
        )
        return issued
