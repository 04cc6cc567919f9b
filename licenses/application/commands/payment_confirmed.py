"""
PaymentConfirmedCommand.

Command to issue licenses for the items of a paid order.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class OrderItem:
    """One purchased line: a product, how many seats, and for how long."""

    product_id: str
    quantity: int = 1
    duration_days: Optional[int] = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1")


@dataclass
class PaymentConfirmedCommand:
    """
    Command to issue licenses for a confirmed payment.

    One license is issued per unit of quantity on every item.
    """

    order_id: str
    user_id: uuid.UUID
    items: List[OrderItem] = field(default_factory=list)
    paid: bool = True
