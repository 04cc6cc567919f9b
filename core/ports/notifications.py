"""
Notification dispatcher port (interface).

The core emits structured notifications; how they are delivered
(email, push) is up to the implementation.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Notification:
    """A structured notification addressed to one user."""

    user_id: str
    kind: str
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


class NotificationDispatcher(ABC):
    """Abstract notification dispatcher."""

    @abstractmethod
    async def dispatch(self, notification: Notification) -> bool:
        """
        Deliver a notification.

        Args:
            notification: Notification to deliver

        Returns:
            True if delivery was handed off, False otherwise
        """
        pass
