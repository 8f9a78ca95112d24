"""
Notification Service Interface
==============================

Abstract contract for fire-and-forget notifications to restaurants and
customers. Callers treat dispatch as best-effort: a raised
``NotificationException`` is logged by the caller and never undoes the
business operation that triggered it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from django.db import models
from django.utils import timezone


class NotificationTemplate(models.TextChoices):
    # Restaurant-facing
    NEW_ORDER = "new_order", "New order"
    NEW_REVIEW = "new_review", "New review"

    # Customer-facing
    ORDER_CREATED = "order_created", "Order created"
    ORDER_CONFIRMED = "order_confirmed", "Order confirmed"
    ORDER_PREPARING = "order_preparing", "Order preparing"
    ORDER_READY = "order_ready", "Order ready"
    ORDER_ON_DELIVERY = "order_on_delivery", "Order on delivery"
    ORDER_DELIVERED = "order_delivered", "Order delivered"
    ORDER_CANCELLED = "order_cancelled", "Order cancelled"


@dataclass
class Notification:
    """
    A notification addressed to one recipient.

    Attributes:
        recipient_ref: Customer or restaurant reference
        template: NotificationTemplate value
        payload: Template data (JSON-serializable)
        created_at: When the notification was requested
    """

    recipient_ref: str
    template: str
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=timezone.now)

    def to_dict(self) -> dict:
        return {
            "recipient_ref": self.recipient_ref,
            "template": str(self.template),
            "payload": self.payload,
            "created_at": self.created_at.isoformat(),
        }


class NotifierInterface(ABC):
    """
    Concrete implementations:
        - EventBusNotifier: Publishes notification events for delivery workers
        - MockNotifier: Records notifications in memory
    """

    @abstractmethod
    async def notify(self, recipient_ref: str, template: str, payload: Dict[str, Any]) -> Notification:
        """
        Dispatch a notification.

        Args:
            recipient_ref: Customer or restaurant reference
            template: NotificationTemplate value
            payload: Template data

        Returns:
            The dispatched Notification

        Raises:
            NotificationException: If the notification could not be dispatched
        """
        pass


class NotificationException(Exception):
    """Base exception for notification operations."""

    pass
