"""
Notification infrastructure.

Usage:
    from infrastructure.notifications import NotifierFactory, NotificationTemplate

    notifier = NotifierFactory.create()
    await notifier.notify(customer_ref, NotificationTemplate.ORDER_CONFIRMED, {"order_id": order.id})
"""

from .event_bus_notifier import EventBusNotifier
from .factory import NotifierFactory
from .interface import Notification, NotificationException, NotificationTemplate, NotifierInterface
from .mock_service import MockNotifier


__all__ = [
    "EventBusNotifier",
    "MockNotifier",
    "Notification",
    "NotificationException",
    "NotificationTemplate",
    "NotifierFactory",
    "NotifierInterface",
]
