"""
Event Bus Notifier
==================

Publishes each notification as a ``notification.<template>`` event so that
delivery workers (push, SMS, email) can pick it up asynchronously.
"""

import logging
from typing import Any, Dict

from infrastructure.events import EventBus, EventBusException

from .interface import Notification, NotificationException, NotifierInterface

logger = logging.getLogger(__name__)

EVENT_PREFIX = "notification."


class EventBusNotifier(NotifierInterface):
    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

    async def notify(self, recipient_ref: str, template: str, payload: Dict[str, Any]) -> Notification:
        notification = Notification(recipient_ref=recipient_ref, template=str(template), payload=dict(payload))
        event_type = f"{EVENT_PREFIX}{notification.template}"

        try:
            await self.event_bus.publish(event_type, notification.to_dict())
        except EventBusException as e:
            raise NotificationException(f"Could not dispatch {event_type} to {recipient_ref}: {e}") from e

        logger.info(f"Notification {event_type} queued for {recipient_ref}")
        return notification
