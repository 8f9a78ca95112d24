"""
Mock Notifier
=============

Records notifications in memory instead of dispatching them.
"""

import logging
from typing import Any, Dict, List, Optional

from .interface import Notification, NotifierInterface

logger = logging.getLogger(__name__)


class MockNotifier(NotifierInterface):
    """
    Mock notifier for testing and development.

    Every call is logged and kept in ``sent_notifications`` in call order.
    """

    def __init__(self):
        self.sent_notifications: List[Notification] = []

    async def notify(self, recipient_ref: str, template: str, payload: Dict[str, Any]) -> Notification:
        notification = Notification(recipient_ref=recipient_ref, template=str(template), payload=dict(payload))
        logger.info(f"[MOCK NOTIFY] To: {recipient_ref}, Template: {notification.template}")

        self.sent_notifications.append(notification)
        return notification

    def clear_sent_notifications(self):
        """Clear recorded notifications (useful between tests)."""
        self.sent_notifications.clear()

    def get_sent_count(self) -> int:
        return len(self.sent_notifications)

    def get_last_notification(self) -> Optional[Notification]:
        return self.sent_notifications[-1] if self.sent_notifications else None

    def templates_sent(self) -> List[str]:
        return [notification.template for notification in self.sent_notifications]
