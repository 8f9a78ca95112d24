"""
Notifier Factory
================

Factory pattern for creating notifier instances based on configuration.
"""

import logging
from typing import Literal, Optional

from django.conf import settings

from infrastructure.events import EventBus, get_event_bus

from .event_bus_notifier import EventBusNotifier
from .interface import NotifierInterface
from .mock_service import MockNotifier


logger = logging.getLogger(__name__)

NotifierBackend = Literal["event_bus", "mock"]


class NotifierFactory:
    """
    Factory for creating notifier instances.

    Usage:
        # In settings.py
        INFRASTRUCTURE = {"NOTIFIER_BACKEND": "event_bus"}  # or 'mock' for testing

        # In your code
        notifier = NotifierFactory.create()
    """

    @staticmethod
    def create(backend: Optional[NotifierBackend] = None, event_bus: Optional[EventBus] = None) -> NotifierInterface:
        """
        Create a notifier instance.

        Args:
            backend: 'event_bus' or 'mock'. If None, reads
                     settings.INFRASTRUCTURE["NOTIFIER_BACKEND"]
            event_bus: Bus for the event_bus backend (defaults to the shared one)

        Raises:
            ValueError: If backend type is invalid
        """
        backend_type = backend or getattr(settings, "INFRASTRUCTURE", {}).get("NOTIFIER_BACKEND", "event_bus")

        logger.info(f"Creating notifier backend: {backend_type}")

        if backend_type == "event_bus":
            return EventBusNotifier(event_bus or get_event_bus())
        elif backend_type == "mock":
            return MockNotifier()
        else:
            raise ValueError(f"Invalid notifier backend: {backend_type}. Must be 'event_bus' or 'mock'")

    @staticmethod
    def create_mock() -> MockNotifier:
        return MockNotifier()
