"""
Event Bus Interface
===================

Abstract contract for publishing and consuming domain events.

Every event travels as a JSON envelope::

    {"event_type": "...", "occurred_at": "<ISO-8601>", "payload": {...}}
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Union

from django.utils import timezone

EventHandler = Callable[[dict], Union[None, Awaitable[None]]]


def build_envelope(event_type: str, payload: dict) -> dict:
    return {"event_type": event_type, "occurred_at": timezone.now().isoformat(), "payload": payload}


class EventBus(ABC):
    """
    Concrete implementations:
        - RedisEventBus: redis pub/sub, one channel per event type
        - InMemoryEventBus: dispatches in-process, for tests and local runs
    """

    @abstractmethod
    async def publish(self, event_type: str, payload: dict) -> dict:
        """
        Publish an event.

        Returns:
            The envelope that was published

        Raises:
            EventBusException: If the event could not be handed to the transport
        """
        pass

    @abstractmethod
    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register a handler (plain function or coroutine function) for an event type."""
        pass


class EventBusException(Exception):
    """Base exception for event bus operations."""

    pass
