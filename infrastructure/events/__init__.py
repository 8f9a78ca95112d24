import logging

from django.conf import settings

from .event_bus_interface import EventBus, EventBusException
from .memory_event_bus import InMemoryEventBus
from .redis_event_bus import RedisEventBus


logger = logging.getLogger(__name__)

# Singleton instance
_event_bus_instance = None


def create_event_bus(backend: str = None) -> EventBus:
    """
    Build an event bus for ``backend`` ('redis' or 'memory').

    If None, reads settings.INFRASTRUCTURE["EVENT_BUS_BACKEND"].
    """
    backend_type = backend or getattr(settings, "INFRASTRUCTURE", {}).get("EVENT_BUS_BACKEND", "redis")

    if backend_type == "redis":
        return RedisEventBus()
    elif backend_type == "memory":
        return InMemoryEventBus()
    else:
        raise ValueError(f"Invalid event bus backend: {backend_type}. Must be 'redis' or 'memory'")


def get_event_bus() -> EventBus:
    """Get singleton event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = create_event_bus()
        logger.info(f"Event bus created: {_event_bus_instance.__class__.__name__}")
    return _event_bus_instance


def reset_event_bus() -> None:
    global _event_bus_instance
    _event_bus_instance = None


__all__ = [
    "EventBus",
    "EventBusException",
    "InMemoryEventBus",
    "RedisEventBus",
    "create_event_bus",
    "get_event_bus",
    "reset_event_bus",
]
