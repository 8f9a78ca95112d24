import inspect
import logging
from typing import Dict, List

from .event_bus_interface import EventBus, EventHandler, build_envelope


logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-process event bus.

    Handlers run inline during ``publish``. Every envelope is kept in
    ``published`` so tests can assert on it.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self.published: List[dict] = []

    async def publish(self, event_type: str, payload: dict) -> dict:
        message = build_envelope(event_type, payload)
        self.published.append(message)
        logger.debug(f"[MEMORY BUS] Published event: {event_type}")

        for handler in self._subscribers.get(event_type, []):
            try:
                result = handler(message)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Handler error for {event_type}: {e}", exc_info=True)
        return message

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def events_of_type(self, event_type: str) -> List[dict]:
        return [message for message in self.published if message["event_type"] == event_type]

    def clear(self) -> None:
        self.published.clear()
