import asyncio
import inspect
import json
import logging
from typing import Dict, List, Optional

import redis.asyncio as redis
from django.conf import settings
from redis.exceptions import RedisError

from .event_bus_interface import EventBus, EventBusException, EventHandler, build_envelope


logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "events."


class RedisEventBus(EventBus):
    """Redis pub/sub implementation of event bus."""

    def __init__(self, redis_url: str = None, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url or getattr(settings, "REDIS_URL", "redis://localhost:6379/0")
        self.redis_client = client or redis.from_url(self.redis_url)
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._listener_task: Optional[asyncio.Task] = None

    async def publish(self, event_type: str, payload: dict) -> dict:
        """Publish event to its Redis channel."""
        message = build_envelope(event_type, payload)
        try:
            await self.redis_client.publish(f"{CHANNEL_PREFIX}{event_type}", json.dumps(message, default=str))
        except RedisError as e:
            raise EventBusException(f"Failed to publish event {event_type}: {e}") from e

        logger.info(f"Published event: {event_type}")
        return message

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.info(f"Registered handler for event: {event_type}")

    def start_listening(self) -> Optional[asyncio.Task]:
        """Start a background task consuming every subscribed channel. Needs a running loop."""
        if self._listener_task and not self._listener_task.done():
            return self._listener_task
        if not self._subscribers:
            return None

        self._listener_task = asyncio.get_running_loop().create_task(self._listen())
        return self._listener_task

    async def stop_listening(self) -> None:
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None

    async def _listen(self) -> None:
        channels = [f"{CHANNEL_PREFIX}{event_type}" for event_type in self._subscribers]
        pubsub = self.redis_client.pubsub()
        await pubsub.subscribe(*channels)
        logger.info(f"EventBus listening on: {channels}")

        try:
            async for message in pubsub.listen():
                if message["type"] == "message":
                    await self.handle_message(message["data"])
        finally:
            await pubsub.unsubscribe(*channels)
            await pubsub.aclose()

    async def handle_message(self, raw) -> None:
        """Decode one envelope and hand it to every handler of its event type."""
        try:
            data = json.loads(raw)
            event_type = data["event_type"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to decode event message: {e}")
            return

        for handler in self._subscribers.get(event_type, []):
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Handler error for {event_type}: {e}", exc_info=True)

    async def close(self) -> None:
        await self.stop_listening()
        await self.redis_client.aclose()
