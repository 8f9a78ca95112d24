"""
Dependency Injection Container
================================

Composition root for the marketplace engine. Services never build their own
collaborators: the container wires repositories, the notifier and the event
bus into them, choosing implementations from settings.

Usage:
    from infrastructure.container import container

    orders = container.order_service()
    result = await orders.update_order_status(order_id, "CONFIRMED")
"""

import logging
from typing import Optional

from django.conf import settings

from .events import EventBus, InMemoryEventBus, create_event_bus
from .notifications import MockNotifier, NotifierFactory, NotifierInterface

logger = logging.getLogger(__name__)


def _marketplace_setting(name: str, default):
    return getattr(settings, "MARKETPLACE", {}).get(name, default)


class ServiceContainer:
    """
    Service container for infrastructure dependencies and engine services.

    Implements lazy initialization and caching of instances.
    Singleton pattern.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._clear()
            self._initialized = True
            logger.info("Service container initialized")

    def _clear(self):
        self._event_bus: Optional[EventBus] = None
        self._notifier: Optional[NotifierInterface] = None

        # Repositories
        self._restaurants = None
        self._catalog = None
        self._orders = None
        self._reviews = None

        # Domain Services
        self._order_service = None
        self._review_service = None
        self._discovery_service = None

    # ===== Infrastructure =====

    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            self._event_bus = create_event_bus()
            logger.debug(f"Created event bus: {type(self._event_bus).__name__}")
        return self._event_bus

    def notifier(self, backend: Optional[str] = None) -> NotifierInterface:
        """
        Get notifier instance.

        Args:
            backend: 'event_bus' or 'mock'. If None, uses configuration from settings
        """
        if self._notifier is None or backend is not None:
            self._notifier = NotifierFactory.create(backend, event_bus=self.event_bus())
            logger.debug(f"Created notifier: {type(self._notifier).__name__}")
        return self._notifier

    # ===== Repositories =====

    def _build_repositories(self):
        backend = _marketplace_setting("PERSISTENCE_BACKEND", "django")

        if backend == "django":
            from marketplace.infra.persistence.django_repositories import (
                DjangoCatalog,
                DjangoOrderRepository,
                DjangoRestaurantRepository,
                DjangoReviewRepository,
            )

            self._restaurants = DjangoRestaurantRepository()
            self._catalog = DjangoCatalog()
            self._orders = DjangoOrderRepository()
            self._reviews = DjangoReviewRepository()
        elif backend == "memory":
            from marketplace.infra.persistence.memory import (
                InMemoryCatalog,
                InMemoryOrderRepository,
                InMemoryRestaurantRepository,
                InMemoryReviewRepository,
            )

            self._restaurants = InMemoryRestaurantRepository()
            self._catalog = InMemoryCatalog()
            self._orders = InMemoryOrderRepository()
            self._reviews = InMemoryReviewRepository()
        else:
            raise ValueError(f"Invalid persistence backend: {backend}. Must be 'django' or 'memory'")

        logger.debug(f"Created {backend} repositories")

    def restaurant_repository(self):
        if self._restaurants is None:
            self._build_repositories()
        return self._restaurants

    def catalog(self):
        if self._catalog is None:
            self._build_repositories()
        return self._catalog

    def order_repository(self):
        if self._orders is None:
            self._build_repositories()
        return self._orders

    def review_repository(self):
        if self._reviews is None:
            self._build_repositories()
        return self._reviews

    # ===== Domain Services =====

    def order_service(self):
        """Get OrderFulfillmentService instance."""
        if self._order_service is None:
            from marketplace.ordering.domain.services import OrderFulfillmentService

            self._order_service = OrderFulfillmentService(
                catalog=self.catalog(),
                restaurants=self.restaurant_repository(),
                orders=self.order_repository(),
                notifier=self.notifier(),
                max_conflict_retries=_marketplace_setting("CONFLICT_RETRY_ATTEMPTS", 3),
            )
            logger.debug("Created OrderFulfillmentService")
        return self._order_service

    def review_service(self):
        """Get ReviewService instance."""
        if self._review_service is None:
            from marketplace.reviews.domain.services import ReviewService

            self._review_service = ReviewService(
                restaurants=self.restaurant_repository(),
                catalog=self.catalog(),
                orders=self.order_repository(),
                reviews=self.review_repository(),
                notifier=self.notifier(),
                max_conflict_retries=_marketplace_setting("CONFLICT_RETRY_ATTEMPTS", 3),
            )
            logger.debug("Created ReviewService")
        return self._review_service

    def discovery_service(self):
        """Get DiscoveryService instance."""
        if self._discovery_service is None:
            from marketplace.restaurants.domain.services import DiscoveryService

            self._discovery_service = DiscoveryService(
                restaurants=self.restaurant_repository(),
                default_page_size=_marketplace_setting("DISCOVERY_DEFAULT_PAGE_SIZE", 20),
                max_page_size=_marketplace_setting("DISCOVERY_MAX_PAGE_SIZE", 100),
            )
            logger.debug("Created DiscoveryService")
        return self._discovery_service

    def reset(self):
        """
        Reset all cached instances.

        Useful for testing or when switching between environments.
        """
        self._clear()
        logger.info("Service container reset")

    def configure_for_testing(self):
        """
        Configure container with in-process doubles for testing.

        Sets up:
            - In-memory event bus
            - Mock notifier
            - In-memory repositories
        """
        from marketplace.infra.persistence.memory import (
            InMemoryCatalog,
            InMemoryOrderRepository,
            InMemoryRestaurantRepository,
            InMemoryReviewRepository,
        )

        self._clear()
        self._event_bus = InMemoryEventBus()
        self._notifier = MockNotifier()
        self._restaurants = InMemoryRestaurantRepository()
        self._catalog = InMemoryCatalog()
        self._orders = InMemoryOrderRepository()
        self._reviews = InMemoryReviewRepository()
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_notifier() -> NotifierInterface:
    """Get notifier from global container."""
    return container.notifier()


def get_order_service():
    return container.order_service()


def get_review_service():
    return container.review_service()


def get_discovery_service():
    return container.discovery_service()
