"""
Service Container Tests
========================

Unit tests for dependency injection container.
"""

from django.test import TestCase, override_settings

from infrastructure.container import (
    ServiceContainer,
    container,
    get_discovery_service,
    get_notifier,
    get_order_service,
    get_review_service,
)
from infrastructure.events import InMemoryEventBus, RedisEventBus
from infrastructure.notifications import EventBusNotifier, MockNotifier, NotifierInterface
from marketplace.infra.persistence.django_repositories import DjangoOrderRepository, DjangoRestaurantRepository
from marketplace.infra.persistence.memory import InMemoryOrderRepository, InMemoryRestaurantRepository
from marketplace.ordering.domain.services import OrderFulfillmentService
from marketplace.restaurants.domain.services import DiscoveryService
from marketplace.reviews.domain.services import ReviewService


class ServiceContainerTest(TestCase):
    """Test ServiceContainer implementation."""

    def setUp(self):
        """Set up test fixtures."""
        # Reset container before each test
        container.reset()

    def tearDown(self):
        container.reset()

    def test_container_is_singleton(self):
        """Test that ServiceContainer is a singleton."""
        container1 = ServiceContainer()
        container2 = ServiceContainer()

        self.assertIs(container1, container2)
        self.assertIs(container1, container)

    @override_settings(INFRASTRUCTURE={"NOTIFIER_BACKEND": "mock", "EVENT_BUS_BACKEND": "memory"})
    def test_get_notifier(self):
        """Test getting notifier from container."""
        notifier = container.notifier()

        self.assertIsInstance(notifier, NotifierInterface)
        self.assertIsInstance(notifier, MockNotifier)

        # Second call should return cached instance
        self.assertIs(notifier, container.notifier())

    @override_settings(INFRASTRUCTURE={"NOTIFIER_BACKEND": "event_bus", "EVENT_BUS_BACKEND": "memory"})
    def test_event_bus_notifier_shares_container_bus(self):
        notifier = container.notifier()

        self.assertIsInstance(notifier, EventBusNotifier)
        self.assertIsInstance(container.event_bus(), InMemoryEventBus)
        self.assertIs(notifier.event_bus, container.event_bus())

    @override_settings(INFRASTRUCTURE={"EVENT_BUS_BACKEND": "redis"}, REDIS_URL="redis://localhost:6379/5")
    def test_redis_event_bus(self):
        bus = container.event_bus()

        self.assertIsInstance(bus, RedisEventBus)
        self.assertEqual(bus.redis_url, "redis://localhost:6379/5")

    def test_notifier_with_explicit_backend(self):
        """Test getting notifier with explicit backend."""
        self.assertIsInstance(container.notifier("mock"), MockNotifier)

    @override_settings(MARKETPLACE={"PERSISTENCE_BACKEND": "django"})
    def test_django_repositories(self):
        self.assertIsInstance(container.restaurant_repository(), DjangoRestaurantRepository)
        self.assertIsInstance(container.order_repository(), DjangoOrderRepository)

    @override_settings(MARKETPLACE={"PERSISTENCE_BACKEND": "memory"})
    def test_memory_repositories(self):
        self.assertIsInstance(container.restaurant_repository(), InMemoryRestaurantRepository)
        self.assertIsInstance(container.order_repository(), InMemoryOrderRepository)

    @override_settings(MARKETPLACE={"PERSISTENCE_BACKEND": "mongo"})
    def test_invalid_persistence_backend(self):
        with self.assertRaises(ValueError):
            container.order_repository()

    @override_settings(
        MARKETPLACE={
            "PERSISTENCE_BACKEND": "memory",
            "CONFLICT_RETRY_ATTEMPTS": 7,
            "DISCOVERY_DEFAULT_PAGE_SIZE": 10,
            "DISCOVERY_MAX_PAGE_SIZE": 30,
        }
    )
    def test_services_are_wired_from_settings(self):
        orders = container.order_service()
        reviews = container.review_service()
        discovery = container.discovery_service()

        self.assertIsInstance(orders, OrderFulfillmentService)
        self.assertEqual(orders.max_conflict_retries, 7)
        self.assertIs(orders.orders, container.order_repository())
        self.assertIs(orders.notifier, container.notifier())

        self.assertIsInstance(reviews, ReviewService)
        self.assertIs(reviews.restaurants, orders.restaurants)

        self.assertIsInstance(discovery, DiscoveryService)
        self.assertEqual((discovery.default_page_size, discovery.max_page_size), (10, 30))

        # Second call should return cached instance
        self.assertIs(orders, container.order_service())

    def test_reset_container(self):
        """Test resetting container clears cached instances."""
        notifier1 = container.notifier("mock")
        service1 = container.order_service()

        container.reset()

        self.assertIsNot(notifier1, container.notifier("mock"))
        self.assertIsNot(service1, container.order_service())

    def test_configure_for_testing(self):
        """Test configuring container for testing."""
        container.configure_for_testing()

        self.assertIsInstance(container.event_bus(), InMemoryEventBus)
        self.assertIsInstance(container.notifier(), MockNotifier)
        self.assertIsInstance(container.order_repository(), InMemoryOrderRepository)
        self.assertIs(container.order_service().restaurants, container.restaurant_repository())


class ConvenienceFunctionsTest(TestCase):
    """Test convenience functions for service access."""

    def setUp(self):
        """Set up test fixtures."""
        container.configure_for_testing()

    def tearDown(self):
        container.reset()

    def test_get_notifier_function(self):
        self.assertIsInstance(get_notifier(), MockNotifier)

    def test_get_service_functions(self):
        self.assertIsInstance(get_order_service(), OrderFulfillmentService)
        self.assertIsInstance(get_review_service(), ReviewService)
        self.assertIsInstance(get_discovery_service(), DiscoveryService)
        self.assertIs(get_order_service(), container.order_service())
