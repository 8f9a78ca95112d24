import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from infrastructure.notifications import MockNotifier, NotificationException, NotificationTemplate
from marketplace.domain.errors import ConcurrencyConflict
from marketplace.infra.persistence.memory import (
    InMemoryCatalog,
    InMemoryOrderRepository,
    InMemoryRestaurantRepository,
    InMemoryReviewRepository,
)
from marketplace.ordering.domain.models import Order, OrderStatus
from marketplace.reviews.domain.services import ReviewService
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import AddressFactory, OrderLineItemFactory, ProductFactory, RestaurantFactory



class ContendedRestaurantRepository(InMemoryRestaurantRepository):
    """Restaurant store whose rating writes lose every race while ``contended`` is set."""

    contended = False

    async def update_rating(self, aggregate_id, rating, total_reviews, expected_version):
        if self.contended:
            raise ConcurrencyConflict(self.aggregate_name, aggregate_id, expected_version)
        return await super().update_rating(aggregate_id, rating, total_reviews, expected_version)


@pytest.mark.unit
class TestReviewServiceUnit:
    def setup_method(self):
        self.restaurants = ContendedRestaurantRepository()
        self.catalog = InMemoryCatalog()
        self.orders = InMemoryOrderRepository()
        self.reviews = InMemoryReviewRepository()
        self.notifier = MockNotifier()
        self.service = ReviewService(
            restaurants=self.restaurants,
            catalog=self.catalog,
            orders=self.orders,
            reviews=self.reviews,
            notifier=self.notifier,
        )

        self.restaurant = self.restaurants.add(RestaurantFactory())
        self.customer_ref = "customer-1"

    async def _order(self, status=OrderStatus.DELIVERED, customer_ref=None, restaurant_ref=None):
        order = Order.place(
            customer_ref=customer_ref or self.customer_ref,
            restaurant_ref=restaurant_ref or self.restaurant.id,
            items=[OrderLineItemFactory()],
            delivery_address=AddressFactory(),
            payment_method="card",
        )
        return await self.orders.create(replace(order, status=status))

    async def _review(self, rating, **kwargs):
        order = await self._order(**kwargs)
        result = await self.service.create_review(order.customer_ref, order.id, rating, comment="Great food")
        assert result.ok, result.error_detail
        return result.value

    async def _restaurant_rating(self, restaurant_id=None):
        return await self.restaurants.get_rated_aggregate(restaurant_id or self.restaurant.id)

    # ===== Incremental aggregation =====

    @pytest.mark.asyncio
    async def test_apply_review_running_mean(self):
        for rating in (3, 4, 5):
            result = await self.service.apply_review(self.restaurant.id, rating)
            assert result.ok

        aggregate = await self._restaurant_rating()
        assert aggregate.rating == pytest.approx(4.0)
        assert aggregate.total_reviews == 3
        assert aggregate.version == 3

    @pytest.mark.asyncio
    async def test_apply_review_invalid_rating(self):
        result = await self.service.apply_review(self.restaurant.id, 6)

        assert result.error == ErrorCodes.INVALID_RATING
        assert (await self._restaurant_rating()).total_reviews == 0

    @pytest.mark.asyncio
    async def test_apply_review_unknown_restaurant(self):
        result = await self.service.apply_review("missing", 4)
        assert result.error == ErrorCodes.RESTAURANT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_concurrent_reviews_are_all_counted(self):
        ratings = [5, 4, 3, 5, 1, 2, 4, 5]
        service = ReviewService(
            restaurants=self.restaurants,
            catalog=self.catalog,
            orders=self.orders,
            reviews=self.reviews,
            notifier=self.notifier,
            max_conflict_retries=len(ratings) + 1,
        )

        results = await asyncio.gather(*(service.apply_review(self.restaurant.id, rating) for rating in ratings))

        assert all(result.ok for result in results)
        aggregate = await self._restaurant_rating()
        assert aggregate.total_reviews == len(ratings)
        assert aggregate.rating == pytest.approx(sum(ratings) / len(ratings))

    @pytest.mark.asyncio
    async def test_apply_product_review(self):
        product = self.catalog.add(ProductFactory())

        await self.service.apply_product_review(product.id, 2)
        result = await self.service.apply_product_review(product.id, 5)

        assert result.value.rating == pytest.approx(3.5)
        assert result.value.total_reviews == 2
        # Products and restaurants aggregate independently
        assert (await self._restaurant_rating()).total_reviews == 0

    @pytest.mark.asyncio
    async def test_apply_product_review_unknown_product(self):
        result = await self.service.apply_product_review("missing", 5)
        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND

    # ===== Recompute =====

    @pytest.mark.asyncio
    async def test_recompute_from_explicit_ratings(self):
        await self.service.apply_review(self.restaurant.id, 1)

        result = await self.service.recompute_restaurant_rating(self.restaurant.id, [4, 5])

        assert result.value.rating == pytest.approx(4.5)
        assert result.value.total_reviews == 2

    @pytest.mark.asyncio
    async def test_recompute_with_no_ratings_resets(self):
        await self.service.apply_review(self.restaurant.id, 5)

        result = await self.service.recompute_restaurant_rating(self.restaurant.id, [])

        assert result.value.rating == 0.0
        assert result.value.total_reviews == 0

    @pytest.mark.asyncio
    async def test_recompute_reads_stored_reviews(self):
        await self._review(2)
        await self._review(4)
        await self.service.recompute_restaurant_rating(self.restaurant.id, [1])

        result = await self.service.recompute_restaurant_rating(self.restaurant.id)

        assert result.value.rating == pytest.approx(3.0)
        assert result.value.total_reviews == 2

    # ===== Reviews =====

    @pytest.mark.asyncio
    async def test_create_review_updates_rating_and_notifies(self):
        review = await self._review(4)

        aggregate = await self._restaurant_rating()
        assert aggregate.rating == pytest.approx(4.0)
        assert aggregate.total_reviews == 1
        assert review.restaurant_ref == self.restaurant.id

        notification = self.notifier.get_last_notification()
        assert notification.template == NotificationTemplate.NEW_REVIEW
        assert notification.recipient_ref == self.restaurant.id
        assert notification.payload["rating"] == 4
        assert notification.payload["total_reviews"] == 1

    @pytest.mark.asyncio
    async def test_create_review_twice_for_same_order(self):
        review = await self._review(5)

        result = await self.service.create_review(self.customer_ref, review.order_ref, 1)

        assert result.error == ErrorCodes.DUPLICATE_REVIEW
        aggregate = await self._restaurant_rating()
        assert aggregate.rating == pytest.approx(5.0)
        assert aggregate.total_reviews == 1

    @pytest.mark.parametrize(
        "status", [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.ON_DELIVERY, OrderStatus.CANCELLED]
    )
    @pytest.mark.asyncio
    async def test_create_review_requires_delivered_order(self, status):
        order = await self._order(status=status)

        result = await self.service.create_review(self.customer_ref, order.id, 5)

        assert result.error == ErrorCodes.ORDER_NOT_REVIEWABLE
        assert (await self._restaurant_rating()).total_reviews == 0

    @pytest.mark.asyncio
    async def test_create_review_for_someone_elses_order(self):
        order = await self._order(customer_ref="customer-2")

        result = await self.service.create_review(self.customer_ref, order.id, 5)

        assert result.error == ErrorCodes.NOT_ORDER_OWNER

    @pytest.mark.asyncio
    async def test_create_review_unknown_order(self):
        result = await self.service.create_review(self.customer_ref, "missing", 5)
        assert result.error == ErrorCodes.ORDER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_create_review_invalid_rating(self):
        order = await self._order()

        result = await self.service.create_review(self.customer_ref, order.id, 0)

        assert result.error == ErrorCodes.INVALID_RATING
        assert await self.reviews.find_by_order(order.id) is None

    @pytest.mark.asyncio
    async def test_create_review_notification_failure_keeps_review(self):
        self.service.notifier = AsyncMock()
        self.service.notifier.notify.side_effect = NotificationException("broker down")
        order = await self._order()

        result = await self.service.create_review(self.customer_ref, order.id, 3)

        assert result.ok
        assert (await self._restaurant_rating()).total_reviews == 1

    @pytest.mark.asyncio
    async def test_create_review_rolled_back_when_rating_cannot_be_applied(self):
        order = await self._order()
        self.restaurants.contended = True

        result = await self.service.create_review(self.customer_ref, order.id, 5)

        assert result.error == ErrorCodes.CONFLICT
        assert await self.reviews.find_by_order(order.id) is None
        assert list(await self.reviews.ratings_for_restaurant(self.restaurant.id)) == []
        assert (await self._restaurant_rating()).total_reviews == 0

        self.restaurants.contended = False
        retry = await self.service.create_review(self.customer_ref, order.id, 5)

        assert retry.ok
        aggregate = await self._restaurant_rating()
        assert aggregate.rating == pytest.approx(5.0)
        assert aggregate.total_reviews == 1

    @pytest.mark.asyncio
    async def test_create_review_for_missing_restaurant_leaves_no_review(self):
        order = await self._order(restaurant_ref="gone")

        result = await self.service.create_review(self.customer_ref, order.id, 4)

        assert result.error == ErrorCodes.RESTAURANT_NOT_FOUND
        assert await self.reviews.find_by_order(order.id) is None

    @pytest.mark.asyncio
    async def test_delete_review_restored_when_recompute_fails(self):
        await self._review(5)
        review = await self._review(1)
        self.restaurants.contended = True

        result = await self.service.delete_review(review.id, self.customer_ref)

        assert result.error == ErrorCodes.CONFLICT
        assert await self.reviews.find_by_id(review.id) == review
        aggregate = await self._restaurant_rating()
        assert aggregate.total_reviews == len(await self.reviews.ratings_for_restaurant(self.restaurant.id)) == 2
        assert aggregate.rating == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_delete_review_recomputes_from_survivors(self):
        await self._review(5)
        doomed = await self._review(1)
        await self._review(3)

        result = await self.service.delete_review(doomed.id, self.customer_ref)

        assert result.value.rating == pytest.approx(4.0)
        assert result.value.total_reviews == 2
        assert await self.reviews.find_by_id(doomed.id) is None

    @pytest.mark.asyncio
    async def test_delete_last_review_resets_rating(self):
        review = await self._review(2)

        result = await self.service.delete_review(review.id, self.customer_ref)

        assert result.value.rating == 0.0
        assert result.value.total_reviews == 0

    @pytest.mark.asyncio
    async def test_delete_review_by_another_customer(self):
        review = await self._review(2)

        result = await self.service.delete_review(review.id, "customer-2")

        assert result.error == ErrorCodes.NOT_REVIEW_OWNER
        assert await self.reviews.find_by_id(review.id) is not None

    @pytest.mark.asyncio
    async def test_delete_unknown_review(self):
        result = await self.service.delete_review("missing", self.customer_ref)
        assert result.error == ErrorCodes.REVIEW_NOT_FOUND

    @pytest.mark.asyncio
    async def test_restaurant_reviews_with_statistics(self):
        for rating in (5, 5, 4, 1):
            await self._review(rating)
        other = self.restaurants.add(RestaurantFactory())
        await self._review(3, restaurant_ref=other.id)

        result = await self.service.get_restaurant_reviews(self.restaurant.id, page_size=3)

        assert result.ok
        assert result.value["count"] == 4
        assert result.value["num_pages"] == 2
        assert len(result.value["results"]) == 3
        statistics = result.value["statistics"]
        assert statistics["average_rating"] == 3.75
        assert statistics["total_reviews"] == 4
        assert statistics["rating_distribution"] == {1: 1, 2: 0, 3: 0, 4: 1, 5: 2}

    @pytest.mark.asyncio
    async def test_restaurant_reviews_filtered_by_rating(self):
        for rating in (5, 5, 4):
            await self._review(rating)

        result = await self.service.get_restaurant_reviews(self.restaurant.id, rating=5)

        assert result.value["count"] == 2
        assert {review.rating for review in result.value["results"]} == {5}
        # Statistics always cover every review
        assert result.value["statistics"]["total_reviews"] == 3

    @pytest.mark.asyncio
    async def test_restaurant_reviews_unknown_restaurant(self):
        result = await self.service.get_restaurant_reviews("missing")
        assert result.error == ErrorCodes.RESTAURANT_NOT_FOUND
