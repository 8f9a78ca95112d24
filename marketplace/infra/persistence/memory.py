"""
In-memory implementations of the repository contracts.

Used by unit tests and local runs without a database. Reads yield to the event
loop once so concurrent coroutines interleave between a read and the guarded
write, the same way they would against a real store.
"""

import asyncio
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from marketplace.catalog.domain.models import Product
from marketplace.domain.errors import (
    ConcurrencyConflict,
    DuplicateReview,
    OrderNotFound,
    ProductNotFound,
    RestaurantNotFound,
)
from marketplace.domain.repositories import Catalog, OrderStore, RestaurantLookup, RestaurantQuerySource, ReviewStore
from marketplace.domain.value_objects import GeoPoint, RatedAggregate
from marketplace.ordering.domain.models import Order
from marketplace.restaurants.domain.models import Restaurant
from marketplace.reviews.domain.models import Review


def _paginate(items: List, page: int, page_size: int) -> Tuple[List, int]:
    start = (page - 1) * page_size
    return items[start : start + page_size], len(items)


class _InMemoryRatedStore:
    aggregate_name = ""
    not_found_error = None

    def __init__(self):
        self._rows: Dict[str, object] = {}

    async def get_rated_aggregate(self, aggregate_id: str) -> Optional[RatedAggregate]:
        await asyncio.sleep(0)
        row = self._rows.get(aggregate_id)
        return row.rated_aggregate if row else None

    async def update_rating(
        self, aggregate_id: str, rating: float, total_reviews: int, expected_version: int
    ) -> RatedAggregate:
        row = self._rows.get(aggregate_id)
        if row is None:
            raise self.not_found_error(aggregate_id)
        if row.version != expected_version:
            raise ConcurrencyConflict(self.aggregate_name, aggregate_id, expected_version)

        row = replace(row, rating=rating, total_reviews=total_reviews, version=expected_version + 1)
        self._rows[aggregate_id] = row
        return row.rated_aggregate


class InMemoryRestaurantRepository(_InMemoryRatedStore, RestaurantLookup, RestaurantQuerySource):
    aggregate_name = "Restaurant"
    not_found_error = RestaurantNotFound

    def add(self, restaurant: Restaurant) -> Restaurant:
        self._rows[restaurant.id] = restaurant
        return restaurant

    async def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        await asyncio.sleep(0)
        return self._rows.get(restaurant_id)

    async def find_candidates(self, center: GeoPoint, radius_km: float) -> List[Restaurant]:
        await asyncio.sleep(0)
        return [restaurant for restaurant in self._rows.values() if restaurant.is_active]


class InMemoryCatalog(_InMemoryRatedStore, Catalog):
    aggregate_name = "Product"
    not_found_error = ProductNotFound

    def add(self, product: Product) -> Product:
        self._rows[product.id] = product
        return product

    def set_price(self, product_id: str, unit_price) -> Product:
        product = replace(self._rows[product_id], unit_price=unit_price)
        self._rows[product_id] = product
        return product

    async def get_product(self, product_id: str) -> Optional[Product]:
        await asyncio.sleep(0)
        return self._rows.get(product_id)


class InMemoryOrderRepository(OrderStore):
    def __init__(self):
        self._orders: Dict[str, Order] = {}

    async def create(self, order: Order) -> Order:
        order = replace(order, version=0)
        self._orders[order.id] = order
        return order

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        await asyncio.sleep(0)
        return self._orders.get(order_id)

    async def compare_and_swap(self, order_id: str, expected_version: int, order: Order) -> Order:
        current = self._orders.get(order_id)
        if current is None:
            raise OrderNotFound(order_id)
        if current.version != expected_version:
            raise ConcurrencyConflict("Order", order_id, expected_version)

        order = replace(order, version=expected_version + 1)
        self._orders[order_id] = order
        return order

    def _newest_first(self, orders) -> List[Order]:
        orders = sorted(orders, key=lambda order: order.id)
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    async def find_by_customer(
        self, customer_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Order], int]:
        await asyncio.sleep(0)
        orders = [
            order
            for order in self._orders.values()
            if order.customer_ref == customer_ref and (not status or order.status == status)
        ]
        return _paginate(self._newest_first(orders), page, page_size)

    async def find_by_restaurant(
        self, restaurant_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Order], int]:
        await asyncio.sleep(0)
        orders = [
            order
            for order in self._orders.values()
            if order.restaurant_ref == restaurant_ref and (not status or order.status == status)
        ]
        return _paginate(self._newest_first(orders), page, page_size)


class InMemoryReviewRepository(ReviewStore):
    def __init__(self):
        self._reviews: Dict[str, Review] = {}

    async def create(self, review: Review) -> Review:
        if any(existing.order_ref == review.order_ref for existing in self._reviews.values()):
            raise DuplicateReview(review.order_ref)
        self._reviews[review.id] = review
        return review

    async def find_by_id(self, review_id: str) -> Optional[Review]:
        await asyncio.sleep(0)
        return self._reviews.get(review_id)

    async def find_by_order(self, order_ref: str) -> Optional[Review]:
        await asyncio.sleep(0)
        return next((review for review in self._reviews.values() if review.order_ref == order_ref), None)

    async def delete(self, review_id: str) -> bool:
        return self._reviews.pop(review_id, None) is not None

    async def list_by_restaurant(
        self, restaurant_ref: str, rating: Optional[int] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Review], int]:
        await asyncio.sleep(0)
        reviews = [
            review
            for review in self._reviews.values()
            if review.restaurant_ref == restaurant_ref and (rating is None or review.rating == rating)
        ]
        reviews = sorted(sorted(reviews, key=lambda review: review.id), key=lambda r: r.created_at, reverse=True)
        return _paginate(reviews, page, page_size)

    async def ratings_for_restaurant(self, restaurant_ref: str) -> Sequence[int]:
        await asyncio.sleep(0)
        return [review.rating for review in self._reviews.values() if review.restaurant_ref == restaurant_ref]
