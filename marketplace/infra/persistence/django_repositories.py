"""
Django ORM implementations of the repository contracts.

Compare-and-swap writes are a single ``UPDATE ... WHERE id = %s AND version = %s``.
Zero affected rows means either a concurrent writer won (``ConcurrencyConflict``)
or the row is gone (the aggregate's ``NotFoundError``).
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from django.db import IntegrityError, models
from django.db.models import F
from django.utils import timezone

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
from marketplace.reviews.domain.models import Review

from .records import OrderRecord, ProductRecord, RestaurantRecord, ReviewRecord

logger = logging.getLogger(__name__)


async def _page(queryset: models.QuerySet, page: int, page_size: int) -> Tuple[List, int]:
    total = await queryset.acount()
    start = (page - 1) * page_size
    records = [record.to_domain() async for record in queryset[start : start + page_size]]
    return records, total


class _VersionedRatingMixin:
    """Rating reads and guarded rating writes shared by restaurants and products."""

    record_model = None
    aggregate_name = ""
    not_found_error = None

    async def get_rated_aggregate(self, aggregate_id: str) -> Optional[RatedAggregate]:
        row = (
            await self.record_model.objects.filter(pk=aggregate_id)
            .values("rating", "total_reviews", "version")
            .afirst()
        )
        if row is None:
            return None
        return RatedAggregate(aggregate_id, row["rating"], row["total_reviews"], row["version"])

    async def update_rating(
        self, aggregate_id: str, rating: float, total_reviews: int, expected_version: int
    ) -> RatedAggregate:
        updated = await self.record_model.objects.filter(pk=aggregate_id, version=expected_version).aupdate(
            rating=rating,
            total_reviews=total_reviews,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            if await self.record_model.objects.filter(pk=aggregate_id).aexists():
                raise ConcurrencyConflict(self.aggregate_name, aggregate_id, expected_version)
            raise self.not_found_error(aggregate_id)

        logger.debug(f"{self.aggregate_name} {aggregate_id} rating -> {rating:.2f} ({total_reviews} reviews)")
        return RatedAggregate(aggregate_id, rating, total_reviews, expected_version + 1)


class DjangoRestaurantRepository(_VersionedRatingMixin, RestaurantLookup, RestaurantQuerySource):
    record_model = RestaurantRecord
    aggregate_name = "Restaurant"
    not_found_error = RestaurantNotFound

    async def get_restaurant(self, restaurant_id: str):
        record = await RestaurantRecord.objects.filter(pk=restaurant_id).afirst()
        return record.to_domain() if record else None

    async def find_candidates(self, center: GeoPoint, radius_km: float) -> List:
        box = center.bounding_box(radius_km)
        queryset = RestaurantRecord.objects.filter(
            is_active=True,
            latitude__gte=box["min_lat"],
            latitude__lte=box["max_lat"],
        )
        if box["min_lng"] is not None:
            queryset = queryset.filter(longitude__gte=box["min_lng"], longitude__lte=box["max_lng"])

        return [record.to_domain() async for record in queryset]


class DjangoCatalog(_VersionedRatingMixin, Catalog):
    record_model = ProductRecord
    aggregate_name = "Product"
    not_found_error = ProductNotFound

    async def get_product(self, product_id: str):
        record = await ProductRecord.objects.filter(pk=product_id).afirst()
        return record.to_domain() if record else None


class DjangoOrderRepository(OrderStore):
    async def create(self, order: Order) -> Order:
        record = OrderRecord(id=order.id, created_at=order.created_at, version=0, **OrderRecord.field_values(order))
        await record.asave(force_insert=True)
        return replace(order, version=0)

    async def find_by_id(self, order_id: str) -> Optional[Order]:
        record = await OrderRecord.objects.filter(pk=order_id).afirst()
        return record.to_domain() if record else None

    async def compare_and_swap(self, order_id: str, expected_version: int, order: Order) -> Order:
        updated = await OrderRecord.objects.filter(pk=order_id, version=expected_version).aupdate(
            version=expected_version + 1, **OrderRecord.field_values(order)
        )
        if not updated:
            if await OrderRecord.objects.filter(pk=order_id).aexists():
                raise ConcurrencyConflict("Order", order_id, expected_version)
            raise OrderNotFound(order_id)
        return replace(order, version=expected_version + 1)

    async def find_by_customer(
        self, customer_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Order], int]:
        queryset = OrderRecord.objects.filter(customer_ref=customer_ref)
        if status:
            queryset = queryset.filter(status=status)
        return await _page(queryset.order_by("-created_at", "id"), page, page_size)

    async def find_by_restaurant(
        self, restaurant_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Order], int]:
        queryset = OrderRecord.objects.filter(restaurant_ref=restaurant_ref)
        if status:
            queryset = queryset.filter(status=status)
        return await _page(queryset.order_by("-created_at", "id"), page, page_size)


class DjangoReviewRepository(ReviewStore):
    async def create(self, review: Review) -> Review:
        record = ReviewRecord(
            id=review.id,
            customer_ref=review.customer_ref,
            restaurant_ref=review.restaurant_ref,
            order_ref=review.order_ref,
            rating=review.rating,
            comment=review.comment,
            images=list(review.images),
            created_at=review.created_at,
        )
        try:
            await record.asave(force_insert=True)
        except IntegrityError:
            raise DuplicateReview(review.order_ref)
        return review

    async def find_by_id(self, review_id: str) -> Optional[Review]:
        record = await ReviewRecord.objects.filter(pk=review_id).afirst()
        return record.to_domain() if record else None

    async def find_by_order(self, order_ref: str) -> Optional[Review]:
        record = await ReviewRecord.objects.filter(order_ref=order_ref).afirst()
        return record.to_domain() if record else None

    async def delete(self, review_id: str) -> bool:
        deleted, _ = await ReviewRecord.objects.filter(pk=review_id).adelete()
        return deleted > 0

    async def list_by_restaurant(
        self, restaurant_ref: str, rating: Optional[int] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Review], int]:
        queryset = ReviewRecord.objects.filter(restaurant_ref=restaurant_ref)
        if rating is not None:
            queryset = queryset.filter(rating=rating)
        return await _page(queryset.order_by("-created_at", "id"), page, page_size)

    async def ratings_for_restaurant(self, restaurant_ref: str) -> Sequence[int]:
        queryset = ReviewRecord.objects.filter(restaurant_ref=restaurant_ref).values_list("rating", flat=True)
        return [rating async for rating in queryset]
