"""
ReviewService - Reviews and Rating Aggregation

Creates and deletes reviews and keeps the running rating of restaurants and
products consistent with them. New reviews are folded in incrementally with
``RatingAccumulator.apply_new_rating``; deletions recompute the mean from the
surviving ratings. Every rating write is a version-guarded compare-and-swap
retried on conflict.
"""

from typing import Dict, Iterable, Optional

from infrastructure.notifications import NotificationTemplate, NotifierInterface
from marketplace.domain.errors import (
    DuplicateReview,
    MarketplaceError,
    NotOrderOwner,
    NotReviewOwner,
    OrderNotFound,
    OrderNotReviewable,
    ProductNotFound,
    RestaurantNotFound,
    ReviewNotFound,
    ValidationError,
)
from marketplace.domain.repositories import Catalog, OrderStore, RatedAggregateStore, RestaurantLookup, ReviewStore
from marketplace.domain.value_objects import RatedAggregate, validate_review_rating
from marketplace.infra.observability.metrics import (
    notification_failures_total,
    ratings_applied_total,
    ratings_recomputed_total,
)
from marketplace.infra.observability.tracing import add_span_attributes, get_tracer
from marketplace.ordering.domain.models import OrderStatus
from marketplace.reviews.domain.models import Review
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from marketplace.services.concurrency import DEFAULT_CONFLICT_RETRY_ATTEMPTS, conflict_retrying

from .rating_accumulator import RatingAccumulator

tracer = get_tracer(__name__)


class ReviewService(BaseService):
    """
    Service for reviews and rated aggregates.

    Responsibilities:
    - Apply a single new rating to a restaurant or product (O(1))
    - Recompute a restaurant rating from a full rating set
    - Create reviews for delivered orders (one per order)
    - Delete reviews and recompute the restaurant rating
    - List restaurant reviews with rating statistics
    """

    def __init__(
        self,
        restaurants: RestaurantLookup,
        catalog: Catalog,
        orders: OrderStore,
        reviews: ReviewStore,
        notifier: NotifierInterface,
        max_conflict_retries: int = DEFAULT_CONFLICT_RETRY_ATTEMPTS,
    ):
        super().__init__()
        self.restaurants = restaurants
        self.catalog = catalog
        self.orders = orders
        self.reviews = reviews
        self.notifier = notifier
        self.max_conflict_retries = max_conflict_retries

    def _failure(self, operation: str, error: Exception) -> ServiceResult:
        if isinstance(error, MarketplaceError):
            return service_err(error.code, str(error))
        self.logger.error(f"Unexpected error in {operation}: {error}", exc_info=True)
        return service_err(ErrorCodes.INTERNAL_ERROR, str(error))

    # ===== Rated aggregates =====

    async def _read_aggregate(self, store: RatedAggregateStore, aggregate_id: str, not_found) -> RatedAggregate:
        current = await store.get_rated_aggregate(aggregate_id)
        if current is None:
            raise not_found(aggregate_id)
        return current

    async def _fold_rating(
        self, store: RatedAggregateStore, aggregate_id: str, rating: int, not_found, label: str
    ) -> RatedAggregate:
        validate_review_rating(rating)

        async for attempt in conflict_retrying(self.max_conflict_retries):
            with attempt:
                current = await self._read_aggregate(store, aggregate_id, not_found)
                new_rating, new_count = RatingAccumulator.apply_new_rating(
                    current.rating, current.total_reviews, rating
                )
                saved = await store.update_rating(aggregate_id, new_rating, new_count, current.version)

        ratings_applied_total.labels(aggregate=label).inc()
        self.logger.info(f"{label} {aggregate_id} rating {saved.rating:.2f} over {saved.total_reviews} reviews")
        return saved

    async def _recompute_restaurant(self, restaurant_id: str, all_ratings: Optional[Iterable[int]]) -> RatedAggregate:
        fixed_ratings = list(all_ratings) if all_ratings is not None else None

        async for attempt in conflict_retrying(self.max_conflict_retries):
            with attempt:
                # Version is read before the ratings so a review applied in between forces a retry.
                current = await self._read_aggregate(self.restaurants, restaurant_id, RestaurantNotFound)
                ratings = (
                    fixed_ratings
                    if fixed_ratings is not None
                    else await self.reviews.ratings_for_restaurant(restaurant_id)
                )
                mean, count = RatingAccumulator.recompute_from_set(ratings)
                saved = await self.restaurants.update_rating(restaurant_id, mean, count, current.version)

        ratings_recomputed_total.labels(aggregate="restaurant").inc()
        return saved

    @BaseService.log_performance
    async def apply_review(self, restaurant_id: str, rating: int) -> ServiceResult[RatedAggregate]:
        """
        Fold one new rating into a restaurant's running mean.

        Example:
            >>> result = await review_service.apply_review(restaurant.id, 5)
            >>> if result.ok:
            ...     print(result.value.rating, result.value.total_reviews)
        """
        try:
            return service_ok(
                await self._fold_rating(self.restaurants, restaurant_id, rating, RestaurantNotFound, "restaurant")
            )
        except Exception as e:
            return self._failure("apply_review", e)

    @BaseService.log_performance
    async def apply_product_review(self, product_id: str, rating: int) -> ServiceResult[RatedAggregate]:
        try:
            return service_ok(await self._fold_rating(self.catalog, product_id, rating, ProductNotFound, "product"))
        except Exception as e:
            return self._failure("apply_product_review", e)

    @BaseService.log_performance
    async def recompute_restaurant_rating(
        self, restaurant_id: str, all_ratings: Optional[Iterable[int]] = None
    ) -> ServiceResult[RatedAggregate]:
        """
        Replace a restaurant's rating with the mean of ``all_ratings``.

        When ``all_ratings`` is None the stored reviews are read. An empty set
        resets the restaurant to rating 0.0 with 0 reviews.
        """
        try:
            return service_ok(await self._recompute_restaurant(restaurant_id, all_ratings))
        except Exception as e:
            return self._failure("recompute_restaurant_rating", e)

    # ===== Reviews =====

    @BaseService.log_performance
    async def create_review(
        self, customer_ref: str, order_id: str, rating: int, comment: str = "", images: Iterable[str] = ()
    ) -> ServiceResult[Review]:
        """
        Review a delivered order and fold the rating into its restaurant.

        Checks, in order: the order exists, it is DELIVERED, it belongs to the
        reviewer, it has not been reviewed yet. The restaurant is notified
        (new_review) after the rating is applied.
        """
        with tracer.start_as_current_span("review.create") as span:
            add_span_attributes(span, order_id=order_id, customer_ref=customer_ref)

            try:
                order = await self.orders.find_by_id(order_id)
                if order is None:
                    raise OrderNotFound(order_id)
                if order.status != OrderStatus.DELIVERED:
                    raise OrderNotReviewable(order_id, order.status)
                if order.customer_ref != customer_ref:
                    raise NotOrderOwner(order_id)
                if await self.reviews.find_by_order(order_id) is not None:
                    raise DuplicateReview(order_id)

                review = Review.write(
                    customer_ref=customer_ref,
                    restaurant_ref=order.restaurant_ref,
                    order_ref=order_id,
                    rating=rating,
                    comment=comment,
                    images=images,
                )
                review = await self.reviews.create(review)
                try:
                    aggregate = await self._fold_rating(
                        self.restaurants, order.restaurant_ref, review.rating, RestaurantNotFound, "restaurant"
                    )
                except Exception:
                    # A stored review is always counted in its restaurant rating.
                    await self.reviews.delete(review.id)
                    self.logger.warning(f"Rolled back review {review.id} for order {order_id}")
                    raise
            except Exception as e:
                span.record_exception(e)
                return self._failure("create_review", e)

            self.logger.info(f"Review {review.id} ({review.rating} stars) created for order {order_id}")

            try:
                await self.notifier.notify(
                    order.restaurant_ref,
                    NotificationTemplate.NEW_REVIEW,
                    {
                        "review_id": review.id,
                        "order_id": order_id,
                        "rating": review.rating,
                        "comment": review.comment,
                        "restaurant_rating": aggregate.rating,
                        "total_reviews": aggregate.total_reviews,
                    },
                )
            except Exception as e:
                notification_failures_total.labels(template=NotificationTemplate.NEW_REVIEW.value).inc()
                self.logger.error(f"Failed to send new_review notification for review {review.id}: {e}", exc_info=True)

            return service_ok(review)

    @BaseService.log_performance
    async def delete_review(self, review_id: str, customer_ref: str) -> ServiceResult[RatedAggregate]:
        """
        Delete a review and recompute its restaurant's rating from the survivors.

        Returns:
            ServiceResult with the restaurant's recomputed RatedAggregate
        """
        try:
            review = await self.reviews.find_by_id(review_id)
            if review is None:
                raise ReviewNotFound(review_id)
            if review.customer_ref != customer_ref:
                raise NotReviewOwner(review_id)

            await self.reviews.delete(review_id)
            try:
                aggregate = await self._recompute_restaurant(review.restaurant_ref, None)
            except Exception:
                await self.reviews.create(review)
                self.logger.warning(f"Restored review {review_id} after failed rating recompute")
                raise
        except Exception as e:
            return self._failure("delete_review", e)

        self.logger.info(
            f"Review {review_id} deleted; restaurant {review.restaurant_ref} now "
            f"{aggregate.rating:.2f} over {aggregate.total_reviews} reviews"
        )
        return service_ok(aggregate)

    @BaseService.log_performance
    async def get_restaurant_reviews(
        self, restaurant_id: str, rating: Optional[int] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict]:
        """
        Page through a restaurant's reviews, newest first, with statistics.

        Returns:
            ServiceResult with {results, count, page, page_size, num_pages, statistics}
            where statistics is {average_rating, total_reviews, rating_distribution{1..5}}
        """
        try:
            if rating is not None:
                validate_review_rating(rating)
            if page < 1 or page_size < 1:
                raise ValidationError("Page and page size must be 1 or greater")

            await self._read_aggregate(self.restaurants, restaurant_id, RestaurantNotFound)
            reviews, total = await self.reviews.list_by_restaurant(restaurant_id, rating, page, page_size)
            all_ratings = list(await self.reviews.ratings_for_restaurant(restaurant_id))
        except Exception as e:
            return self._failure("get_restaurant_reviews", e)

        distribution = {star: 0 for star in range(1, 6)}
        for value in all_ratings:
            distribution[value] += 1
        average, count = RatingAccumulator.recompute_from_set(all_ratings)

        return service_ok(
            {
                "results": reviews,
                "count": total,
                "page": page,
                "page_size": page_size,
                "num_pages": (total + page_size - 1) // page_size,
                "statistics": {
                    "average_rating": round(average, 2),
                    "total_reviews": count,
                    "rating_distribution": distribution,
                },
            }
        )
