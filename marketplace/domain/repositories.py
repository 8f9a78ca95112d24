"""
Collaborator contracts consumed by the engine.

Every read-modify-write goes through a ``compare_and_swap``/``update_rating``
call that takes the version the caller read. Implementations must reject the
write with ``ConcurrencyConflict`` when the stored version moved on, and with
the matching ``NotFoundError`` when the row is gone.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple


class RatedAggregateStore(ABC):
    """Shared rating contract for restaurants and products."""

    @abstractmethod
    async def get_rated_aggregate(self, aggregate_id: str):
        """Return the current ``RatedAggregate`` snapshot or ``None``."""

    @abstractmethod
    async def update_rating(self, aggregate_id: str, rating: float, total_reviews: int, expected_version: int):
        """Write a new rating/count pair if the version still matches. Returns the new snapshot."""


class Catalog(RatedAggregateStore):
    @abstractmethod
    async def get_product(self, product_id: str):
        """Return a ``Product`` or ``None``."""


class RestaurantLookup(RatedAggregateStore):
    @abstractmethod
    async def get_restaurant(self, restaurant_id: str):
        """Return a ``Restaurant`` or ``None``."""


class RestaurantQuerySource(ABC):
    @abstractmethod
    async def find_candidates(self, center, radius_km: float) -> List:
        """
        Return restaurants that may lie within ``radius_km`` of ``center``.

        The result is a superset: implementations may pre-filter by a bounding
        box but exact distance filtering is left to the caller.
        """


class OrderStore(ABC):
    @abstractmethod
    async def create(self, order):
        """Persist a new order and return it."""

    @abstractmethod
    async def find_by_id(self, order_id: str):
        """Return an ``Order`` or ``None``."""

    @abstractmethod
    async def compare_and_swap(self, order_id: str, expected_version: int, order):
        """Replace the stored order if its version equals ``expected_version``."""

    @abstractmethod
    async def find_by_customer(
        self, customer_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List, int]:
        """Return ``(orders, total)`` newest first."""

    @abstractmethod
    async def find_by_restaurant(
        self, restaurant_ref: str, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List, int]:
        """Return ``(orders, total)`` newest first."""


class ReviewStore(ABC):
    @abstractmethod
    async def create(self, review):
        """Persist a review. Raises ``DuplicateReview`` if the order already has one."""

    @abstractmethod
    async def find_by_id(self, review_id: str):
        pass

    @abstractmethod
    async def find_by_order(self, order_ref: str):
        pass

    @abstractmethod
    async def delete(self, review_id: str) -> bool:
        pass

    @abstractmethod
    async def list_by_restaurant(
        self, restaurant_ref: str, rating: Optional[int] = None, page: int = 1, page_size: int = 20
    ) -> Tuple[List, int]:
        """Return ``(reviews, total)`` newest first."""

    @abstractmethod
    async def ratings_for_restaurant(self, restaurant_ref: str) -> Sequence[int]:
        """Every stored rating value for the restaurant."""
