"""
DiscoveryService - Nearby Restaurant Search

Proximity search over restaurants. Candidates come from a
``RestaurantQuerySource`` (which may pre-filter by bounding box); the exact
haversine distance is computed once per candidate and reused for filtering,
sorting and the response.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from django.db import models

from marketplace.domain.errors import MarketplaceError, ValidationError
from marketplace.domain.repositories import RestaurantQuerySource
from marketplace.domain.value_objects import GeoPoint
from marketplace.infra.observability.metrics import discovery_search_duration
from marketplace.restaurants.domain.models import Restaurant
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


class SortBy(models.TextChoices):
    DISTANCE = "distance", "Distance (nearest first)"
    RATING = "rating", "Rating (highest first)"
    NAME = "name", "Name (A-Z)"


@dataclass(frozen=True)
class NearbyRestaurant:
    restaurant: Restaurant
    distance_km: float

    def to_dict(self) -> dict:
        data = self.restaurant.to_dict()
        data["distance_km"] = round(self.distance_km, 3)
        return data


# Ties always fall back to restaurant id so pages are stable.
SORT_KEYS = {
    SortBy.DISTANCE: lambda match: (match.distance_km, match.restaurant.id),
    SortBy.RATING: lambda match: (-match.restaurant.rating, match.restaurant.id),
    SortBy.NAME: lambda match: (match.restaurant.name.lower(), match.restaurant.id),
}


@dataclass(frozen=True)
class DiscoveryFilters:
    """Conjunctive filters. ``categories`` matches when any category overlaps."""

    categories: Tuple[str, ...] = ()
    min_rating: Optional[float] = None
    query: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "categories", tuple(self.categories or ()))
        if self.min_rating is not None and not 0 <= self.min_rating <= 5:
            raise ValidationError(f"Minimum rating must be between 0 and 5, got {self.min_rating}")

    @classmethod
    def coerce(cls, value: Union["DiscoveryFilters", Dict[str, Any], None]) -> "DiscoveryFilters":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        categories = value.get("categories") or ()
        if isinstance(categories, str):
            categories = (categories,)
        return cls(
            categories=tuple(categories),
            min_rating=value.get("min_rating", value.get("minRating")),
            query=value.get("query"),
        )

    def matches(self, restaurant: Restaurant) -> bool:
        if self.categories and not restaurant.has_any_category(self.categories):
            return False
        if self.min_rating is not None and restaurant.rating < self.min_rating:
            return False
        if self.query and self.query.strip().lower() not in restaurant.name.lower():
            return False
        return True


class DiscoveryService(BaseService):
    """Service for geospatial restaurant discovery."""

    def __init__(self, restaurants: RestaurantQuerySource, default_page_size: int = 20, max_page_size: int = 100):
        super().__init__()
        self.restaurants = restaurants
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def _validate(self, radius_km: float, sort_by, page: int, limit: int) -> SortBy:
        if isinstance(radius_km, bool) or not isinstance(radius_km, (int, float)) or not math.isfinite(radius_km):
            raise ValidationError(f"Radius must be a finite number, got {radius_km!r}")
        if radius_km <= 0:
            raise ValidationError("Radius must be greater than 0")
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if not 1 <= limit <= self.max_page_size:
            raise ValidationError(f"Limit must be between 1 and {self.max_page_size}")
        try:
            return SortBy(str(sort_by).lower())
        except ValueError:
            raise ValidationError(f"Unknown sort key {sort_by!r}. Must be one of: {', '.join(SortBy.values)}")

    def rank(self, center: GeoPoint, radius_km: float, candidates: Iterable[Restaurant], filters, sort_by):
        """Attach distances, drop anything outside the radius or filters, then sort."""
        matches = []
        for restaurant in candidates:
            if not restaurant.is_active:
                continue
            distance = center.distance_to(restaurant.location)
            if distance > radius_km or not filters.matches(restaurant):
                continue
            matches.append(NearbyRestaurant(restaurant, distance))

        matches.sort(key=SORT_KEYS[sort_by])
        return matches

    @BaseService.log_performance
    async def find_nearby(
        self,
        center: GeoPoint,
        radius_km: float,
        filters: Union[DiscoveryFilters, Dict[str, Any], None] = None,
        sort_by: Union[SortBy, str] = SortBy.DISTANCE,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> ServiceResult[Dict]:
        """
        Find active restaurants within ``radius_km`` of ``center``.

        Args:
            center: Search origin
            radius_km: Inclusive search radius in kilometres
            filters: DiscoveryFilters or a dict with categories/min_rating/query
            sort_by: 'distance' (ascending), 'rating' (descending) or 'name' (ascending)
            page: 1-based page number
            limit: Page size (defaults to the configured page size)

        Returns:
            ServiceResult with {results: [NearbyRestaurant], count, page, page_size, num_pages}

        Example:
            >>> result = await discovery.find_nearby(GeoPoint(33.57, -7.59), 5, {"categories": ["pizza"]})
            >>> if result.ok:
            ...     nearest = result.value["results"][0]
        """
        limit = self.default_page_size if limit is None else limit

        with discovery_search_duration.time():
            try:
                sort_key = self._validate(radius_km, sort_by, page, limit)
                filters = DiscoveryFilters.coerce(filters)
                candidates = await self.restaurants.find_candidates(center, radius_km)
                matches = self.rank(center, radius_km, candidates, filters, sort_key)
            except MarketplaceError as e:
                return service_err(e.code, str(e))
            except Exception as e:
                self.logger.error(f"Error searching restaurants near {center}: {e}", exc_info=True)
                return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        total = len(matches)
        start = (page - 1) * limit
        self.logger.info(f"Found {total} restaurants within {radius_km}km of {center}")

        return service_ok(
            {
                "results": matches[start : start + limit],
                "count": total,
                "page": page,
                "page_size": limit,
                "num_pages": (total + limit - 1) // limit,
            }
        )
