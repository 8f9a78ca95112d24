from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from django.utils import timezone

from marketplace.domain.value_objects import Address, GeoPoint, RatedAggregate

from .opening_hours import OpeningHours


@dataclass(frozen=True)
class Restaurant:
    id: str
    name: str
    location: GeoPoint
    categories: Tuple[str, ...] = ()
    rating: float = 0.0
    total_reviews: int = 0
    is_active: bool = True
    opening_hours: Tuple[OpeningHours, ...] = ()
    merchant_ref: str = ""
    description: str = ""
    phone: str = ""
    address: Optional[Address] = None
    created_at: datetime = field(default_factory=timezone.now)
    updated_at: datetime = field(default_factory=timezone.now)
    version: int = 0

    def __post_init__(self):
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "opening_hours", tuple(self.opening_hours))

    @property
    def rated_aggregate(self) -> RatedAggregate:
        return RatedAggregate(self.id, self.rating, self.total_reviews, self.version)

    def is_open_at(self, at: datetime) -> bool:
        """A restaurant without declared hours is treated as always open."""
        if not self.opening_hours:
            return True
        return any(hours.is_open_at(at) for hours in self.opening_hours)

    def is_accepting_orders(self, at: Optional[datetime] = None) -> bool:
        return self.is_active and self.is_open_at(at or timezone.now())

    def has_any_category(self, categories) -> bool:
        wanted = {category.lower() for category in categories}
        return any(category.lower() in wanted for category in self.categories)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "phone": self.phone,
            "location": self.location.to_dict(),
            "address": self.address.to_dict() if self.address else None,
            "categories": list(self.categories),
            "rating": self.rating,
            "total_reviews": self.total_reviews,
            "is_active": self.is_active,
            "opening_hours": [hours.to_dict() for hours in self.opening_hours],
            "merchant_ref": self.merchant_ref,
        }
