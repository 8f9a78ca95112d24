from dataclasses import dataclass

from marketplace.domain.value_objects import Money, RatedAggregate


@dataclass(frozen=True)
class Product:
    """A menu item as the catalog currently prices it."""

    id: str
    restaurant_ref: str
    name: str
    unit_price: Money
    available: bool = True
    category: str = ""
    rating: float = 0.0
    total_reviews: int = 0
    version: int = 0

    @property
    def rated_aggregate(self) -> RatedAggregate:
        return RatedAggregate(self.id, self.rating, self.total_reviews, self.version)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "restaurant_ref": self.restaurant_ref,
            "name": self.name,
            "unit_price": self.unit_price.to_dict(),
            "available": self.available,
            "category": self.category,
            "rating": self.rating,
            "total_reviews": self.total_reviews,
        }
