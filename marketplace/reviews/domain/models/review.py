import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from django.utils import timezone

from marketplace.domain.value_objects import validate_review_rating


@dataclass(frozen=True)
class Review:
    """A customer's review of a delivered order. One review per order."""

    id: str
    customer_ref: str
    restaurant_ref: str
    order_ref: str
    rating: int
    comment: str = ""
    images: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=timezone.now)

    def __post_init__(self):
        validate_review_rating(self.rating)
        object.__setattr__(self, "images", tuple(self.images))

    @classmethod
    def write(
        cls,
        customer_ref: str,
        restaurant_ref: str,
        order_ref: str,
        rating: int,
        comment: str = "",
        images=(),
        review_id: Optional[str] = None,
    ) -> "Review":
        return cls(
            id=review_id or str(uuid.uuid4()),
            customer_ref=customer_ref,
            restaurant_ref=restaurant_ref,
            order_ref=order_ref,
            rating=rating,
            comment=comment or "",
            images=tuple(images or ()),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_ref": self.customer_ref,
            "restaurant_ref": self.restaurant_ref,
            "order_ref": self.order_ref,
            "rating": self.rating,
            "comment": self.comment,
            "images": list(self.images),
            "created_at": self.created_at.isoformat(),
        }
