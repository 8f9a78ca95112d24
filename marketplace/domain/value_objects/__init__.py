from .address import Address
from .geo import GeoPoint
from .money import Currency, Money
from .rating import RatedAggregate, validate_review_rating


__all__ = [
    "Address",
    "Currency",
    "GeoPoint",
    "Money",
    "RatedAggregate",
    "validate_review_rating",
]
