from .rating_accumulator import RatingAccumulator
from .review_service import ReviewService


__all__ = [
    "RatingAccumulator",
    "ReviewService",
]
