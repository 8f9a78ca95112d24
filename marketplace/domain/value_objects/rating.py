from dataclasses import dataclass

from marketplace.domain.errors import InvalidRating

MIN_REVIEW_RATING = 1
MAX_REVIEW_RATING = 5


def validate_review_rating(rating) -> int:
    """A single review score: an integer from 1 to 5."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(f"Rating must be an integer, got {rating!r}")
    if not MIN_REVIEW_RATING <= rating <= MAX_REVIEW_RATING:
        raise InvalidRating(f"Rating must be between {MIN_REVIEW_RATING} and {MAX_REVIEW_RATING}, got {rating}")
    return rating


@dataclass(frozen=True)
class RatedAggregate:
    """Running mean rating of a restaurant or product together with its store version."""

    aggregate_id: str
    rating: float = 0.0
    total_reviews: int = 0
    version: int = 0

    def __post_init__(self):
        if isinstance(self.total_reviews, bool) or not isinstance(self.total_reviews, int) or self.total_reviews < 0:
            raise InvalidRating(f"Review count must be a non-negative integer, got {self.total_reviews!r}")
        if not 0 <= self.rating <= MAX_REVIEW_RATING:
            raise InvalidRating(f"Aggregate rating must be between 0 and {MAX_REVIEW_RATING}, got {self.rating}")
        object.__setattr__(self, "rating", float(self.rating))
