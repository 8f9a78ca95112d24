"""
Running-mean rating aggregation shared by restaurants and products.

``apply_new_rating`` is the only way a new review enters an aggregate.
Removing a review has no incremental inverse given only the mean and count,
so deletions go through ``recompute_from_set`` over the surviving ratings.
"""

from typing import Iterable, Tuple

from marketplace.domain.errors import InvalidRating
from marketplace.domain.value_objects import validate_review_rating
from marketplace.domain.value_objects.rating import MAX_REVIEW_RATING


class RatingAccumulator:
    @staticmethod
    def apply_new_rating(current_rating: float, current_count: int, new_rating: int) -> Tuple[float, int]:
        """
        Fold one review score into a running mean.

        Args:
            current_rating: Current mean in [0, 5]
            current_count: Number of reviews the mean was built from
            new_rating: Integer score from 1 to 5

        Returns:
            (new_mean, new_count)

        Example:
            >>> RatingAccumulator.apply_new_rating(4.0, 2, 5)
            (4.333333333333333, 3)
        """
        validate_review_rating(new_rating)
        if isinstance(current_count, bool) or not isinstance(current_count, int) or current_count < 0:
            raise InvalidRating(f"Review count must be a non-negative integer, got {current_count!r}")
        if not 0 <= current_rating <= MAX_REVIEW_RATING:
            raise InvalidRating(f"Current rating must be between 0 and {MAX_REVIEW_RATING}, got {current_rating}")

        new_count = current_count + 1
        new_mean = (current_rating * current_count + new_rating) / new_count
        return new_mean, new_count

    @staticmethod
    def recompute_from_set(ratings: Iterable[int]) -> Tuple[float, int]:
        """Mean and count of every rating. An empty set yields ``(0.0, 0)``."""
        ratings = [validate_review_rating(rating) for rating in ratings]
        if not ratings:
            return 0.0, 0
        return sum(ratings) / len(ratings), len(ratings)
