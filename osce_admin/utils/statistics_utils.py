"""Utility functions for calculating feedback rating statistics."""

import statistics
from collections import Counter
from typing import Sequence

RATING_VALUES = (5, 4, 3, 2, 1)


def calculate_rating_distribution(ratings: Sequence[int]) -> dict[str, int]:
    """
    Count ratings per value.

    Args:
        ratings: Sequence of ratings in the range 1..5

    Returns:
        Dictionary keyed "rating5" .. "rating1" (e.g., {"rating5": 3, "rating4": 0, ...})
    """
    counts = Counter(ratings)
    return {f"rating{value}": counts.get(value, 0) for value in RATING_VALUES}


def calculate_rating_summary(ratings: Sequence[int]) -> dict[str, object]:
    """
    Summarise ratings into total, average rounded to two decimals, and distribution.

    An empty sequence gives a total and average of zero.
    """
    if not ratings:
        return {
            "total_feedbacks": 0,
            "average_rating": 0,
            "rating_distribution": calculate_rating_distribution([]),
        }

    return {
        "total_feedbacks": len(ratings),
        "average_rating": round(statistics.mean(ratings), 2),
        "rating_distribution": calculate_rating_distribution(ratings),
    }
