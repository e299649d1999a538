"""KGB cycle date arithmetic."""

from kgb_assistant.cycle.calculator import (
    CycleInfo,
    calculate_cycle,
    complete_cycle,
    count_reviews_since,
    next_review_date,
    review_dates_in_range,
)

__all__ = [
    "CycleInfo",
    "calculate_cycle",
    "complete_cycle",
    "count_reviews_since",
    "next_review_date",
    "review_dates_in_range",
]
