"""
KGB Cycle Calculator

Pure date arithmetic for the salary-step review cycle. Nothing in this
module touches storage or configuration; the cycle length is always passed
in by the caller.

DESIGN DECISION: Years are added with relativedelta, which is calendar
correct (29 Feb + 1 year = 28 Feb). Adding 365-day blocks would drift by a
day every leap year.

An unknown last-review date is not an error. The result simply carries no
figures and reports itself as overdue, so it sorts to the top of every list
and gets looked at.
"""

from datetime import date
from typing import Any, Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from kgb_assistant.models.employee import EmployeeRecord, ReviewStatus, coerce_date


class CycleInfo(BaseModel):
    """Next review date and the time left until it."""

    next_review_date: Optional[date] = None
    days_remaining: Optional[int] = None
    months_remaining: Optional[int] = None
    years_remaining: Optional[int] = None

    @property
    def is_known(self) -> bool:
        return self.next_review_date is not None

    @property
    def is_overdue(self) -> bool:
        """Unknown dates count as overdue."""
        return self.days_remaining is None or self.days_remaining < 0

    def describe(self) -> str:
        """Short Indonesian description, e.g. '1 tahun 2 bulan lagi'."""
        if not self.is_known:
            return "Tanggal tidak valid"
        if self.days_remaining == 0:
            return "Hari ini"
        if self.days_remaining < 0:
            return f"Terlambat {abs(self.days_remaining)} hari"

        parts = []
        if self.years_remaining:
            parts.append(f"{self.years_remaining} tahun")
        if self.months_remaining:
            parts.append(f"{self.months_remaining} bulan")
        if not parts:
            parts.append(f"{self.days_remaining} hari")
        return " ".join(parts) + " lagi"


def _check_cycle_length(cycle_length_years: int) -> None:
    if cycle_length_years < 1:
        raise ValueError(
            f"Cycle length must be at least one year, got {cycle_length_years}"
        )


def next_review_date(last_review_date: date, cycle_length_years: int) -> date:
    """The date one full cycle after the last review."""
    _check_cycle_length(cycle_length_years)
    return last_review_date + relativedelta(years=cycle_length_years)


def calculate_cycle(
    last_review_date: Any,
    cycle_length_years: int,
    today: Optional[date] = None,
) -> CycleInfo:
    """
    Compute the next review date and the time remaining until it.

    Args:
        last_review_date: date, datetime or ISO string of the last review
        cycle_length_years: configured years between reviews
        today: reference date, defaults to date.today()

    Returns:
        CycleInfo. Negative figures mean the review is overdue; all figures
        are None when the input date cannot be interpreted.
    """
    _check_cycle_length(cycle_length_years)

    last = coerce_date(last_review_date)
    if last is None:
        return CycleInfo()

    today = today or date.today()
    next_date = next_review_date(last, cycle_length_years)
    remaining = relativedelta(next_date, today)

    return CycleInfo(
        next_review_date=next_date,
        days_remaining=(next_date - today).days,
        months_remaining=remaining.months,
        years_remaining=remaining.years,
    )


def complete_cycle(record: EmployeeRecord, cycle_length_years: int) -> EmployeeRecord:
    """
    Close the current cycle of a record and open the next one.

    The last review date moves forward by exactly one cycle and the status
    goes back to NOT_SUBMITTED. The input record is left untouched.
    """
    return record.model_copy(
        update={
            "last_review_date": next_review_date(
                record.last_review_date, cycle_length_years
            ),
            "review_status": ReviewStatus.NOT_SUBMITTED,
        }
    )


def review_dates_in_range(
    last_review_date: date,
    cycle_length_years: int,
    start_year: int,
    end_year: int,
) -> list[date]:
    """
    Every review date of the cycle that falls within [start_year, end_year].

    Reviews are projected both backwards and forwards from the last review,
    in steps of exactly one cycle.
    """
    _check_cycle_length(cycle_length_years)

    dates = []
    for year in range(start_year, end_year + 1):
        offset = year - last_review_date.year
        if offset % cycle_length_years == 0:
            dates.append(last_review_date + relativedelta(years=offset))
    return dates


def count_reviews_since(
    last_review_date: date,
    cycle_length_years: int,
    since: date,
    until: Optional[date] = None,
) -> int:
    """
    Number of reviews held between `since` and `until`, inclusive.

    Review dates are projected backwards from the last review; nothing after
    the last review counts as held. `until` defaults to the last review.
    Used to estimate how often an employee's salary was raised recently.
    """
    until = min(until or last_review_date, last_review_date)
    if since > until:
        return 0
    dates = review_dates_in_range(
        last_review_date, cycle_length_years, since.year, until.year
    )
    return sum(1 for d in dates if since <= d <= until)
