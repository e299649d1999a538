"""
Query Execution Engine

DESIGN DECISION: Queries are DETERMINISTIC filters over the in-memory
collection. Every row carries the cycle figures computed here, so lists,
badges and the upcoming-review panel all agree on "days remaining".

Records whose last review date cannot be interpreted are never dropped by
sorting. They count as most overdue and come first in "closest" order.
"""

from datetime import date
from typing import Iterable, Optional

from kgb_assistant.config import get_settings
from kgb_assistant.cycle import calculate_cycle
from kgb_assistant.models.employee import (
    EmployeeQuery,
    EmployeeRecord,
    EmployeeRow,
    QueryResult,
)


class QueryExecutor:
    """
    Filters and orders employee records by their KGB cycle.

    GUARANTEES:
    - Only returns records it was given
    - Never mutates the records
    - Stable order for records with equal days remaining
    """

    def __init__(
        self,
        cycle_length_years: Optional[int] = None,
        review_window_days: Optional[int] = None,
    ):
        if cycle_length_years is None or review_window_days is None:
            settings = get_settings().kgb
            if cycle_length_years is None:
                cycle_length_years = settings.cycle_length_years
            if review_window_days is None:
                review_window_days = settings.review_window_days

        self._cycle_length = cycle_length_years
        self._window_days = review_window_days

    def execute(
        self,
        records: Iterable[EmployeeRecord],
        query: EmployeeQuery,
        today: Optional[date] = None,
    ) -> QueryResult:
        """Apply search, filters, sort and limit to the records."""
        today = today or date.today()
        records = list(records)
        rows = [self._to_row(record, today) for record in records]

        if query.search:
            rows = [row for row in rows if self._matches(row.record, query.search)]
        if query.status is not None:
            rows = [row for row in rows if row.record.review_status == query.status]
        if query.due_within_days is not None:
            rows = [
                row for row in rows
                if row.days_remaining is not None
                and 0 <= row.days_remaining <= query.due_within_days
            ]
        if query.overdue_only:
            rows = [
                row for row in rows
                if row.days_remaining is None or row.days_remaining < 0
            ]

        rows.sort(key=self._sort_key, reverse=query.sort == "furthest")

        if query.limit:
            rows = rows[:query.limit]

        return QueryResult(total=len(records), rows=rows)

    def upcoming_reviews(
        self,
        records: Iterable[EmployeeRecord],
        window_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> QueryResult:
        """Reviews due within the next `window_days`, soonest first."""
        return self.execute(
            records,
            EmployeeQuery(
                due_within_days=self._window_days if window_days is None else window_days,
                sort="closest",
            ),
            today=today,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _to_row(self, record: EmployeeRecord, today: date) -> EmployeeRow:
        info = calculate_cycle(record.last_review_date, self._cycle_length, today)
        return EmployeeRow(
            record=record,
            next_review_date=info.next_review_date,
            days_remaining=info.days_remaining,
        )

    @staticmethod
    def _matches(record: EmployeeRecord, search: str) -> bool:
        term = search.strip().lower()
        if not term:
            return True
        return (
            term in record.name.lower()
            or term in record.position.lower()
            or term in record.national_id
        )

    @staticmethod
    def _sort_key(row: EmployeeRow) -> float:
        if row.days_remaining is None:
            return float("-inf")
        return row.days_remaining
