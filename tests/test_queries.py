"""Tests for employee queries."""

from datetime import date

import pytest

from kgb_assistant.models.employee import (
    EmployeeQuery,
    EmployeeRecord,
    ReviewStatus,
)
from kgb_assistant.queries import QueryExecutor


TODAY = date(2024, 1, 1)


def _record(name, last, position="Staf", national_id="1", status=ReviewStatus.NOT_SUBMITTED):
    return EmployeeRecord(
        name=name,
        position=position,
        national_id=national_id,
        last_review_date=last,
        review_status=status,
    )


@pytest.fixture
def records():
    return [
        _record("Andi", date(2022, 3, 1), national_id="1987"),      # due in 60 days
        _record("Budi", date(2021, 12, 1), position="Kepala Seksi"),  # overdue 31 days
        _record("Citra", date(2023, 6, 1), status=ReviewStatus.SUBMITTED),  # 517 days
        _record("Dewi", date(2022, 1, 1)),                            # due today
    ]


class TestQueryExecutor:
    """Tests for QueryExecutor."""

    def test_rows_carry_cycle_figures(self, records):
        result = QueryExecutor(2).execute(records, EmployeeQuery(), today=TODAY)

        by_name = {row.record.name: row for row in result.rows}
        assert by_name["Andi"].next_review_date == date(2024, 3, 1)
        assert by_name["Andi"].days_remaining == 60
        assert by_name["Budi"].days_remaining == -31
        assert by_name["Dewi"].days_remaining == 0

    def test_closest_first(self, records):
        result = QueryExecutor(2).execute(records, EmployeeQuery(), today=TODAY)
        assert [r.name for r in result.records] == ["Budi", "Dewi", "Andi", "Citra"]

    def test_furthest_first(self, records):
        result = QueryExecutor(2).execute(
            records, EmployeeQuery(sort="furthest"), today=TODAY
        )
        assert [r.name for r in result.records] == ["Citra", "Andi", "Dewi", "Budi"]

    def test_search_by_name_is_case_insensitive(self, records):
        result = QueryExecutor(2).execute(records, EmployeeQuery(search="cit"), today=TODAY)
        assert [r.name for r in result.records] == ["Citra"]

    def test_search_by_position(self, records):
        result = QueryExecutor(2).execute(records, EmployeeQuery(search="kepala"), today=TODAY)
        assert [r.name for r in result.records] == ["Budi"]

    def test_search_by_nip(self, records):
        result = QueryExecutor(2).execute(records, EmployeeQuery(search="198"), today=TODAY)
        assert [r.name for r in result.records] == ["Andi"]

    def test_status_filter(self, records):
        result = QueryExecutor(2).execute(
            records, EmployeeQuery(status=ReviewStatus.SUBMITTED), today=TODAY
        )
        assert [r.name for r in result.records] == ["Citra"]

    def test_overdue_only(self, records):
        result = QueryExecutor(2).execute(
            records, EmployeeQuery(overdue_only=True), today=TODAY
        )
        assert [r.name for r in result.records] == ["Budi"]

    def test_limit_and_total(self, records):
        result = QueryExecutor(2).execute(records, EmployeeQuery(limit=2), today=TODAY)

        assert result.total == 4
        assert result.result_count == 2

    def test_upcoming_reviews_window(self, records):
        """Test that only reviews due within 90 days, not overdue, are listed."""
        result = QueryExecutor(2).upcoming_reviews(records, today=TODAY)
        assert [r.name for r in result.records] == ["Dewi", "Andi"]

    def test_upcoming_reviews_custom_window(self, records):
        result = QueryExecutor(2).upcoming_reviews(records, window_days=30, today=TODAY)
        assert [r.name for r in result.records] == ["Dewi"]

    def test_window_from_settings(self, records, monkeypatch):
        monkeypatch.setenv("KGB_REVIEW_WINDOW_DAYS", "30")
        result = QueryExecutor(2).upcoming_reviews(records, today=TODAY)
        assert [r.name for r in result.records] == ["Dewi"]

    def test_records_are_not_mutated(self, records):
        before = [r.model_copy() for r in records]
        QueryExecutor(2).execute(records, EmployeeQuery(sort="furthest"), today=TODAY)
        assert records == before
