"""Tests for the KGB cycle calculator."""

from datetime import date

import pytest

from kgb_assistant.cycle import (
    calculate_cycle,
    complete_cycle,
    count_reviews_since,
    next_review_date,
    review_dates_in_range,
)
from kgb_assistant.models.employee import EmployeeRecord, ReviewStatus


class TestCalculateCycle:
    """Tests for next-review computation."""

    def test_one_year_left(self):
        info = calculate_cycle(date(2023, 3, 1), 2, today=date(2024, 3, 1))

        assert info.next_review_date == date(2025, 3, 1)
        assert info.days_remaining == 365
        assert info.years_remaining == 1
        assert info.months_remaining == 0
        assert not info.is_overdue

    def test_overdue_is_negative(self):
        info = calculate_cycle(date(2020, 1, 1), 2, today=date(2023, 1, 1))

        assert info.next_review_date == date(2022, 1, 1)
        assert info.days_remaining == -365
        assert info.years_remaining == -1
        assert info.is_overdue

    def test_due_today(self):
        info = calculate_cycle(date(2022, 6, 15), 2, today=date(2024, 6, 15))
        assert info.days_remaining == 0
        assert info.describe() == "Hari ini"

    def test_accepts_iso_string(self):
        info = calculate_cycle("2023-03-01T00:00:00.000Z", 2, today=date(2024, 3, 1))
        assert info.next_review_date == date(2025, 3, 1)

    def test_leap_day_is_calendar_correct(self):
        """Test that Feb 29 plus whole years lands on Feb 28."""
        assert next_review_date(date(2020, 2, 29), 2) == date(2022, 2, 28)

    def test_invalid_date_yields_empty_info(self):
        """Test that an unknown date does not raise and counts as overdue."""
        info = calculate_cycle("bukan tanggal", 2, today=date(2024, 1, 1))

        assert info.next_review_date is None
        assert info.days_remaining is None
        assert not info.is_known
        assert info.is_overdue
        assert info.describe() == "Tanggal tidak valid"

    def test_cycle_length_must_be_positive(self):
        with pytest.raises(ValueError):
            calculate_cycle(date(2023, 1, 1), 0)

    def test_describe_years_and_months(self):
        info = calculate_cycle(date(2023, 3, 1), 2, today=date(2024, 1, 1))
        assert info.describe() == "1 tahun 2 bulan lagi"

    def test_describe_overdue(self):
        info = calculate_cycle(date(2021, 1, 1), 2, today=date(2023, 1, 11))
        assert info.describe() == "Terlambat 10 hari"

    def test_other_cycle_length(self):
        info = calculate_cycle(date(2023, 3, 1), 4, today=date(2024, 3, 1))
        assert info.next_review_date == date(2027, 3, 1)


class TestCompleteCycle:
    """Tests for cycle rollover."""

    def test_rollover_moves_date_and_resets_status(self):
        record = EmployeeRecord(
            name="Budi",
            position="Staf",
            national_id="1",
            last_review_date=date(2023, 3, 1),
            review_status=ReviewStatus.COMPLETED,
        )
        rolled = complete_cycle(record, 2)

        assert rolled.last_review_date == date(2025, 3, 1)
        assert rolled.review_status == ReviewStatus.NOT_SUBMITTED
        assert rolled.id == record.id

    def test_rollover_leaves_input_untouched(self):
        record = EmployeeRecord(
            name="Budi",
            position="Staf",
            national_id="1",
            last_review_date=date(2023, 3, 1),
            review_status=ReviewStatus.COMPLETED,
        )
        complete_cycle(record, 2)

        assert record.last_review_date == date(2023, 3, 1)
        assert record.review_status == ReviewStatus.COMPLETED


class TestReviewDates:
    """Tests for review date projection."""

    def test_projects_backwards_and_forwards(self):
        dates = review_dates_in_range(date(2023, 3, 1), 2, 2020, 2026)
        assert dates == [date(2021, 3, 1), date(2023, 3, 1), date(2025, 3, 1)]

    def test_empty_when_no_review_in_range(self):
        assert review_dates_in_range(date(2023, 3, 1), 2, 2024, 2024) == []

    def test_count_reviews_since(self):
        count = count_reviews_since(
            date(2023, 3, 1), 2, since=date(2021, 6, 1), until=date(2024, 6, 1)
        )
        assert count == 1

    def test_count_ignores_future_reviews(self):
        """Test that nothing after the last review counts as held."""
        count = count_reviews_since(
            date(2023, 3, 1), 1, since=date(2020, 1, 1), until=date(2030, 1, 1)
        )
        assert count == 4

    def test_count_zero_when_window_is_after_last_review(self):
        assert count_reviews_since(date(2020, 1, 1), 2, since=date(2021, 1, 1)) == 0
