"""
Spreadsheet Export

Produces the year-matrix report the personnel office files:

    No | NIP | NAMA | 2025 | 2026 | ... | JABATAN

Each year cell holds the month abbreviation of the review falling in that
year under the configured cycle length, or 0 when there is none. The sheet
reads back through the year-matrix import strategy.
"""

import io
from typing import Any, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from kgb_assistant.cycle import review_dates_in_range
from kgb_assistant.models.employee import EmployeeRecord
from kgb_assistant.services.spreadsheet.months import month_abbreviation


MIN_EXPORT_YEAR = 1900
SHEET_TITLE = "KGB"


class ExportError(Exception):
    """The export could not be produced."""
    pass


class SpreadsheetExporter:
    """Builds year-matrix workbooks for a fixed cycle length."""

    def __init__(self, cycle_length_years: int):
        self._cycle_length = cycle_length_years

    def _check_range(self, start_year: int, end_year: int) -> None:
        if start_year < MIN_EXPORT_YEAR or end_year < MIN_EXPORT_YEAR:
            raise ExportError(f"Years must be {MIN_EXPORT_YEAR} or later")
        if end_year < start_year:
            raise ExportError("End year must be greater than or equal to start year")

    def header(self, start_year: int, end_year: int) -> list[Any]:
        return ["No", "NIP", "NAMA", *range(start_year, end_year + 1), "JABATAN"]

    def year_cells(
        self,
        record: EmployeeRecord,
        start_year: int,
        end_year: int,
    ) -> list[Any]:
        """Month abbreviation or 0 for every year of the range."""
        months = {
            review.year: month_abbreviation(review.month)
            for review in review_dates_in_range(
                record.last_review_date, self._cycle_length, start_year, end_year
            )
        }
        return [months.get(year, 0) for year in range(start_year, end_year + 1)]

    def build_rows(
        self,
        records: Sequence[EmployeeRecord],
        start_year: int,
        end_year: int,
    ) -> list[list[Any]]:
        """
        Header plus one row per record, in collection order.

        Raises:
            ExportError: for an empty collection or an invalid year range
        """
        if not records:
            raise ExportError("No employee data to export.")
        self._check_range(start_year, end_year)

        rows = [self.header(start_year, end_year)]
        for number, record in enumerate(records, start=1):
            rows.append([
                number,
                record.national_id,
                record.name,
                *self.year_cells(record, start_year, end_year),
                record.position,
            ])
        return rows

    def export(
        self,
        records: Sequence[EmployeeRecord],
        start_year: int,
        end_year: int,
    ) -> bytes:
        """Render the report as .xlsx bytes."""
        rows = self.build_rows(records, start_year, end_year)

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE

        for row in rows:
            sheet.append(row)

        for cell in sheet[1]:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center")

        # NIP is kept as text so 18-digit numbers are not mangled
        for (cell,) in sheet.iter_rows(min_row=2, min_col=2, max_col=2):
            cell.number_format = "@"

        sheet.column_dimensions["A"].width = 5
        sheet.column_dimensions["B"].width = 22
        sheet.column_dimensions["C"].width = 30
        sheet.column_dimensions[get_column_letter(len(rows[0]))].width = 30
        sheet.freeze_panes = "D2"

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
