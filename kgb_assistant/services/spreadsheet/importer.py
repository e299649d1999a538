"""
Spreadsheet Import

Personnel offices keep KGB history in spreadsheets laid out in one of two
ways:

1. YEAR MATRIX: one column per calendar year; the cell holds the month
   abbreviation of the review held that year, or 0.

       NO | NIP   | NAMA | 2021 | 2022 | 2023 | JABATAN
       1  | 1987… | Budi | Mar  | 0    | Mar  | Staf

2. DATE COLUMN: a single column holding the date of the last review.

DESIGN DECISION: These are two named strategies, not one function that
guesses. The strategy is configured (KGB_IMPORT_STRATEGY); "auto" picks the
year matrix whenever year columns are present.

Parsing is all-or-nothing at the file level (missing columns, no usable
rows) but lenient at the row level: a row without a recognizable review
date is skipped and reported, not fatal.
"""

import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Optional, Sequence

import structlog
from dateutil import parser as date_parser
from openpyxl.utils.datetime import from_excel
from pydantic import ValidationError

from kgb_assistant.models.employee import (
    EmployeeRecord,
    ImportResult,
    SkippedRow,
    coerce_date,
)
from kgb_assistant.services.spreadsheet.months import parse_month_token
from kgb_assistant.validation import ImportValidationError


logger = structlog.get_logger(__name__)


Row = Sequence[Any]

YEAR_HEADER = re.compile(r"^\d{4}$")

# Field -> (display name used in error messages, header variants)
REQUIRED_COLUMNS = {
    "national_id": ("NIP", ("nip", "national id", "nomor induk")),
    "position": ("JABATAN", ("jabatan", "position")),
    "name": ("NAMA", ("nama", "name")),
}

DATE_COLUMN = ("TMT KGB", (
    "tmt kgb",
    "kgb terakhir",
    "tanggal kgb",
    "tgl kgb",
    "last kgb",
    "lastkgbdate",
    "last review",
))


# =============================================================================
# ERRORS
# =============================================================================

class SpreadsheetImportError(ImportValidationError):
    """The spreadsheet could not be imported. Nothing was changed."""
    pass


class MissingColumnsError(SpreadsheetImportError):
    """One or more required columns were not found in the header row."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


class NoYearColumnsError(SpreadsheetImportError):
    """A year-matrix import found no year columns."""
    pass


class NoValidRowsError(SpreadsheetImportError):
    """The header was fine but not a single row could be turned into a record."""

    def __init__(self, skipped: list[SkippedRow]):
        self.skipped = skipped
        super().__init__(
            f"No valid employee rows found ({len(skipped)} rows skipped). "
            "Check that every row has a review date."
        )


class UnsupportedFileError(SpreadsheetImportError):
    """The file type is not a supported spreadsheet format."""
    pass


# =============================================================================
# CELL HELPERS
# =============================================================================

def normalize_header(value: Any) -> str:
    """Trimmed, lower-case header text. 2023 and 2023.0 both become '2023'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().lower()


def cell_text(value: Any) -> str:
    """Cell value as trimmed text."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def is_blank_row(row: Row) -> bool:
    return all(cell_text(cell) == "" for cell in row)


def get_cell(row: Row, index: int) -> Any:
    return row[index] if index < len(row) else None


def find_column(
    headers: list[str],
    variants: Sequence[str],
    claimed: set[int],
) -> Optional[int]:
    """
    Index of the first header matching one of the variants.

    Exact matches win over substring matches; a header already claimed by
    another column is never reused.
    """
    for index, header in enumerate(headers):
        if index not in claimed and header in variants:
            return index
    for index, header in enumerate(headers):
        if index in claimed or not header:
            continue
        if any(variant in header for variant in variants):
            return index
    return None


def parse_date_cell(value: Any) -> Optional[date]:
    """
    Interpret a literal date cell.

    Numbers above 1 are spreadsheet serial dates (1900 date system).
    Strings are tried as ISO first, then as free-form day-first dates.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return _from_serial(value)

    text = str(value).strip()
    if not text:
        return None

    try:
        return _from_serial(float(text))
    except ValueError:
        pass

    parsed = coerce_date(text)
    if parsed is not None:
        return parsed

    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError):
        return None


def _from_serial(serial: float) -> Optional[date]:
    if serial <= 1:
        return None
    try:
        converted = from_excel(serial)
    except (ValueError, OverflowError):
        return None
    return converted.date() if isinstance(converted, datetime) else None


# =============================================================================
# STRATEGIES
# =============================================================================

class ImportStrategy(ABC):
    """Turns the rows of a sheet into employee records."""

    name: str = ""
    no_date_reason = "No review date found"

    def resolve_required(self, headers: list[str]) -> dict[str, int]:
        """
        Locate the name, position and NIP columns.

        Raises:
            MissingColumnsError: naming every column that was not found
        """
        claimed: set[int] = set()
        columns: dict[str, int] = {}
        missing: list[str] = []

        for field, (display, variants) in REQUIRED_COLUMNS.items():
            index = find_column(headers, variants, claimed)
            if index is None:
                missing.append(display)
            else:
                columns[field] = index
                claimed.add(index)

        if missing:
            raise MissingColumnsError(missing)
        return columns

    def build_record(
        self,
        row: Row,
        columns: dict[str, int],
        review_date: date,
    ) -> EmployeeRecord:
        """Create a fresh record from a row. Raises ValidationError."""
        return EmployeeRecord(
            name=cell_text(get_cell(row, columns["name"])),
            position=cell_text(get_cell(row, columns["position"])),
            national_id=get_cell(row, columns["national_id"]),
            last_review_date=review_date,
        )

    def parse(self, rows: Sequence[Row]) -> ImportResult:
        """
        Parse a whole sheet; the first row holds the headers.

        Raises:
            SpreadsheetImportError: when the sheet as a whole is unusable
        """
        if not rows:
            raise SpreadsheetImportError("The sheet is empty")

        headers = [normalize_header(h) for h in rows[0]]
        columns = self.resolve_required(headers)
        self.prepare(headers, set(columns.values()))

        records: list[EmployeeRecord] = []
        skipped: list[SkippedRow] = []

        for row_number, row in enumerate(rows[1:], start=2):
            if is_blank_row(row):
                continue

            review_date = self.find_review_date(row)
            if review_date is None:
                skipped.append(SkippedRow(
                    row_number=row_number,
                    reason=self.no_date_reason,
                ))
                continue

            try:
                records.append(self.build_record(row, columns, review_date))
            except ValidationError as e:
                fields = ", ".join(
                    str(err["loc"][0]) for err in e.errors() if err["loc"]
                )
                skipped.append(SkippedRow(
                    row_number=row_number,
                    reason=f"Invalid or empty fields: {fields}",
                ))

        if not records:
            raise NoValidRowsError(skipped)

        logger.info(
            "spreadsheet_parsed",
            strategy=self.name,
            records=len(records),
            skipped=len(skipped),
        )
        return ImportResult(strategy=self.name, records=records, skipped=skipped)

    @abstractmethod
    def prepare(self, headers: list[str], claimed: set[int]) -> None:
        """Locate strategy-specific columns. Raise if they are missing."""
        pass

    @abstractmethod
    def find_review_date(self, row: Row) -> Optional[date]:
        """The last review date encoded in a row, if any."""
        pass


class YearMatrixStrategy(ImportStrategy):
    """
    One column per year; the most recent year holding a month wins.

    The review date is the first day of that month.
    """

    name = "year_matrix"
    no_date_reason = "No month recorded in any year column"

    def __init__(self):
        self._year_columns: list[tuple[int, int]] = []

    @staticmethod
    def year_columns(headers: list[str]) -> list[tuple[int, int]]:
        """(column index, year) pairs, oldest year first."""
        found = [
            (index, int(header))
            for index, header in enumerate(headers)
            if YEAR_HEADER.match(header)
        ]
        return sorted(found, key=lambda pair: pair[1])

    def prepare(self, headers: list[str], claimed: set[int]) -> None:
        self._year_columns = self.year_columns(headers)
        if not self._year_columns:
            raise NoYearColumnsError(
                "No year columns found. Expected headers such as 2022, 2023 "
                "holding the month of each review."
            )

    def find_review_date(self, row: Row) -> Optional[date]:
        for index, year in reversed(self._year_columns):
            month = parse_month_token(get_cell(row, index))
            if month is not None:
                return date(year, month, 1)
        return None


class DateColumnStrategy(ImportStrategy):
    """A single column holds the date of the last review."""

    name = "date_column"
    no_date_reason = "Review date is empty or not a date"

    def __init__(self):
        self._date_index: Optional[int] = None

    def prepare(self, headers: list[str], claimed: set[int]) -> None:
        display, variants = DATE_COLUMN
        self._date_index = find_column(headers, variants, claimed)
        if self._date_index is None:
            raise MissingColumnsError([display])

    def find_review_date(self, row: Row) -> Optional[date]:
        return parse_date_cell(get_cell(row, self._date_index))


# =============================================================================
# IMPORTER
# =============================================================================

class SpreadsheetImporter:
    """
    Parses spreadsheet rows with the configured strategy.

    Args:
        strategy: "year_matrix", "date_column" or "auto"
    """

    def __init__(self, strategy: str = "auto"):
        if strategy not in ("auto", "year_matrix", "date_column"):
            raise ValueError(f"Unknown import strategy: {strategy}")
        self._strategy = strategy

    def select_strategy(self, rows: Sequence[Row]) -> ImportStrategy:
        """Pick the strategy for a sheet."""
        if self._strategy == "year_matrix":
            return YearMatrixStrategy()
        if self._strategy == "date_column":
            return DateColumnStrategy()

        headers = [normalize_header(h) for h in rows[0]] if rows else []
        if YearMatrixStrategy.year_columns(headers):
            return YearMatrixStrategy()
        return DateColumnStrategy()

    def parse_rows(self, rows: Sequence[Row]) -> ImportResult:
        """
        Parse rows (header first) into record candidates.

        Raises:
            SpreadsheetImportError: if the sheet cannot be imported
        """
        strategy = self.select_strategy(rows)
        if self._strategy != "auto" or isinstance(strategy, YearMatrixStrategy):
            return strategy.parse(rows)

        try:
            return strategy.parse(rows)
        except MissingColumnsError as e:
            if e.missing != [DATE_COLUMN[0]]:
                raise
            raise NoYearColumnsError(
                "No review columns found. Expected either year columns such as "
                f"2022, 2023 holding the month of each review, or a {DATE_COLUMN[0]} "
                "column holding the last review date."
            ) from e
