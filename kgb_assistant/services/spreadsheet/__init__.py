"""Spreadsheet import and export."""

from kgb_assistant.services.spreadsheet.exporter import ExportError, SpreadsheetExporter
from kgb_assistant.services.spreadsheet.importer import (
    DateColumnStrategy,
    ImportStrategy,
    MissingColumnsError,
    NoValidRowsError,
    NoYearColumnsError,
    SpreadsheetImporter,
    SpreadsheetImportError,
    UnsupportedFileError,
    YearMatrixStrategy,
    parse_date_cell,
)
from kgb_assistant.services.spreadsheet.months import (
    EXPORT_MONTH_ABBREVIATIONS,
    month_abbreviation,
    parse_month_token,
)
from kgb_assistant.services.spreadsheet.reader import read_rows

__all__ = [
    # Import
    "DateColumnStrategy",
    "ImportStrategy",
    "SpreadsheetImporter",
    "YearMatrixStrategy",
    "parse_date_cell",
    "read_rows",
    # Errors
    "ExportError",
    "MissingColumnsError",
    "NoValidRowsError",
    "NoYearColumnsError",
    "SpreadsheetImportError",
    "UnsupportedFileError",
    # Export
    "SpreadsheetExporter",
    # Months
    "EXPORT_MONTH_ABBREVIATIONS",
    "month_abbreviation",
    "parse_month_token",
]
