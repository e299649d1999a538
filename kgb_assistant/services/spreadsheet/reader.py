"""
Spreadsheet file reading.

Turns an .xlsx or .csv file into plain rows of cell values. Everything
about what the cells mean lives in the importer.
"""

import csv
import io
import zipfile
from pathlib import Path
from typing import Any, Optional, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from kgb_assistant.services.spreadsheet.importer import UnsupportedFileError


EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}
CSV_EXTENSIONS = {".csv"}


def _decode_csv(content: bytes) -> str:
    for encoding in ("utf-8-sig", "cp1252"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return content.decode("utf-8", errors="replace")


def read_csv_rows(content: bytes) -> list[list[Any]]:
    """Rows of a CSV file; ';' or ',' delimited, whichever is more common."""
    text = _decode_csv(content)
    sample = text[:4096]
    delimiter = ";" if sample.count(";") >= sample.count(",") and ";" in sample else ","
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    return [list(row) for row in reader]


def read_excel_rows(content: bytes) -> list[list[Any]]:
    """Rows of the first (active) worksheet, with computed cell values."""
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.active
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def read_rows(
    source: Union[str, Path],
    content: Optional[bytes] = None,
) -> list[list[Any]]:
    """
    Read a spreadsheet into rows.

    Args:
        source: File path, or just the file name when content is given
        content: Raw file bytes (e.g. from an upload); read from disk if None

    Raises:
        UnsupportedFileError: for anything other than .xlsx/.xlsm/.csv
    """
    path = Path(source)
    extension = path.suffix.lower()

    if extension not in EXCEL_EXTENSIONS | CSV_EXTENSIONS:
        raise UnsupportedFileError(
            f"Unsupported spreadsheet type '{extension or path.name}'. "
            "Use .xlsx or .csv."
        )

    if content is None:
        content = path.read_bytes()

    if extension in CSV_EXTENSIONS:
        return read_csv_rows(content)

    try:
        return read_excel_rows(content)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise UnsupportedFileError(f"Could not read {path.name} as a workbook: {e}")
