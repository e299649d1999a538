"""Tests for spreadsheet export and file reading."""

from datetime import date

import pytest

from kgb_assistant.models.employee import EmployeeRecord
from kgb_assistant.services.spreadsheet import (
    ExportError,
    SpreadsheetExporter,
    SpreadsheetImporter,
    UnsupportedFileError,
    read_rows,
)


def _record(name="Budi", national_id="198701012010011001", last=date(2023, 3, 1)):
    return EmployeeRecord(
        name=name,
        position="Staf",
        national_id=national_id,
        last_review_date=last,
    )


class TestSpreadsheetExporter:
    """Tests for the year-matrix report."""

    def test_header_layout(self):
        exporter = SpreadsheetExporter(cycle_length_years=2)
        assert exporter.header(2024, 2026) == ["No", "NIP", "NAMA", 2024, 2025, 2026, "JABATAN"]

    def test_rows_mark_review_years(self):
        exporter = SpreadsheetExporter(cycle_length_years=2)
        rows = exporter.build_rows([_record()], 2022, 2025)

        assert rows[1] == [1, "198701012010011001", "Budi", 0, "Mar", 0, "Mar", "Staf"]

    def test_indonesian_month_abbreviations(self):
        exporter = SpreadsheetExporter(cycle_length_years=1)
        cells = exporter.year_cells(_record(last=date(2023, 8, 17)), 2023, 2023)
        assert cells == ["Agu"]

    def test_rows_are_numbered_in_order(self):
        exporter = SpreadsheetExporter(cycle_length_years=2)
        rows = exporter.build_rows([_record("A"), _record("B")], 2023, 2023)

        assert [row[0] for row in rows[1:]] == [1, 2]
        assert [row[2] for row in rows[1:]] == ["A", "B"]

    def test_empty_collection(self):
        with pytest.raises(ExportError, match="No employee data"):
            SpreadsheetExporter(2).build_rows([], 2023, 2025)

    def test_end_before_start(self):
        with pytest.raises(ExportError):
            SpreadsheetExporter(2).build_rows([_record()], 2025, 2023)

    def test_unreasonable_year(self):
        with pytest.raises(ExportError):
            SpreadsheetExporter(2).build_rows([_record()], 99, 2023)

    def test_workbook_reads_back_through_importer(self):
        """Test that an exported sheet imports with the year-matrix strategy."""
        records = [_record("Budi", "111"), _record("Siti", "222", date(2022, 10, 1))]
        content = SpreadsheetExporter(2).export(records, 2020, 2023)

        rows = read_rows("report.xlsx", content)
        result = SpreadsheetImporter("auto").parse_rows(rows)

        assert result.strategy == "year_matrix"
        assert [(r.name, r.national_id, r.last_review_date) for r in result.records] == [
            ("Budi", "111", date(2023, 3, 1)),
            ("Siti", "222", date(2022, 10, 1)),
        ]


class TestReadRows:
    """Tests for turning files into rows."""

    def test_comma_csv(self):
        content = "NAMA,JABATAN,NIP,2023\nJane,Staff,1,Mar\n".encode("utf-8")
        assert read_rows("data.csv", content) == [
            ["NAMA", "JABATAN", "NIP", "2023"],
            ["Jane", "Staff", "1", "Mar"],
        ]

    def test_semicolon_csv_with_bom(self):
        content = "\ufeffNAMA;JABATAN;NIP;2023\nJane;Staff;1;Mar\n".encode("utf-8")
        rows = read_rows("data.csv", content)

        assert rows[0] == ["NAMA", "JABATAN", "NIP", "2023"]
        assert rows[1][0] == "Jane"

    def test_csv_from_disk(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("NAMA,JABATAN,NIP,2023\nJane,Staff,1,Mar\n", encoding="utf-8")
        assert len(read_rows(path)) == 2

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedFileError):
            read_rows("data.pdf", b"%PDF")

    def test_corrupt_workbook(self):
        with pytest.raises(UnsupportedFileError):
            read_rows("data.xlsx", b"definitely not a zip file")
