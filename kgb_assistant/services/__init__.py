"""Services package."""

from kgb_assistant.services.spreadsheet import (
    ExportError,
    MissingColumnsError,
    NoValidRowsError,
    NoYearColumnsError,
    SpreadsheetExporter,
    SpreadsheetImporter,
    SpreadsheetImportError,
    UnsupportedFileError,
    read_rows,
)
from kgb_assistant.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Spreadsheet services
    "ExportError",
    "MissingColumnsError",
    "NoValidRowsError",
    "NoYearColumnsError",
    "SpreadsheetExporter",
    "SpreadsheetImporter",
    "SpreadsheetImportError",
    "UnsupportedFileError",
    "read_rows",
    # Storage services
    "AuditStorageInterface",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueAuditStorage",
    "KeyValueStorageInterface",
    "NotFoundError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
