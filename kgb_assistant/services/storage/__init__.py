"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The employee collection lives under one key of a key-value backend; a JSON
file and an in-memory dictionary are provided.
"""

from kgb_assistant.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from kgb_assistant.services.storage.audit_store import KeyValueAuditStorage
from kgb_assistant.services.storage.file_store import JsonFileKeyValueStorage
from kgb_assistant.services.storage.memory import InMemoryKeyValueStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueAuditStorage",
]
