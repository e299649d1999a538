"""Shared fixtures for the KGB Assistant tests."""

import time
from datetime import date

import pytest

from kgb_assistant.audit import AuditLogger
from kgb_assistant.config import get_settings
from kgb_assistant.models.employee import EmployeeDraft, ReviewStatus
from kgb_assistant.repository import EmployeeRepository
from kgb_assistant.services.storage import (
    InMemoryKeyValueStorage,
    KeyValueAuditStorage,
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test in an empty directory, in UTC, with default settings."""
    monkeypatch.chdir(tmp_path)
    if hasattr(time, "tzset"):
        monkeypatch.setenv("TZ", "UTC")
        time.tzset()
    for name in (
        "KGB_CYCLE_LENGTH_YEARS",
        "KGB_IMPORT_STRATEGY",
        "KGB_STORAGE_KEY",
        "KGB_STORAGE_PATH",
        "KGB_REVIEW_WINDOW_DAYS",
        "GEMINI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    monkeypatch.undo()
    if hasattr(time, "tzset"):
        time.tzset()


@pytest.fixture
def local_timezone(monkeypatch):
    """Switch the process timezone; takes a POSIX TZ string."""
    if not hasattr(time, "tzset"):
        pytest.skip("timezone switching needs time.tzset")

    def _switch(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    return _switch


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def audit_logger(storage):
    return AuditLogger(KeyValueAuditStorage(storage))


@pytest.fixture
def repository(storage, audit_logger):
    return EmployeeRepository(
        storage,
        cycle_length_years=2,
        storage_key="employees",
        audit_logger=audit_logger,
    )


def _make_draft(
    name: str = "Budi Santoso",
    position: str = "Staf Keuangan",
    national_id: str = "198701012010011001",
    last_review_date: date = date(2023, 3, 1),
    review_status: ReviewStatus = ReviewStatus.NOT_SUBMITTED,
) -> EmployeeDraft:
    return EmployeeDraft(
        name=name,
        position=position,
        national_id=national_id,
        last_review_date=last_review_date,
        review_status=review_status,
    )


@pytest.fixture
def make_draft():
    """Factory for valid employee drafts; override any field by keyword."""
    return _make_draft
