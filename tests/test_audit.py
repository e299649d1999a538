"""Tests for the audit logger and settings."""

from uuid import UUID

import pytest
from pydantic import ValidationError

from kgb_assistant.audit import AuditLogger, create_correlation_id
from kgb_assistant.config import get_settings, validate_all_settings
from kgb_assistant.config.settings import KGBSettings
from kgb_assistant.models.audit import AuditEventBuilder, AuditEventType
from kgb_assistant.services.storage import AuditStorageInterface


class BrokenAuditStorage(AuditStorageInterface):
    def append_event(self, event):
        raise RuntimeError("audit sink down")

    def get_recent_events(self, limit=100):
        return []

    def get_events_by_entity(self, entity_id):
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_local_only_logging_succeeds(self):
        assert AuditLogger().log(AuditEventBuilder.record_deleted("1")) is True
        assert AuditLogger().recent_events() == []

    def test_events_are_persisted(self, audit_logger):
        correlation_id = create_correlation_id()
        audit_logger.log_data_imported("data.xlsx", "year_matrix", 10, 2, correlation_id)

        event = audit_logger.recent_events()[0]
        assert event.event_type == AuditEventType.DATA_IMPORTED
        assert event.correlation_id == correlation_id
        assert event.details["skipped_count"] == 2

    def test_storage_failure_never_raises(self):
        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.record_deleted("1")) is False

    def test_correlation_ids_are_unique(self):
        first, second = create_correlation_id(), create_correlation_id()
        assert isinstance(first, UUID)
        assert first != second


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        settings = get_settings().kgb
        assert settings.cycle_length_years == 2
        assert settings.import_strategy == "auto"
        assert settings.review_window_days == 90
        assert settings.storage_key == "kgb-assistant-employees"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("KGB_CYCLE_LENGTH_YEARS", "4")
        assert get_settings().kgb.cycle_length_years == 4

    def test_cycle_length_bounds(self):
        with pytest.raises(ValidationError):
            KGBSettings(cycle_length_years=0)

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError):
            KGBSettings(import_strategy="guess")

    def test_upload_limits(self):
        app = get_settings().app
        assert app.max_upload_size_bytes == 10 * 1024 * 1024
        assert app.supported_formats_list == ["json", "xlsx", "csv"]

    def test_validate_all_reports_missing_gemini_key(self):
        results = validate_all_settings()

        assert results["kgb"] is True
        assert results["app"] is True
        assert results["gemini"] is False
