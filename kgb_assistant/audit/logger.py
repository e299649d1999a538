"""
Audit Logger

DESIGN DECISION: Every mutation of the employee collection is logged.
This provides:
1. Complete traceability of who-changed-what
2. Debugging capability for failed imports
3. A history of completed KGB cycles

The audit logger:
- Gracefully handles failures (never breaks the operation being audited)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from kgb_assistant.models.audit import AuditEvent, AuditEventBuilder
from kgb_assistant.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit trail storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("kgb_assistant.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent persisted events, newest first."""
        if not self._storage:
            return []
        return self._storage.get_recent_events(limit)

    def log_record_created(
        self,
        record_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_created(record_id, name, correlation_id))

    def log_record_updated(
        self,
        record_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_updated(record_id, changed_fields, correlation_id))

    def log_record_deleted(
        self,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(record_id, correlation_id))

    def log_bulk_updated(
        self,
        record_ids: list[str],
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.bulk_updated(record_ids, changed_fields, correlation_id))

    def log_bulk_deleted(
        self,
        record_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.bulk_deleted(record_ids, correlation_id))

    def log_cycle_completed(
        self,
        record_id: str,
        previous_date: str,
        next_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a KGB cycle rollover."""
        self.log(AuditEventBuilder.cycle_completed(
            record_id=record_id,
            previous_date=previous_date,
            next_date=next_date,
            correlation_id=correlation_id,
        ))

    def log_data_imported(
        self,
        source: str,
        strategy: str,
        record_count: int,
        skipped_count: int = 0,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.data_imported(
            source=source,
            strategy=strategy,
            record_count=record_count,
            skipped_count=skipped_count,
            correlation_id=correlation_id,
        ))

    def log_import_failed(
        self,
        source: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.import_failed(source, error_message, correlation_id))

    def log_data_exported(
        self,
        target: str,
        export_format: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.data_exported(
            target=target,
            export_format=export_format,
            record_count=record_count,
            correlation_id=correlation_id,
        ))

    def log_storage_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed load or save of the employee collection."""
        self.log(AuditEventBuilder.storage_failed(operation, error_message, correlation_id))

    def log_promotion_suggested(
        self,
        candidate_count: int,
        suggestion_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.promotion_suggested(
            candidate_count, suggestion_count, correlation_id
        ))

    def log_ai_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ai_service_error(service, error_message, correlation_id))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., a file import) and pass
    it through all subsequent operations.
    """
    return uuid4()
