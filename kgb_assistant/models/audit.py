"""
Audit Models for KGB Assistant

Every mutation of the employee collection and every failed import, export
or AI request is logged for audit purposes. This provides:
1. Traceability of who-changed-what in a shared personnel spreadsheet
2. Debugging information when an import goes wrong
3. A way to reconstruct when a cycle was marked complete

DESIGN DECISION: Audit logs are append-only. We never modify events.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record lifecycle
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    BULK_UPDATED = "bulk_updated"
    BULK_DELETED = "bulk_deleted"
    CYCLE_COMPLETED = "cycle_completed"

    # Data transfer
    DATA_IMPORTED = "data_imported"
    IMPORT_FAILED = "import_failed"
    DATA_EXPORTED = "data_exported"

    # Persistence
    STORAGE_LOAD_FAILED = "storage_load_failed"
    STORAGE_SAVE_FAILED = "storage_save_failed"

    # AI assistance
    PROMOTION_SUGGESTED = "promotion_suggested"
    AI_SERVICE_ERROR = "ai_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which record(s) is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'employee', 'file')"
    )
    entity_ids: list[str] = Field(
        default_factory=list,
        description="IDs of the records this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one file import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_ids": self.entity_ids,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_json(self) -> str:
        """Serialize for the key-value audit trail."""
        return json.dumps(self.model_dump(mode="json"))


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created(record_id, name)
        event = AuditEventBuilder.import_failed("data.xlsx", "Missing NIP")
    """

    @staticmethod
    def record_created(
        record_id: str,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type="employee",
            entity_ids=[record_id],
            correlation_id=correlation_id,
            description=f"Employee added: {name}",
        )

    @staticmethod
    def record_updated(
        record_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type="employee",
            entity_ids=[record_id],
            correlation_id=correlation_id,
            description=f"Employee updated ({len(changed_fields)} fields)",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def record_deleted(
        record_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type="employee",
            entity_ids=[record_id],
            correlation_id=correlation_id,
            description="Employee deleted",
        )

    @staticmethod
    def bulk_updated(
        record_ids: list[str],
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_UPDATED,
            entity_type="employee",
            entity_ids=record_ids,
            correlation_id=correlation_id,
            description=f"Bulk update of {len(record_ids)} employees",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def bulk_deleted(
        record_ids: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_DELETED,
            entity_type="employee",
            entity_ids=record_ids,
            correlation_id=correlation_id,
            description=f"Bulk delete of {len(record_ids)} employees",
        )

    @staticmethod
    def cycle_completed(
        record_id: str,
        previous_date: str,
        next_date: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CYCLE_COMPLETED,
            entity_type="employee",
            entity_ids=[record_id],
            correlation_id=correlation_id,
            description=f"KGB cycle completed, next cycle starts {next_date}",
            details={
                "previous_review_date": previous_date,
                "new_review_date": next_date,
            },
        )

    @staticmethod
    def data_imported(
        source: str,
        strategy: str,
        record_count: int,
        skipped_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            entity_type="file",
            correlation_id=correlation_id,
            description=f"Imported {record_count} employees from {source}",
            details={
                "source": source,
                "strategy": strategy,
                "record_count": record_count,
                "skipped_count": skipped_count,
            },
        )

    @staticmethod
    def import_failed(
        source: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="file",
            correlation_id=correlation_id,
            description=f"Import rejected: {source}",
            details={"source": source},
            error_message=error_message,
        )

    @staticmethod
    def data_exported(
        target: str,
        export_format: str,
        record_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            entity_type="file",
            correlation_id=correlation_id,
            description=f"Exported {record_count} employees as {export_format}",
            details={
                "target": target,
                "format": export_format,
                "record_count": record_count,
            },
        )

    @staticmethod
    def storage_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.STORAGE_LOAD_FAILED
            if operation == "load"
            else AuditEventType.STORAGE_SAVE_FAILED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            correlation_id=correlation_id,
            description=f"Storage {operation} failed",
            error_message=error_message,
        )

    @staticmethod
    def promotion_suggested(
        candidate_count: int,
        suggestion_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROMOTION_SUGGESTED,
            entity_type="promotion",
            correlation_id=correlation_id,
            description=(
                f"AI suggested {suggestion_count} of {candidate_count} candidates"
            ),
            details={
                "candidate_count": candidate_count,
                "suggestion_count": suggestion_count,
            },
        )

    @staticmethod
    def ai_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AI_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"AI service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
