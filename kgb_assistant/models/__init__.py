"""
Data Models Package

This package contains all Pydantic models used in KGB Assistant.
All data flowing through the system must conform to these schemas.
"""

from kgb_assistant.models.employee import (
    EmployeeDraft,
    EmployeeQuery,
    EmployeeRecord,
    EmployeeRow,
    EmployeeUpdate,
    ImportResult,
    LoadResult,
    MutationResult,
    QueryResult,
    ReviewStatus,
    SkippedRow,
    ValidationIssue,
    ValidationResult,
    coerce_date,
    normalize_national_id,
)
from kgb_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Employee models
    "EmployeeDraft",
    "EmployeeQuery",
    "EmployeeRecord",
    "EmployeeRow",
    "EmployeeUpdate",
    "ImportResult",
    "LoadResult",
    "MutationResult",
    "QueryResult",
    "ReviewStatus",
    "SkippedRow",
    "ValidationIssue",
    "ValidationResult",
    "coerce_date",
    "normalize_national_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
