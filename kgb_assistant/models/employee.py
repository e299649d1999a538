"""
Core Data Models for KGB Assistant

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the same JSON shape the browser tool exported
4. Support the audit trail

DESIGN DECISION: Python attribute names describe the domain
(national_id, last_review_date, review_status) while the JSON aliases keep
the field names of existing exports (nip, lastKGBDate, kgbStatus), so old
files import without a migration step.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Optional
from uuid import uuid4

from dateutil.parser import isoparse
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ReviewStatus(str, Enum):
    """
    Submission status of the current KGB cycle.

    Values are the labels used by the personnel office and appear verbatim
    in exported files.

    CRITICAL: Changing a status to COMPLETED never sticks. Completing a
    cycle immediately rolls the record over to the next one. COMPLETED can
    still arrive from imported files and is kept as is.
    """
    NOT_SUBMITTED = "Belum Diajukan"
    SUBMITTED = "Sudah Diajukan"
    IN_PROGRESS = "Proses"
    AWAITING_CONFIRMATION = "Menunggu Konfirmasi"
    COMPLETED = "Selesai"


QUOTE_CHARACTERS = "'\"`"


def coerce_date(value: Any) -> Optional[date]:
    """
    Interpret a stored or user-supplied value as a calendar date.

    Accepts date/datetime objects and ISO 8601 strings, with or without a
    time component. Anything else yields None.

    Timezone-aware values are read in the local timezone first: a date
    picked at local midnight and stored as UTC (`2023-02-28T17:00:00.000Z`
    in Jakarta) comes back as the day that was picked.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone()
            except (ValueError, OverflowError):
                return None
        return value.date()
    if isinstance(value, date):
        return value
    return None


def normalize_national_id(value: Any) -> Any:
    """Coerce a NIP cell to text and strip stray quote characters."""
    if value is None:
        return value
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return "".join(ch for ch in text if ch not in QUOTE_CHARACTERS).strip()


def _validate_review_date(value: Any) -> Any:
    if value is None:
        return value
    parsed = coerce_date(value)
    if parsed is None:
        raise ValueError(f"Not a valid date: {value!r}")
    return parsed


# =============================================================================
# CORE EMPLOYEE MODELS
# =============================================================================

class EmployeeDraft(BaseModel):
    """
    An employee record before it has been given an identity.

    This is what the add form (or an import row) produces.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Employee full name"
    )
    position: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Position / job title (jabatan)"
    )
    national_id: str = Field(
        ...,
        alias="nip",
        min_length=1,
        max_length=50,
        description="Civil-service employee number (NIP)"
    )
    last_review_date: date = Field(
        ...,
        alias="lastKGBDate",
        description="Date of the last salary-step increase"
    )
    review_status: ReviewStatus = Field(
        default=ReviewStatus.NOT_SUBMITTED,
        alias="kgbStatus",
        description="Submission status of the current cycle"
    )

    @field_validator("national_id", mode="before")
    @classmethod
    def clean_national_id(cls, v: Any) -> Any:
        return normalize_national_id(v)

    @field_validator("last_review_date", mode="before")
    @classmethod
    def parse_review_date(cls, v: Any) -> Any:
        return _validate_review_date(v)


class EmployeeRecord(EmployeeDraft):
    """
    A stored employee record.

    The id is generated once at creation and never changes afterwards.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque unique record identifier"
    )

    @classmethod
    def from_draft(cls, draft: EmployeeDraft) -> "EmployeeRecord":
        """Give a draft its identity."""
        return cls(**draft.model_dump())

    def to_wire(self) -> dict:
        """Serialize to the exported JSON shape (id first, aliased keys)."""
        data = self.model_dump(mode="json", by_alias=True)
        return {"id": data.pop("id"), **data}


class EmployeeUpdate(BaseModel):
    """
    Partial update applied to one or many records (bulk edit).

    Only fields that are explicitly set are applied.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    position: Optional[str] = Field(default=None, min_length=1, max_length=200)
    national_id: Optional[str] = Field(
        default=None, alias="nip", min_length=1, max_length=50
    )
    last_review_date: Optional[date] = Field(default=None, alias="lastKGBDate")
    review_status: Optional[ReviewStatus] = Field(default=None, alias="kgbStatus")

    @field_validator("national_id", mode="before")
    @classmethod
    def clean_national_id(cls, v: Any) -> Any:
        return normalize_national_id(v)

    @field_validator("last_review_date", mode="before")
    @classmethod
    def parse_review_date(cls, v: Any) -> Any:
        return _validate_review_date(v)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly set on this update, by attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# REPOSITORY RESULT MODELS
# =============================================================================

class MutationResult(BaseModel):
    """
    Outcome of a repository mutation.

    The in-memory change always happened. persisted=False means the
    key-value mirror could not be written; warning explains why.
    """

    records: list[EmployeeRecord] = Field(
        default_factory=list,
        description="Records created, changed or removed by the operation"
    )
    persisted: bool = Field(
        default=True,
        description="Was the full collection written to storage?"
    )
    warning: Optional[str] = Field(
        default=None,
        description="Non-fatal persistence problem"
    )

    @property
    def count(self) -> int:
        return len(self.records)


class LoadResult(BaseModel):
    """Outcome of loading the collection from storage."""

    loaded: int = Field(ge=0)
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.warning is None


# =============================================================================
# IMPORT MODELS
# =============================================================================

class SkippedRow(BaseModel):
    """A spreadsheet row that did not produce a record."""

    row_number: int = Field(
        ...,
        ge=1,
        description="1-based row number in the sheet (header is row 1)"
    )
    reason: str


class ImportResult(BaseModel):
    """
    Result of parsing a spreadsheet.

    Records are candidates only; they reach the repository through
    replace_all.
    """

    strategy: Literal["year_matrix", "date_column"]
    records: list[EmployeeRecord] = Field(default_factory=list)
    skipped: list[SkippedRow] = Field(default_factory=list)

    @property
    def record_count(self) -> int:
        return len(self.records)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in an import payload."""

    index: Optional[int] = Field(
        default=None,
        description="Position of the offending item in the payload"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating an import payload."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    records: list[EmployeeRecord] = Field(
        default_factory=list,
        description="Parsed records, only filled when the payload is valid"
    )

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# QUERY MODELS
# =============================================================================

class EmployeeQuery(BaseModel):
    """
    Filter and sort options for the employee list.

    All filters are optional and combined with AND.
    """

    search: Optional[str] = Field(
        default=None,
        description="Matches name or position (case-insensitive) or NIP"
    )
    status: Optional[ReviewStatus] = None
    due_within_days: Optional[int] = Field(
        default=None,
        ge=0,
        description="Keep reviews due between today and this many days ahead"
    )
    overdue_only: bool = False
    sort: Literal["closest", "furthest"] = "closest"
    limit: Optional[int] = Field(default=None, ge=1)


class EmployeeRow(BaseModel):
    """An employee together with its computed cycle figures."""

    record: EmployeeRecord
    next_review_date: Optional[date] = None
    days_remaining: Optional[int] = None


class QueryResult(BaseModel):
    """Result of executing an EmployeeQuery."""

    total: int = Field(ge=0, description="Records before filtering")
    rows: list[EmployeeRow] = Field(default_factory=list)

    @property
    def result_count(self) -> int:
        return len(self.rows)

    @property
    def records(self) -> list[EmployeeRecord]:
        return [row.record for row in self.rows]
