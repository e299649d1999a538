"""
Employee Repository

The single owner of the employee collection.

DESIGN DECISION: The collection lives in memory and is mirrored, in full,
into one key of a key-value store after every mutation. The mirror has no
life of its own:
- it is read once, on load
- it is overwritten wholesale, never merged
- if it cannot be written, the in-memory collection stays authoritative and
  the caller gets a warning instead of an exception

Completing a KGB cycle is not a terminal state. Setting a record's status to
COMPLETED (single or bulk edit) passes it through complete_cycle, which moves
the last review date forward one cycle and resets the status.
"""

import json
from typing import Iterable, Iterator, Optional
from uuid import UUID

import structlog

from kgb_assistant.audit import AuditLogger
from kgb_assistant.config import get_settings
from kgb_assistant.cycle import complete_cycle
from kgb_assistant.models.employee import (
    EmployeeDraft,
    EmployeeRecord,
    EmployeeUpdate,
    LoadResult,
    MutationResult,
    ReviewStatus,
)
from kgb_assistant.services.spreadsheet import ExportError
from kgb_assistant.services.storage import (
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
)
from kgb_assistant.validation import InvalidPayloadError, PayloadValidator


logger = structlog.get_logger(__name__)

TRACKED_FIELDS = ("name", "position", "national_id", "last_review_date", "review_status")


class EmployeeRepository:
    """
    In-memory employee collection with a key-value persistence mirror.

    Args:
        storage: Backend holding the serialized mirror
        cycle_length_years: Years per KGB cycle (defaults to settings)
        storage_key: Key of the mirror (defaults to settings)
        audit_logger: Optional audit trail for every mutation
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        cycle_length_years: Optional[int] = None,
        storage_key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if cycle_length_years is None or storage_key is None:
            settings = get_settings().kgb
            if cycle_length_years is None:
                cycle_length_years = settings.cycle_length_years
            if storage_key is None:
                storage_key = settings.storage_key

        if cycle_length_years < 1:
            raise ValueError(
                f"Cycle length must be at least one year, got {cycle_length_years}"
            )

        self._storage = storage
        self._key = storage_key
        self._cycle_length = cycle_length_years
        self._audit_logger = audit_logger
        self._validator = PayloadValidator()
        self._records: list[EmployeeRecord] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def cycle_length_years(self) -> int:
        return self._cycle_length

    def all(self) -> list[EmployeeRecord]:
        """All records, in collection order."""
        return list(self._records)

    def get(self, record_id: str) -> Optional[EmployeeRecord]:
        return next((r for r in self._records if r.id == record_id), None)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EmployeeRecord]:
        return iter(list(self._records))

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError(f"Employee not found: {record_id}")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> LoadResult:
        """
        Replace the in-memory collection with the persisted mirror.

        Malformed or unreadable data is discarded and reported; the
        repository then starts empty.
        """
        self._records = []

        try:
            raw = self._storage.get(self._key)
        except StorageError as e:
            return self._load_failed(f"Could not load data: {e}")

        if raw is None or not raw.strip():
            return LoadResult(loaded=0)

        try:
            self._records = self._validator.parse(raw)
        except InvalidPayloadError as e:
            return self._load_failed(f"Could not load data. It might be corrupted. {e}")

        logger.info("employees_loaded", count=len(self._records))
        return LoadResult(loaded=len(self._records))

    def _load_failed(self, message: str) -> LoadResult:
        logger.error("employees_load_failed", key=self._key, error=message)
        if self._audit_logger:
            self._audit_logger.log_storage_failed("load", message)
        return LoadResult(loaded=0, warning=message)

    def _persist(self, records: list[EmployeeRecord], correlation_id: Optional[UUID] = None) -> MutationResult:
        """Write the full collection; report failure as a warning."""
        payload = json.dumps(
            [record.to_wire() for record in self._records],
            ensure_ascii=False,
        )
        try:
            self._storage.set(self._key, payload)
        except StorageError as e:
            message = f"Could not save data to storage: {e}"
            logger.warning("employees_save_failed", key=self._key, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_storage_failed("save", message, correlation_id)
            return MutationResult(records=records, persisted=False, warning=message)

        return MutationResult(records=records)

    # ------------------------------------------------------------------
    # Cycle rollover
    # ------------------------------------------------------------------

    def _complete_cycle(
        self,
        record: EmployeeRecord,
        correlation_id: Optional[UUID] = None,
    ) -> EmployeeRecord:
        rolled = complete_cycle(record, self._cycle_length)
        if self._audit_logger:
            self._audit_logger.log_cycle_completed(
                record_id=record.id,
                previous_date=record.last_review_date.isoformat(),
                next_date=rolled.last_review_date.isoformat(),
                correlation_id=correlation_id,
            )
        return rolled

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        draft: EmployeeDraft,
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """Create a record with a freshly generated id."""
        record = EmployeeRecord.from_draft(draft)
        self._records = [*self._records, record]

        if self._audit_logger:
            self._audit_logger.log_record_created(record.id, record.name, correlation_id)
        return self._persist([record], correlation_id)

    def update(
        self,
        record: EmployeeRecord,
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """
        Replace the stored record with the same id.

        Changing the status to COMPLETED rolls the record over to the next
        cycle. Records already stored as COMPLETED keep their date when
        other fields are edited.

        Raises:
            NotFoundError: If no record has this id
        """
        index = self._index_of(record.id)
        previous = self._records[index]
        updated = record
        if (
            record.review_status == ReviewStatus.COMPLETED
            and previous.review_status != ReviewStatus.COMPLETED
        ):
            updated = self._complete_cycle(record, correlation_id)

        records = list(self._records)
        records[index] = updated
        self._records = records

        if self._audit_logger:
            changed = [f for f in TRACKED_FIELDS if getattr(previous, f) != getattr(record, f)]
            self._audit_logger.log_record_updated(record.id, changed, correlation_id)
        return self._persist([updated], correlation_id)

    def bulk_update(
        self,
        record_ids: Iterable[str],
        changes: EmployeeUpdate,
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """
        Apply the same partial update to several records.

        Unknown ids are ignored. Each record is rolled over individually
        when the update sets the status to COMPLETED.
        """
        wanted = set(record_ids)
        fields = changes.changes()
        completes = fields.get("review_status") == ReviewStatus.COMPLETED
        updated: list[EmployeeRecord] = []
        records = []

        for record in self._records:
            if record.id in wanted:
                merged = EmployeeRecord.model_validate({**record.model_dump(), **fields})
                record = self._complete_cycle(merged, correlation_id) if completes else merged
                updated.append(record)
            records.append(record)
        self._records = records

        if self._audit_logger and updated:
            self._audit_logger.log_bulk_updated(
                [r.id for r in updated], sorted(fields), correlation_id
            )
        return self._persist(updated, correlation_id)

    def delete(
        self,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """
        Remove one record.

        Raises:
            NotFoundError: If no record has this id
        """
        index = self._index_of(record_id)
        removed = self._records[index]
        self._records = [r for r in self._records if r.id != record_id]

        if self._audit_logger:
            self._audit_logger.log_record_deleted(record_id, correlation_id)
        return self._persist([removed], correlation_id)

    def bulk_delete(
        self,
        record_ids: Iterable[str],
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """Remove every record whose id is listed. Unknown ids are ignored."""
        wanted = set(record_ids)
        removed = [r for r in self._records if r.id in wanted]
        self._records = [r for r in self._records if r.id not in wanted]

        if self._audit_logger and removed:
            self._audit_logger.log_bulk_deleted([r.id for r in removed], correlation_id)
        return self._persist(removed, correlation_id)

    def replace_all(
        self,
        records: Iterable[EmployeeRecord],
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """
        Swap in a complete new collection (import).

        Raises:
            InvalidPayloadError: If two records share an id
        """
        records = list(records)
        ids = [r.id for r in records]
        if len(set(ids)) != len(ids):
            raise InvalidPayloadError("Imported records contain duplicate ids")

        self._records = records
        return self._persist(list(records), correlation_id)

    # ------------------------------------------------------------------
    # JSON import / export
    # ------------------------------------------------------------------

    def serialize(self) -> str:
        """The collection as a pretty-printed JSON array."""
        return json.dumps(
            [record.to_wire() for record in self._records],
            indent=2,
            ensure_ascii=False,
        )

    def deserialize(self, text: str) -> list[EmployeeRecord]:
        """
        Parse a JSON array of records without touching the collection.

        Raises:
            InvalidPayloadError: If the payload is not a valid record array
        """
        return self._validator.parse(text)

    def import_json(
        self,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> MutationResult:
        """
        Replace the collection with the records of a JSON export.

        The payload is validated as a whole first; nothing changes if any
        record is invalid.
        """
        return self.replace_all(self.deserialize(text), correlation_id)

    def export_json(self) -> str:
        """
        JSON export of the collection.

        Raises:
            ExportError: If there is nothing to export
        """
        if not self._records:
            raise ExportError("No employee data to export.")
        return self.serialize()
