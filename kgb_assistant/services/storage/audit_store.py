"""
Key-Value Audit Storage

The audit trail lives next to the employee data, under its own key, as a
JSON array of events. It is capped: once max_events is reached the oldest
events are dropped.
"""

import json

import structlog

from kgb_assistant.models.audit import AuditEvent
from kgb_assistant.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class KeyValueAuditStorage(AuditStorageInterface):
    """Append-only audit trail stored under a single key."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str = "kgb-assistant-audit",
        max_events: int = 1000,
    ):
        self._storage = storage
        self._key = key
        self._max_events = max_events

    def _load(self) -> list[dict]:
        raw = self._storage.get(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("audit_trail_corrupted", key=self._key)
            return []
        return data if isinstance(data, list) else []

    def _events(self) -> list[AuditEvent]:
        events = []
        for item in self._load():
            try:
                events.append(AuditEvent.model_validate(item))
            except ValueError:
                continue  # Skip malformed entries
        return events

    def append_event(self, event: AuditEvent) -> bool:
        try:
            entries = self._load()
            entries.append(event.model_dump(mode="json"))
            entries = entries[-self._max_events:]
            self._storage.set(self._key, json.dumps(entries))
            return True
        except StorageError as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning("audit_append_failed", error=str(e))
            return False

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

    def get_events_by_entity(self, entity_id: str) -> list[AuditEvent]:
        events = [e for e in self._events() if entity_id in e.entity_ids]
        events.sort(key=lambda e: e.timestamp)
        return events
