"""
Main Orchestrator for KGB Assistant

This module ties together all the components and defines the
end-to-end flows for:
1. Data transfer (file → rows → records → store, and store → file)
2. Promotion analysis (candidates → agent → suggestions)

DESIGN DECISION: The orchestrator enforces the boundaries:
- An import either replaces the whole collection or changes nothing
- Files are size- and type-checked before they are parsed
- Every step is audited under one correlation id
"""

from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence, Union
from uuid import UUID

import structlog

from kgb_assistant.agents import (
    PromotionAgent,
    PromotionCandidate,
    PromotionSuggestionResult,
)
from kgb_assistant.audit import AuditLogger, create_correlation_id
from kgb_assistant.config import get_settings
from kgb_assistant.models.employee import MutationResult, SkippedRow
from kgb_assistant.repository import EmployeeRepository
from kgb_assistant.services.spreadsheet import (
    SpreadsheetExporter,
    SpreadsheetImporter,
    read_rows,
)
from kgb_assistant.services.storage import (
    JsonFileKeyValueStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
)
from kgb_assistant.validation import ImportValidationError


logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def default_json_filename(today: Optional[date] = None) -> str:
    """File name of a JSON export, e.g. kgb-data-export-2025-01-31.json."""
    return f"kgb-data-export-{(today or date.today()).isoformat()}.json"


def default_spreadsheet_filename(start_year: int, end_year: int) -> str:
    return f"kgb-report-{start_year}-{end_year}.xlsx"


def _resolve_target(path: PathLike, default_name: str) -> Path:
    target = Path(path)
    if target.is_dir():
        target = target / default_name
    return target


class DataTransferFlow:
    """
    Orchestrates imports into and exports out of the record store.

    Flow (import):
    1. Check → file type and size
    2. Read → JSON text or spreadsheet rows
    3. Parse → validate the payload / apply the import strategy
    4. Replace → swap the whole collection in the store

    A rejected import leaves the collection untouched.
    """

    def __init__(
        self,
        repository: EmployeeRepository,
        importer: Optional[SpreadsheetImporter] = None,
        exporter: Optional[SpreadsheetExporter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = get_settings()
        self._repository = repository
        self._importer = importer or SpreadsheetImporter(settings.kgb.import_strategy)
        self._exporter = exporter or SpreadsheetExporter(repository.cycle_length_years)
        self._audit_logger = audit_logger
        self._max_bytes = settings.app.max_upload_size_bytes
        self._formats = settings.app.supported_formats_list

    def _check_file(self, path: Path, size: int) -> str:
        extension = path.suffix.lower().lstrip(".")
        if extension not in self._formats:
            raise ImportValidationError(
                f"Unsupported file type '.{extension}'. "
                f"Supported: {', '.join(self._formats)}"
            )
        if size > self._max_bytes:
            raise ImportValidationError(
                f"File is too large ({size / (1024 * 1024):.1f} MB). "
                f"Maximum is {self._max_bytes // (1024 * 1024)} MB."
            )
        return extension

    def import_file(
        self,
        path: PathLike,
        content: Optional[bytes] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[MutationResult, list[SkippedRow]]:
        """
        Import a .json export or a spreadsheet, replacing the collection.

        Args:
            path: File path, or just the file name when content is given
            content: Raw file bytes (e.g. from an upload); read from disk if None

        Returns:
            (mutation_result, skipped_rows)

        Raises:
            ImportValidationError: if the file is rejected; nothing changes
        """
        correlation_id = correlation_id or create_correlation_id()
        path = Path(path)

        rows = None
        try:
            size = len(content) if content is not None else path.stat().st_size
            extension = self._check_file(path, size)
            if content is None:
                content = path.read_bytes()

            if extension == "json":
                result = self._repository.import_json(
                    content.decode("utf-8-sig"), correlation_id
                )
            else:
                rows = read_rows(path, content)

        except (ImportValidationError, UnicodeDecodeError, OSError) as e:
            logger.warning("import_failed", source=path.name, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_import_failed(path.name, str(e), correlation_id)
            if isinstance(e, ImportValidationError):
                raise
            raise ImportValidationError(f"Could not read {path.name}: {e}") from e

        if rows is not None:
            return self.import_rows(rows, source=path.name, correlation_id=correlation_id)

        if self._audit_logger:
            self._audit_logger.log_data_imported(
                source=path.name,
                strategy="json",
                record_count=result.count,
                correlation_id=correlation_id,
            )
        return result, []

    def import_rows(
        self,
        rows: Sequence[Sequence[Any]],
        source: str = "rows",
        correlation_id: Optional[UUID] = None,
    ) -> tuple[MutationResult, list[SkippedRow]]:
        """
        Import spreadsheet rows (header first), replacing the collection.

        Raises:
            SpreadsheetImportError: if the sheet cannot be imported
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            parsed = self._importer.parse_rows(rows)
        except ImportValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_import_failed(source, str(e), correlation_id)
            raise

        result = self._repository.replace_all(parsed.records, correlation_id)

        if self._audit_logger:
            self._audit_logger.log_data_imported(
                source=source,
                strategy=parsed.strategy,
                record_count=parsed.record_count,
                skipped_count=len(parsed.skipped),
                correlation_id=correlation_id,
            )
        return result, parsed.skipped

    def export_json(
        self,
        path: Optional[PathLike] = None,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Serialize the collection; also write it when a path is given.

        A directory path receives the default kgb-data-export-<date>.json.

        Raises:
            ExportError: if the collection is empty
        """
        text = self._repository.export_json()
        target = "memory"

        if path is not None:
            file_path = _resolve_target(path, default_json_filename())
            file_path.write_text(text, encoding="utf-8")
            target = str(file_path)

        if self._audit_logger:
            self._audit_logger.log_data_exported(
                target=target,
                export_format="json",
                record_count=len(self._repository),
                correlation_id=correlation_id,
            )
        return text

    def export_spreadsheet(
        self,
        start_year: int,
        end_year: int,
        path: Optional[PathLike] = None,
        correlation_id: Optional[UUID] = None,
    ) -> bytes:
        """
        Render the year-matrix report; also write it when a path is given.

        Raises:
            ExportError: if the collection is empty or the range is invalid
        """
        content = self._exporter.export(self._repository.all(), start_year, end_year)
        target = "memory"

        if path is not None:
            file_path = _resolve_target(
                path, default_spreadsheet_filename(start_year, end_year)
            )
            file_path.write_bytes(content)
            target = str(file_path)

        if self._audit_logger:
            self._audit_logger.log_data_exported(
                target=target,
                export_format="xlsx",
                record_count=len(self._repository),
                correlation_id=correlation_id,
            )
        return content


class PromotionFlow:
    """
    Orchestrates promotion analysis.

    The agent is created on first use, so the rest of the application
    works without a Gemini API key.
    """

    def __init__(
        self,
        agent: Optional[PromotionAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._agent = agent
        self._audit_logger = audit_logger

    async def suggest(
        self,
        candidates: list[PromotionCandidate],
        number_of_suggestions: int = 3,
        correlation_id: Optional[UUID] = None,
    ) -> PromotionSuggestionResult:
        """Ask the agent for suggestions; failures come back in the result."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            if self._agent is None:
                self._agent = PromotionAgent()
        except Exception as e:
            result = PromotionSuggestionResult(
                success=False,
                error=f"AI analysis failed: {e}",
            )
        else:
            result = await self._agent.suggest_candidates(candidates, number_of_suggestions)

        if self._audit_logger:
            if result.success:
                self._audit_logger.log_promotion_suggested(
                    candidate_count=len(candidates),
                    suggestion_count=len(result.suggestions),
                    correlation_id=correlation_id,
                )
            else:
                self._audit_logger.log_ai_service_error(
                    service="gemini",
                    error_message=result.error or "",
                    correlation_id=correlation_id,
                )
        return result


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
) -> tuple[EmployeeRepository, DataTransferFlow, PromotionFlow]:
    """
    Factory function to create all application components.

    Args:
        storage: Key-value backend for employees and the audit trail.
                 Defaults to the JSON file at KGB_STORAGE_PATH.

    Returns:
        (repository, data_transfer_flow, promotion_flow)
    """
    settings = get_settings().kgb

    if storage is None:
        storage = JsonFileKeyValueStorage(settings.storage_path)

    audit_logger = AuditLogger(
        KeyValueAuditStorage(
            storage,
            key=settings.audit_storage_key,
            max_events=settings.audit_max_events,
        )
    )

    repository = EmployeeRepository(
        storage,
        cycle_length_years=settings.cycle_length_years,
        storage_key=settings.storage_key,
        audit_logger=audit_logger,
    )
    loaded = repository.load()
    if loaded.warning:
        logger.warning("startup_load_warning", warning=loaded.warning)

    data_transfer_flow = DataTransferFlow(repository, audit_logger=audit_logger)
    promotion_flow = PromotionFlow(audit_logger=audit_logger)

    return repository, data_transfer_flow, promotion_flow
