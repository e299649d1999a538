"""
Import Payload Validation

DESIGN DECISION: A JSON import replaces the whole collection, so it is
all-or-nothing. Every item is checked and every problem is collected before
deciding; the caller gets the complete list of issues in one go instead of
fixing a file one error at a time.

IMPORTANT: Validation NEVER silently fixes issues. An id that appears twice
or a record without a NIP rejects the whole payload.
"""

import json
from typing import Any, Optional

from pydantic import ValidationError

from kgb_assistant.models.employee import (
    EmployeeRecord,
    ValidationIssue,
    ValidationResult,
)


# Wire name -> accepted spellings (wire alias first)
REQUIRED_FIELDS = {
    "id": ("id",),
    "name": ("name",),
    "position": ("position",),
    "nip": ("nip", "national_id"),
    "lastKGBDate": ("lastKGBDate", "last_review_date"),
}


class ImportValidationError(Exception):
    """Base class for rejected imports. Nothing was changed."""
    pass


class InvalidPayloadError(ImportValidationError):
    """A JSON import payload failed validation."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []


class PayloadValidator:
    """Validates a decoded JSON import payload."""

    def _check_item(self, index: int, item: Any) -> list[ValidationIssue]:
        issues = []

        if not isinstance(item, dict):
            return [ValidationIssue(
                index=index,
                field="record",
                issue_type="invalid_format",
                message=f"Item {index} is not an object",
            )]

        for wire_name, spellings in REQUIRED_FIELDS.items():
            value = next((item[s] for s in spellings if s in item), None)
            if value is None or (isinstance(value, str) and not value.strip()):
                issues.append(ValidationIssue(
                    index=index,
                    field=wire_name,
                    issue_type="missing",
                    message=f"Item {index} has no value for '{wire_name}'",
                ))

        return issues

    def _parse_item(
        self,
        index: int,
        item: dict,
    ) -> tuple[Optional[EmployeeRecord], list[ValidationIssue]]:
        try:
            return EmployeeRecord.model_validate(item), []
        except ValidationError as e:
            issues = []
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "record"
                issues.append(ValidationIssue(
                    index=index,
                    field=field,
                    issue_type="invalid_value",
                    message=f"Item {index}, '{field}': {error['msg']}",
                ))
            return None, issues

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate a decoded payload.

        Args:
            data: Whatever json.loads produced

        Returns:
            ValidationResult; records are only filled when the payload is
            valid as a whole.
        """
        if not isinstance(data, list):
            return ValidationResult(
                is_valid=False,
                issues=[ValidationIssue(
                    field="payload",
                    issue_type="invalid_format",
                    message="Expected a JSON array of employee records",
                )],
            )

        issues: list[ValidationIssue] = []
        records: list[EmployeeRecord] = []
        seen_ids: set[str] = set()

        for index, item in enumerate(data):
            shape_issues = self._check_item(index, item)
            if shape_issues:
                issues.extend(shape_issues)
                continue

            record, parse_issues = self._parse_item(index, item)
            if record is None:
                issues.extend(parse_issues)
                continue

            if record.id in seen_ids:
                issues.append(ValidationIssue(
                    index=index,
                    field="id",
                    issue_type="duplicate",
                    message=f"Item {index} repeats id {record.id}",
                ))
                continue

            seen_ids.add(record.id)
            records.append(record)

        is_valid = not issues
        return ValidationResult(
            is_valid=is_valid,
            issues=issues,
            records=records if is_valid else [],
        )

    def parse(self, text: str) -> list[EmployeeRecord]:
        """
        Decode and validate a JSON document.

        Raises:
            InvalidPayloadError: If the text is not JSON or fails validation
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise InvalidPayloadError(f"The file is not valid JSON: {e}")

        result = self.validate(data)
        if not result.is_valid:
            raise InvalidPayloadError(
                self.get_user_friendly_summary(result), result.issues
            )
        return result.records

    def get_user_friendly_summary(self, result: ValidationResult, max_items: int = 5) -> str:
        """Summarize validation issues for display."""
        if result.is_valid:
            return f"{len(result.records)} valid employee records."

        lines = [
            f"The file is not a valid employee data JSON "
            f"({result.error_count} problems):"
        ]
        for issue in result.issues[:max_items]:
            lines.append(f"   - {issue.message}")
        if len(result.issues) > max_items:
            lines.append(f"   ... and {len(result.issues) - max_items} more")
        return "\n".join(lines)
