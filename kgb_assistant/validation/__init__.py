"""Import payload validation package."""

from kgb_assistant.validation.validator import (
    ImportValidationError,
    InvalidPayloadError,
    PayloadValidator,
)

__all__ = ["ImportValidationError", "InvalidPayloadError", "PayloadValidator"]
