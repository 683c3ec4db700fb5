"""
Field-scoped validation errors.

Every error in this module is recovered locally: the write that raised it
is rejected, the prior value is kept and the error is handed back to the
caller for display.
"""

from typing import Any, Optional

from .base import HProxyError


class FieldValidationError(HProxyError):
    """Base exception for a rejected field write."""

    code = "invalid"

    def __init__(self, field: str, message: str, value: Any = None,
                 section_id: Optional[str] = None):
        self.field = field
        self.message = message
        self.value = value
        self.section_id = section_id
        super().__init__(f"Validation error for field '{field}': {message}")

    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'field': self.field,
            'section_id': self.section_id,
            'message': self.message,
        }


class EmptyRequiredField(FieldValidationError):
    """A required, visible field received an empty value."""

    code = "empty_required"

    def __init__(self, field: str, section_id: Optional[str] = None):
        super().__init__(field, "Expecting: non-empty value", None, section_id)


class InvalidFormat(FieldValidationError):
    """The value does not match the field's datatype or option list."""

    code = "invalid_format"

    def __init__(self, field: str, expected: str, value: Any = None,
                 section_id: Optional[str] = None):
        self.expected = expected
        super().__init__(field, f"Expecting: {expected}", value, section_id)


class DuplicateIdentifier(FieldValidationError):
    """A unique value (label, identifier, list entry) already exists."""

    code = "duplicate"

    def __init__(self, field: str, value: Any = None, section_id: Optional[str] = None,
                 message: Optional[str] = None):
        super().__init__(field, message or f"{value!r} already exists", value, section_id)


class RecursiveReference(FieldValidationError):
    """A reference edge would introduce a self-loop or a cycle."""

    code = "recursive_reference"

    def __init__(self, field: str, value: Any = None, section_id: Optional[str] = None,
                 path: Optional[list] = None):
        self.path = path or []
        message = "Recursive reference detected"
        if self.path:
            message += ": " + " -> ".join(self.path)
        super().__init__(field, message, value, section_id)


class ConflictingSelection(FieldValidationError):
    """An exclusive sentinel was combined with other selections."""

    code = "conflicting_selection"

    def __init__(self, field: str, sentinel: str, value: Any = None,
                 section_id: Optional[str] = None):
        self.sentinel = sentinel
        super().__init__(field, f"If '{sentinel}' is selected, uncheck others", value, section_id)


class ReadOnlyField(FieldValidationError):
    """The field cannot be written in the current configuration."""

    code = "read_only"

    def __init__(self, field: str, value: Any = None, section_id: Optional[str] = None):
        super().__init__(field, "Field is read-only", value, section_id)
